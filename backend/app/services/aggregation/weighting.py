"""Time-decay weight for a parking report."""
from datetime import datetime

from app.core.constants import DECAY_WINDOW_DAYS
from app.utils.time import as_utc

_SECONDS_PER_DAY = 24 * 60 * 60


def decay_weight(recorded_at: datetime, now: datetime) -> float:
    """
    max(0, 1 - age_days / 30): 1.0 for a fresh report, 0.5 at 15 days, 0.0 from 30 days on.
    `now` is the only clock input to aggregation; callers pass it explicitly.
    """
    age_days = (as_utc(now) - as_utc(recorded_at)).total_seconds() / _SECONDS_PER_DAY
    if age_days >= DECAY_WINDOW_DAYS:
        return 0.0
    # Clock skew can put a report slightly in the future; it still counts fully.
    return min(1.0, max(0.0, 1.0 - age_days / DECAY_WINDOW_DAYS))
