"""
Promotion policy: the one automatic edge of the region lifecycle is OPEN -> CANDIDATE.
CANDIDATE -> CORE is an operator decision (scripts/set_region_status.py). Statuses without an
automatic edge are never evaluated, so the batch cannot demote or skip ahead.
"""
from datetime import datetime

from app.core.constants import PROMOTION_THRESHOLDS
from app.core.enums import RegionStatus
from app.services.region.metrics import RegionMetrics
from app.utils.time import utc_now

AUTOMATIC_TRANSITIONS: dict[RegionStatus, RegionStatus] = {
    RegionStatus.OPEN: RegionStatus.CANDIDATE,
}


def next_automatic_status(status: RegionStatus | str | None) -> RegionStatus | None:
    return AUTOMATIC_TRANSITIONS.get(RegionStatus.parse(status))


def meets_promotion_criteria(metrics: RegionMetrics | None, now: datetime | None = None) -> bool:
    """All thresholds at once. Missing metrics or fields mean "not yet eligible", never an error."""
    if metrics is None:
        return False
    days = metrics.days_since_first_record(now or utc_now())
    values = {
        "total_records": metrics.total_records,
        "unique_participants": metrics.unique_participants,
        "time_slot_count": metrics.time_slot_count,
        "days_since_first_record": days,
    }
    for name, threshold in PROMOTION_THRESHOLDS.items():
        value = values.get(name)
        if value is None or value < threshold:
            return False
    return True


def should_promote(
    metrics: RegionMetrics | None,
    status: RegionStatus | str | None,
    now: datetime | None = None,
) -> bool:
    if next_automatic_status(status) is None:
        return False
    return meets_promotion_criteria(metrics, now)
