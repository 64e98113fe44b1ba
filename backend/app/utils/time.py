"""Time helpers. Everything is UTC internally; SQLite hands back naive datetimes."""
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from app.config import settings
from app.core.constants import DINNER_START_HOUR
from app.core.enums import TimeSlot


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes; convert aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def service_local(value: datetime) -> datetime:
    """Aware datetimes converted to the service wall clock; naive ones are taken as already local."""
    if value.tzinfo is None:
        return value
    return value.astimezone(ZoneInfo(settings.service_timezone))


def current_time_slot(now: datetime | None = None) -> TimeSlot:
    """Time slot for a visit at `now` on the service wall clock: weekend, weekday dinner from 18:00, else lunch."""
    local = service_local(now or utc_now())
    if local.weekday() >= 5:
        return TimeSlot.WEEKEND
    if local.hour >= DINNER_START_HOUR:
        return TimeSlot.WEEKDAY_DINNER
    return TimeSlot.WEEKDAY_LUNCH
