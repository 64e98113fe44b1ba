"""
Domain enums. Stored as their string values in String columns so the DB stays readable.
"""
from enum import Enum


class TimeSlot(str, Enum):
    WEEKDAY_LUNCH = "weekday-lunch"
    WEEKDAY_DINNER = "weekday-dinner"
    WEEKEND = "weekend"


class ParkingExperience(str, Enum):
    NO_PROBLEM = "no-problem"
    MINOR_INCONVENIENCE = "minor-inconvenience"
    COULD_NOT_PARK = "could-not-park"
    UNKNOWN = "unknown"


class RegionStatus(str, Enum):
    """Visibility lifecycle of a region. Declaration order is the promotion order."""

    OPEN = "OPEN"
    CANDIDATE = "CANDIDATE"
    CORE = "CORE"

    @property
    def rank(self) -> int:
        return list(RegionStatus).index(self)

    @classmethod
    def parse(cls, value: "str | RegionStatus | None") -> "RegionStatus":
        """Unknown or missing values resolve to OPEN (fail closed)."""
        if isinstance(value, RegionStatus):
            return value
        try:
            return cls((value or "").strip().upper())
        except ValueError:
            return cls.OPEN
