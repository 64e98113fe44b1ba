"""
Per-region participation metrics, computed from every parking report tagged with the region
(any place, any time slot, with or without parking). Pure read; feeds the promotion policy.
"""
import math
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import distinct, func
from sqlalchemy.orm import Session

from app.models.parking_report import ParkingReport
from app.utils.time import as_utc

_SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class RegionMetrics:
    total_records: int
    unique_participants: int
    time_slot_count: int
    first_recorded_at: datetime | None
    last_recorded_at: datetime | None

    def days_since_first_record(self, now: datetime) -> int | None:
        """Whole days elapsed since the first report (floored)."""
        if self.first_recorded_at is None:
            return None
        elapsed = (as_utc(now) - as_utc(self.first_recorded_at)).total_seconds()
        return math.floor(elapsed / _SECONDS_PER_DAY)


def aggregate_region_metrics(db: Session, region_id: str) -> RegionMetrics | None:
    """One aggregate query over the region's reports. None when the region has no reports."""
    row = (
        db.query(
            func.count(ParkingReport.id),
            func.count(distinct(ParkingReport.participant_id)),
            func.count(distinct(ParkingReport.time_slot)),
            func.min(ParkingReport.reported_at),
            func.max(ParkingReport.reported_at),
        )
        .filter(ParkingReport.region_id == region_id)
        .one()
    )
    total, participants, slots, first_at, last_at = row
    if not total:
        return None
    return RegionMetrics(
        total_records=int(total),
        unique_participants=int(participants or 0),
        time_slot_count=int(slots or 0),
        first_recorded_at=as_utc(first_at) if first_at is not None else None,
        last_recorded_at=as_utc(last_at) if last_at is not None else None,
    )


def list_region_ids(db: Session) -> list[str]:
    """Distinct non-null region ids present in parking_reports, sorted for stable batch order."""
    rows = (
        db.query(ParkingReport.region_id)
        .filter(ParkingReport.region_id.isnot(None))
        .distinct()
        .all()
    )
    return sorted(r[0] for r in rows if r[0])
