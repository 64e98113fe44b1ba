"""
Record a parking experience and keep parking_stats in step.

Recording and stats recomputation are best-effort coupled: once the report is committed it counts
as recorded even if the recompute fails. The failure is logged because the pair's stats stay stale
until its next qualifying report or the daily rebuild.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.enums import ParkingExperience, TimeSlot
from app.models.parking_report import ParkingReport
from app.models.parking_stats import ParkingStats
from app.services.aggregation import recompute_stats_for_place_timeslot, update_stats_on_new_report
from app.utils.region import extract_region_from_address
from app.utils.time import current_time_slot, utc_now

logger = logging.getLogger(__name__)


@dataclass
class RecordResult:
    report: ParkingReport
    created: bool
    stats: ParkingStats | None = None
    stats_updated: bool = False  # False when the recompute raised; stats for the pair are stale


def _normalize_experience(parking_available: bool, experience: ParkingExperience | str | None) -> str | None:
    """No parking -> no experience (stored as NULL). Parking but no answer -> unknown."""
    if not parking_available:
        return None
    if experience is None:
        return ParkingExperience.UNKNOWN.value
    return ParkingExperience(experience).value


def _apply(
    report: ParkingReport,
    place_id: str,
    parking_available: bool,
    experience: str | None,
    slot: str,
    visit_date: date,
    region_id: str | None,
) -> None:
    # A region tag belongs to the place: moving to another place drops the old tag even with no address.
    if region_id is not None or report.place_id != place_id:
        report.region_id = region_id
    report.place_id = place_id
    report.parking_available = parking_available
    report.parking_experience = experience
    report.time_slot = slot
    report.visit_date = visit_date


def _upsert_report(
    db: Session,
    room_id: str,
    participant_id: str,
    now: datetime,
    **fields,
) -> tuple[ParkingReport, bool, tuple[str, str] | None]:
    """Insert or overwrite by (room_id, participant_id). Returns (report, created, previous qualifying pair)."""
    report = (
        db.query(ParkingReport)
        .filter(ParkingReport.room_id == room_id, ParkingReport.participant_id == participant_id)
        .first()
    )
    if report is None:
        report = ParkingReport(room_id=room_id, participant_id=participant_id, reported_at=now)
        _apply(report, **fields)
        db.add(report)
        try:
            db.commit()
            return report, True, None
        except IntegrityError:
            # Same participant submitted twice concurrently; fall through and overwrite the winner.
            db.rollback()
            report = (
                db.query(ParkingReport)
                .filter(ParkingReport.room_id == room_id, ParkingReport.participant_id == participant_id)
                .one()
            )

    previous = (report.place_id, report.time_slot) if report.parking_available else None
    _apply(report, **fields)
    db.commit()
    return report, False, previous


def record_parking_report(
    db: Session,
    *,
    room_id: str,
    participant_id: str,
    place_id: str,
    parking_available: bool,
    parking_experience: ParkingExperience | str | None = None,
    time_slot: TimeSlot | str | None = None,
    visit_date: date | None = None,
    address: str | None = None,
    now: datetime | None = None,
) -> RecordResult:
    """
    Store the report (one per room + participant; resubmissions overwrite) and recompute the
    stats of its (place_id, time_slot). Store errors while writing the report propagate; errors
    in the recompute are logged and reported via RecordResult.stats_updated.
    """
    now = now or utc_now()
    slot = TimeSlot(time_slot).value if time_slot else current_time_slot(now).value
    report, created, previous = _upsert_report(
        db,
        room_id,
        participant_id,
        now,
        place_id=place_id,
        parking_available=parking_available,
        experience=_normalize_experience(parking_available, parking_experience),
        slot=slot,
        visit_date=visit_date or now.date(),
        region_id=extract_region_from_address(address),
    )
    result = RecordResult(report=report, created=created)
    pair = (report.place_id, report.time_slot)

    try:
        result.stats = update_stats_on_new_report(db, report, now=now)
        # An overwrite that moved the report out of a qualifying pair leaves that pair stale otherwise.
        if previous is not None and (previous != pair or not report.parking_available):
            recompute_stats_for_place_timeslot(db, previous[0], previous[1], now=now)
        result.stats_updated = True
    except Exception as e:
        db.rollback()
        logger.exception(
            "record_parking_report: report stored but stats recompute failed for %s/%s: %s",
            pair[0], pair[1], e,
        )
    return result
