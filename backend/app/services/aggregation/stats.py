"""
Recompute parking_stats for one (place_id, time_slot) from the current parking_reports.

Always a full recompute from the authoritative report set, never a running-sum patch: decay
weights depend on "now", so stored partial sums would go stale on their own.
"""
import hashlib
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Protocol

from sqlalchemy import text
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from app.core.constants import PARTIAL_SUCCESS_WEIGHT, SUCCESS_RATE_DECIMALS
from app.core.enums import ParkingExperience, TimeSlot
from app.models.parking_report import ParkingReport
from app.models.parking_stats import ParkingStats
from app.services.aggregation.weighting import decay_weight
from app.utils.time import utc_now

logger = logging.getLogger(__name__)


class ReportLike(Protocol):
    reported_at: datetime
    parking_experience: str | None


@dataclass(frozen=True)
class StatsSnapshot:
    """Result of aggregating one report set; what gets written to parking_stats."""
    total_attempts: int
    success_count: int
    partial_count: int
    fail_count: int
    unknown_count: int
    success_rate: float


@dataclass
class StatsRebuildResult:
    recomputed: int = 0
    empty: int = 0
    failed: dict[str, str] = field(default_factory=dict)  # "place_id|time_slot" -> error


def _pair_lock_key(place_id: str, time_slot: str) -> int:
    """Deterministic bigint for the PostgreSQL advisory lock of one (place_id, time_slot)."""
    h = hashlib.sha256(f"parking_stats|{place_id}|{time_slot}".encode()).digest()[:8]
    return int.from_bytes(h, "big") % (2**63)


def _lock_pair(db: Session, dialect: str, place_id: str, time_slot: str) -> None:
    """One writer per pair across workers until the transaction ends. SQLite (tests) has a single writer."""
    if dialect == "postgresql":
        db.execute(text("SELECT pg_advisory_xact_lock(:k)"), {"k": _pair_lock_key(place_id, time_slot)})


def compute_stats(reports: Iterable[ReportLike], now: datetime) -> StatsSnapshot | None:
    """
    Weighted success rate over parking-available reports:
      (w_success + 0.5 * w_partial) / (w_total - w_unknown), 0 when the denominator is 0.
    Raw counts ignore decay. A missing experience on an available report counts as unknown.
    Returns None for an empty report set.
    """
    weighted = {experience: 0.0 for experience in ParkingExperience}
    counts = {experience: 0 for experience in ParkingExperience}
    total_weight = 0.0
    total = 0

    for report in reports:
        weight = decay_weight(report.reported_at, now)
        try:
            experience = ParkingExperience(report.parking_experience)
        except ValueError:
            experience = ParkingExperience.UNKNOWN
        weighted[experience] += weight
        counts[experience] += 1
        total_weight += weight
        total += 1

    if total == 0:
        return None

    effective_weight = total_weight - weighted[ParkingExperience.UNKNOWN]
    success_rate = 0.0
    if effective_weight > 0:
        success_rate = (
            weighted[ParkingExperience.NO_PROBLEM]
            + weighted[ParkingExperience.MINOR_INCONVENIENCE] * PARTIAL_SUCCESS_WEIGHT
        ) / effective_weight

    return StatsSnapshot(
        total_attempts=total,
        success_count=counts[ParkingExperience.NO_PROBLEM],
        partial_count=counts[ParkingExperience.MINOR_INCONVENIENCE],
        fail_count=counts[ParkingExperience.COULD_NOT_PARK],
        unknown_count=counts[ParkingExperience.UNKNOWN],
        success_rate=round(success_rate, SUCCESS_RATE_DECIMALS),
    )


def recompute_stats_for_place_timeslot(
    db: Session,
    place_id: str,
    time_slot: TimeSlot | str,
    now: datetime | None = None,
) -> ParkingStats | None:
    """
    Rebuild the parking_stats row for (place_id, time_slot) from every parking-available report.
    The pair lock is taken before the reports are read and held until commit, so a writer that
    read an older report set can never overwrite a newer snapshot.
    No qualifying reports -> None and nothing is written. Store errors propagate; no retries here.
    """
    slot = TimeSlot(time_slot).value
    now = now or utc_now()

    dialect = db.get_bind().dialect.name
    _lock_pair(db, dialect, place_id, slot)
    reports = (
        db.query(ParkingReport)
        .filter(
            ParkingReport.place_id == place_id,
            ParkingReport.time_slot == slot,
            ParkingReport.parking_available.is_(True),
        )
        .all()
    )
    snapshot = compute_stats(reports, now)
    if snapshot is None:
        db.commit()  # releases the pair lock
        logger.debug("recompute_stats: no qualifying reports for %s/%s", place_id, slot)
        return None

    values = {
        "place_id": place_id,
        "time_slot": slot,
        "total_attempts": snapshot.total_attempts,
        "success_count": snapshot.success_count,
        "partial_count": snapshot.partial_count,
        "fail_count": snapshot.fail_count,
        "unknown_count": snapshot.unknown_count,
        "success_rate": snapshot.success_rate,
        "last_updated": now,
    }
    insert = sqlite_insert if dialect == "sqlite" else pg_insert
    stmt = insert(ParkingStats).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=["place_id", "time_slot"],
        set_={k: stmt.excluded[k] for k in values if k not in ("place_id", "time_slot")},
    )
    db.execute(stmt)
    db.commit()

    logger.debug(
        "recompute_stats: %s/%s attempts=%s success_rate=%s",
        place_id, slot, snapshot.total_attempts, snapshot.success_rate,
    )
    return (
        db.query(ParkingStats)
        .filter(ParkingStats.place_id == place_id, ParkingStats.time_slot == slot)
        .one()
    )


def update_stats_on_new_report(
    db: Session,
    report: ParkingReport,
    now: datetime | None = None,
) -> ParkingStats | None:
    """
    Hook for a freshly stored report: recompute its (place_id, time_slot) only.
    Reports without parking never touch statistics. Replays converge because the
    recompute always starts from the stored report set.
    """
    if not report.parking_available:
        return None
    return recompute_stats_for_place_timeslot(db, report.place_id, report.time_slot, now=now)


def recalculate_all_stats(db: Session, now: datetime | None = None) -> StatsRebuildResult:
    """
    Daily full rebuild: recompute every (place_id, time_slot) that has parking-available reports.
    A failing pair is logged and skipped; the rest still run.
    """
    now = now or utc_now()
    pairs = (
        db.query(ParkingReport.place_id, ParkingReport.time_slot)
        .filter(ParkingReport.parking_available.is_(True))
        .distinct()
        .all()
    )
    result = StatsRebuildResult()
    for place_id, time_slot in pairs:
        try:
            stats = recompute_stats_for_place_timeslot(db, place_id, time_slot, now=now)
        except Exception as e:
            db.rollback()
            logger.exception("recalculate_all_stats: failed for %s/%s: %s", place_id, time_slot, e)
            result.failed[f"{place_id}|{time_slot}"] = str(e)
            continue
        if stats is None:
            result.empty += 1
        else:
            result.recomputed += 1

    logger.info(
        "recalculate_all_stats: pairs=%s recomputed=%s failed=%s",
        len(pairs), result.recomputed, len(result.failed),
    )
    return result
