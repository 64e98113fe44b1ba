"""
Daily region promotion batch: aggregate metrics for every region seen in parking_reports,
refresh its RegionState snapshot, and promote OPEN regions that meet the policy to CANDIDATE.

Not transactional across regions. Each region commits on its own, so a crash leaves some regions
updated and a rerun simply re-derives the same metrics and repeats any pending promotion.
"""
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from time import monotonic

from sqlalchemy.orm import Session

from app.core.constants import ACTOR_BATCH
from app.core.enums import RegionStatus
from app.models.region_promotion_audit import RegionPromotionAudit
from app.models.region_state import RegionState
from app.services.region.metrics import RegionMetrics, aggregate_region_metrics, list_region_ids
from app.services.region.policy import next_automatic_status, should_promote
from app.utils.time import utc_now

logger = logging.getLogger(__name__)

# Single-flight: an overlapping run (scheduler + manual script in one process) returns immediately.
_batch_lock = threading.Lock()


@dataclass
class PromotionBatchResult:
    started_at: datetime
    finished_at: datetime | None = None
    promoted: list[str] = field(default_factory=list)
    succeeded: list[str] = field(default_factory=list)
    skipped_no_data: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)  # region_id -> error
    unprocessed: list[str] = field(default_factory=list)  # left over after the soft timeout
    interrupted: bool = False
    skipped: bool = False  # another run was in progress

    @property
    def ok(self) -> bool:
        return not self.skipped and not self.failed and not self.interrupted

    def summary(self) -> dict:
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "promoted": list(self.promoted),
            "succeeded": len(self.succeeded),
            "skipped_no_data": len(self.skipped_no_data),
            "failed": dict(self.failed),
            "unprocessed": len(self.unprocessed),
            "interrupted": self.interrupted,
            "skipped": self.skipped,
        }


def _upsert_snapshot(db: Session, region_id: str, metrics: RegionMetrics, now: datetime) -> RegionState:
    row = db.query(RegionState).filter(RegionState.region_id == region_id).with_for_update().first()
    if row is None:
        row = RegionState(region_id=region_id, status=RegionStatus.OPEN.value)
        db.add(row)
    row.total_records = metrics.total_records
    row.unique_participants = metrics.unique_participants
    row.time_slot_count = metrics.time_slot_count
    row.first_recorded_at = metrics.first_recorded_at
    row.last_recorded_at = metrics.last_recorded_at
    row.last_aggregated_at = now
    return row


def _promote(db: Session, row: RegionState, metrics: RegionMetrics, now: datetime) -> RegionStatus:
    current = row.region_status
    target = next_automatic_status(current)
    row.status = target.value
    row.promoted_at = now
    days = metrics.days_since_first_record(now)
    db.add(RegionPromotionAudit(
        region_id=row.region_id,
        from_status=current.value,
        to_status=target.value,
        actor=ACTOR_BATCH,
        promoted_at=now,
        total_records=metrics.total_records,
        unique_participants=metrics.unique_participants,
        time_slot_count=metrics.time_slot_count,
        days_since_first_record=days,
    ))
    logger.info(
        "PROMOTION AUDIT (%s -> %s): region=%s promoted_at=%s total_records=%s unique_participants=%s "
        "time_slot_count=%s days_since_first_record=%s",
        current.value, target.value, row.region_id, now.isoformat(),
        metrics.total_records, metrics.unique_participants, metrics.time_slot_count, days,
    )
    return target


def process_region(db: Session, region_id: str, now: datetime) -> bool | None:
    """
    Aggregate, snapshot and (maybe) promote one region, committing on success.
    Returns True if promoted, False if not, None if the region has no reports (nothing written).
    """
    metrics = aggregate_region_metrics(db, region_id)
    if metrics is None:
        return None
    row = _upsert_snapshot(db, region_id, metrics, now)
    promoted = False
    if should_promote(metrics, row.status, now):
        _promote(db, row, metrics, now)
        promoted = True
    db.commit()
    return promoted


def run_region_promotion_batch(
    db: Session,
    now: datetime | None = None,
    soft_timeout_seconds: float | None = None,
) -> PromotionBatchResult:
    """
    Run once over all regions. Per-region failures are rolled back, logged and reported in
    result.failed; they never stop the run. With a soft timeout, the batch stops before starting
    the next region once the budget is spent and lists the rest in result.unprocessed.
    """
    now = now or utc_now()
    result = PromotionBatchResult(started_at=now)
    if not _batch_lock.acquire(blocking=False):
        logger.warning("region promotion batch: another run is in progress; skipping")
        result.skipped = True
        result.finished_at = utc_now()
        return result

    try:
        logger.info("region promotion batch: starting")
        region_ids = list_region_ids(db)
        deadline = monotonic() + soft_timeout_seconds if soft_timeout_seconds else None

        for i, region_id in enumerate(region_ids):
            if deadline is not None and monotonic() >= deadline:
                result.interrupted = True
                result.unprocessed = region_ids[i:]
                logger.warning(
                    "region promotion batch: soft timeout after %s regions; %s left for the next run",
                    i, len(result.unprocessed),
                )
                break
            try:
                promoted = process_region(db, region_id, now)
            except Exception as e:
                db.rollback()
                logger.exception("region promotion batch: region %s failed: %s", region_id, e)
                result.failed[region_id] = str(e)
                continue
            if promoted is None:
                result.skipped_no_data.append(region_id)
                continue
            result.succeeded.append(region_id)
            if promoted:
                result.promoted.append(region_id)
    finally:
        _batch_lock.release()

    result.finished_at = utc_now()
    logger.info(
        "region promotion batch: done regions=%s promoted=%s failed=%s interrupted=%s",
        len(result.succeeded), len(result.promoted), len(result.failed), result.interrupted,
    )
    return result


def run_promotion_batch(db: Session, now: datetime | None = None) -> list[str]:
    """Region ids promoted by this run."""
    return run_region_promotion_batch(db, now=now).promoted
