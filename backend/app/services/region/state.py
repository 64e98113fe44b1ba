"""
Region state reads and the operator-only manual transition.

Missing rows resolve to OPEN: a region nobody has aggregated yet never shows statistics.
"""
import logging
from datetime import datetime
from typing import Iterable

from sqlalchemy.orm import Session

from app.core.constants import ACTOR_OPERATOR
from app.core.enums import RegionStatus
from app.models.region_promotion_audit import RegionPromotionAudit
from app.models.region_state import RegionState
from app.services.region.metrics import aggregate_region_metrics
from app.utils.time import utc_now

logger = logging.getLogger(__name__)


def get_region_status(db: Session, region_id: str | None) -> RegionStatus:
    if not region_id:
        return RegionStatus.OPEN
    row = db.query(RegionState.status).filter(RegionState.region_id == region_id).first()
    return RegionStatus.parse(row[0] if row else None)


def get_region_statuses(db: Session, region_ids: Iterable[str | None]) -> dict[str, RegionStatus]:
    """Batched lookup: one query for all ids. Ids without a row are OPEN."""
    ids = {r for r in region_ids if r}
    statuses = {r: RegionStatus.OPEN for r in ids}
    if not ids:
        return statuses
    rows = db.query(RegionState.region_id, RegionState.status).filter(RegionState.region_id.in_(ids)).all()
    for region_id, status in rows:
        statuses[region_id] = RegionStatus.parse(status)
    return statuses


def set_region_status_manually(
    db: Session,
    region_id: str,
    status: RegionStatus | str,
    note: str | None = None,
    now: datetime | None = None,
) -> RegionState:
    """
    Operator action (e.g. CANDIDATE -> CORE after review, or a rollback). Not called by the batch.
    Creates the state row if the region was never aggregated and records an audit row.
    Setting the current status again is a no-op.
    """
    target = RegionStatus(status)
    now = now or utc_now()
    row = db.query(RegionState).filter(RegionState.region_id == region_id).first()
    if row is None:
        row = RegionState(region_id=region_id, status=RegionStatus.OPEN.value)
        db.add(row)
        db.flush()

    current = row.region_status
    if current is target:
        logger.info("set_region_status_manually: %s already %s", region_id, target.value)
        return row

    metrics = aggregate_region_metrics(db, region_id)
    row.status = target.value
    if target.rank > current.rank:
        row.promoted_at = now
    db.add(RegionPromotionAudit(
        region_id=region_id,
        from_status=current.value,
        to_status=target.value,
        actor=ACTOR_OPERATOR,
        promoted_at=now,
        total_records=metrics.total_records if metrics else None,
        unique_participants=metrics.unique_participants if metrics else None,
        time_slot_count=metrics.time_slot_count if metrics else None,
        days_since_first_record=metrics.days_since_first_record(now) if metrics else None,
        note=note,
    ))
    db.commit()
    logger.warning(
        "REGION STATUS CHANGED BY OPERATOR: region=%s %s -> %s note=%s",
        region_id, current.value, target.value, note,
    )
    return row
