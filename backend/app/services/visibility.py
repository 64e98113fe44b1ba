"""
Visibility gate: the single place that decides whether parking statistics may leave the process.

Every route that can surface statistics (single place, multi-place) goes through this module.
Only CORE regions expose statistics. For OPEN and CANDIDATE regions the stats keys are removed
from the payload entirely, never sent as null.

Region resolution for a place: the region tag stored on its reports first, then the first two
tokens of the place address. No region, or no RegionState row, means OPEN.
"""
import logging
from typing import Any, Iterable

from sqlalchemy.orm import Session

from app.core.constants import (
    REGION_LABEL_AVAILABLE,
    REGION_LABEL_COLLECTING,
    STATS_FIELDS,
    STATS_VISIBLE_STATUSES,
)
from app.core.enums import RegionStatus
from app.models.parking_report import ParkingReport
from app.services.region.state import get_region_status, get_region_statuses
from app.utils.region import extract_region_from_address

logger = logging.getLogger(__name__)


def stats_visible(status: RegionStatus | str | None) -> bool:
    return RegionStatus.parse(status) in STATS_VISIBLE_STATUSES


def region_label(status: RegionStatus | str | None) -> str:
    """Public label sent to clients instead of the internal lifecycle status."""
    return REGION_LABEL_AVAILABLE if stats_visible(status) else REGION_LABEL_COLLECTING


def strip_stats_fields(payload: Any) -> Any:
    """Copy of payload with every STATS_FIELDS key deleted, recursing into dicts and lists."""
    if isinstance(payload, list):
        return [strip_stats_fields(item) for item in payload]
    if isinstance(payload, dict):
        return {k: strip_stats_fields(v) for k, v in payload.items() if k not in STATS_FIELDS}
    return payload


def gate_payload(status: RegionStatus | str | None, place_id: str | None, payload: dict[str, Any] | None) -> dict[str, Any]:
    """
    Stats payload for one place. CORE: the payload plus region_status=AVAILABLE.
    Otherwise the payload with every stats field removed, plus region_status=COLLECTING.
    """
    if not stats_visible(status):
        hidden = strip_stats_fields(payload or {})
        hidden["place_id"] = place_id if place_id is not None else hidden.get("place_id")
        hidden["region_status"] = region_label(status)
        return hidden
    gated = dict(payload or {})
    gated["place_id"] = place_id if place_id is not None else gated.get("place_id")
    gated["region_status"] = region_label(status)
    return gated


def resolve_place_region_id(db: Session, place_id: str, address: str | None = None) -> str | None:
    row = (
        db.query(ParkingReport.region_id)
        .filter(ParkingReport.place_id == place_id, ParkingReport.region_id.isnot(None))
        .order_by(ParkingReport.reported_at.desc())
        .first()
    )
    if row and row[0]:
        return row[0]
    return extract_region_from_address(address)


def resolve_place_region_ids(db: Session, place_ids: Iterable[str]) -> dict[str, str | None]:
    """Most recent stored region tag per place, one query. Places without a tag map to None."""
    ids = list(dict.fromkeys(place_ids))
    regions: dict[str, str | None] = {p: None for p in ids}
    if not ids:
        return regions
    rows = (
        db.query(ParkingReport.place_id, ParkingReport.region_id)
        .filter(ParkingReport.place_id.in_(ids), ParkingReport.region_id.isnot(None))
        .order_by(ParkingReport.reported_at.desc())
        .all()
    )
    for place_id, region_id in rows:
        if regions.get(place_id) is None:
            regions[place_id] = region_id
    return regions


def resolve_visible_stats(
    db: Session,
    region_id: str | None,
    raw_stats: dict[str, Any] | None,
    place_id: str | None = None,
) -> dict[str, Any]:
    """Look up the region status and gate one place's stats payload."""
    status = get_region_status(db, region_id)
    if place_id is None and raw_stats:
        place_id = raw_stats.get("place_id")
    return gate_payload(status, place_id, raw_stats)


def resolve_visible_stats_bulk(
    db: Session,
    items: list[tuple[str, str | None, dict[str, Any] | None]],
) -> list[dict[str, Any]]:
    """
    Gate many places at once. items: (place_id, region_id, raw_stats_or_none).
    Region statuses are fetched in one query; output keeps input order.
    """
    statuses = get_region_statuses(db, (region_id for _, region_id, _ in items))
    gated = []
    for place_id, region_id, raw_stats in items:
        status = statuses.get(region_id, RegionStatus.OPEN) if region_id else RegionStatus.OPEN
        gated.append(gate_payload(status, place_id, raw_stats))
    hidden = sum(1 for g in gated if g["region_status"] == REGION_LABEL_COLLECTING)
    logger.debug("resolve_visible_stats_bulk: places=%s hidden=%s", len(gated), hidden)
    return gated
