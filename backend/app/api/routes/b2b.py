"""
B2B parking data: per-outcome counts per time slot, same visibility rules as the public API.
Places without stats return place_id and region_status only, whatever the region status.
"""
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import store_error_to_http
from app.db.session import get_db
from app.api.routes.parking import parse_place_ids
from app.services.parking_payloads import load_place_summaries
from app.services.visibility import resolve_place_region_ids, resolve_visible_stats_bulk

router = APIRouter()
logger = logging.getLogger(__name__)


def _gated_detailed(db: Session, place_ids: list[str]) -> list[dict]:
    summaries = load_place_summaries(db, place_ids, detailed=True)
    regions = resolve_place_region_ids(db, place_ids)
    return resolve_visible_stats_bulk(db, [(p, regions.get(p), summaries.get(p)) for p in place_ids])


# Declared before /parking/{place_id} so "bulk" is not taken as a place id.
@router.get("/parking/bulk")
def get_bulk_place_stats(place_ids: str = Query(..., description="Comma-separated place ids"), db: Session = Depends(get_db)):
    ids = parse_place_ids(place_ids)
    try:
        return {"places": _gated_detailed(db, ids)}
    except SQLAlchemyError as e:
        logger.warning("b2b get_bulk_place_stats failed: %s", e, exc_info=True)
        raise store_error_to_http(e) from e


@router.get("/parking/{place_id}")
def get_place_stats(place_id: str, db: Session = Depends(get_db)):
    try:
        return _gated_detailed(db, [place_id])[0]
    except SQLAlchemyError as e:
        logger.warning("b2b get_place_stats failed for %s: %s", place_id, e, exc_info=True)
        raise store_error_to_http(e) from e
