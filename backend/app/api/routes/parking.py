"""
Parking API: record a visitor's parking experience, read per-place parking statistics.

Every response that can carry statistics goes through app.services.visibility; raw summaries
from app.services.parking_payloads are never returned directly.
"""
import logging
from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field, model_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.constants import MAX_BULK_PLACE_IDS
from app.core.enums import ParkingExperience, TimeSlot
from app.core.errors import store_error_to_http
from app.db.session import get_db
from app.models.parking_stats import ParkingStats
from app.services.parking_payloads import build_place_summary, empty_summary, load_place_summaries
from app.services.parking_service import record_parking_report
from app.services.visibility import (
    resolve_place_region_id,
    resolve_place_region_ids,
    resolve_visible_stats,
    resolve_visible_stats_bulk,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def parse_place_ids(place_ids: str) -> list[str]:
    """Comma-separated ids, de-duplicated in order. 400 when empty or over the cap."""
    ids = list(dict.fromkeys(p.strip() for p in place_ids.split(",") if p.strip()))
    if not ids:
        raise HTTPException(status_code=400, detail="place_ids must contain at least one id")
    if len(ids) > MAX_BULK_PLACE_IDS:
        raise HTTPException(status_code=400, detail=f"at most {MAX_BULK_PLACE_IDS} place_ids per request")
    return ids


class RecordParkingBody(BaseModel):
    room_id: str = Field(..., min_length=1, max_length=64)
    place_id: str = Field(..., min_length=1, max_length=64)
    participant_id: str = Field(..., min_length=1, max_length=64)
    parking_available: bool
    parking_experience: ParkingExperience | None = None
    time_slot: TimeSlot | None = Field(None, description="Defaults to the slot of the current time")
    visit_date: date | None = None
    address: str | None = Field(None, max_length=256, description="Place address; region = first two tokens")

    @model_validator(mode="after")
    def experience_requires_parking(self) -> "RecordParkingBody":
        if not self.parking_available and self.parking_experience is not None:
            raise ValueError("parking_experience must be omitted when parking_available is false")
        return self


# --- Record ---


@router.post("/parking")
def record_parking(body: RecordParkingBody, db: Session = Depends(get_db)) -> dict[str, Any]:
    """
    Record (or overwrite) one participant's parking experience for a room, then recompute the
    stats of its place and time slot. The response never contains statistics.
    """
    try:
        result = record_parking_report(
            db,
            room_id=body.room_id,
            participant_id=body.participant_id,
            place_id=body.place_id,
            parking_available=body.parking_available,
            parking_experience=body.parking_experience,
            time_slot=body.time_slot,
            visit_date=body.visit_date,
            address=body.address,
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("record_parking failed for place %s: %s", body.place_id, e, exc_info=True)
        raise store_error_to_http(e) from e
    return {"recorded": True, "created": result.created, "stats_updated": result.stats_updated}


# --- Read ---


@router.get("/parking/stats")
def get_bulk_stats(place_ids: str = Query(..., description="Comma-separated place ids"), db: Session = Depends(get_db)):
    """Stats for many places. Places in regions that are not CORE come back with place_id and region_status only."""
    ids = parse_place_ids(place_ids)
    try:
        summaries = load_place_summaries(db, ids)
        regions = resolve_place_region_ids(db, ids)
        items = [(p, regions.get(p), summaries.get(p) or empty_summary(p)) for p in ids]
        return {"places": resolve_visible_stats_bulk(db, items)}
    except SQLAlchemyError as e:
        logger.warning("get_bulk_stats failed: %s", e, exc_info=True)
        raise store_error_to_http(e) from e


@router.get("/parking/{place_id}/stats")
def get_place_stats(
    place_id: str,
    address: str | None = Query(None, description="Place address, used when no report carries a region yet"),
    db: Session = Depends(get_db),
):
    """Stats for one place across time slots, gated by the place's region status."""
    try:
        rows = db.query(ParkingStats).filter(ParkingStats.place_id == place_id).all()
        summary = build_place_summary(place_id, rows) or empty_summary(place_id)
        region_id = resolve_place_region_id(db, place_id, address)
        return resolve_visible_stats(db, region_id, summary, place_id=place_id)
    except SQLAlchemyError as e:
        logger.warning("get_place_stats failed for %s: %s", place_id, e, exc_info=True)
        raise store_error_to_http(e) from e
