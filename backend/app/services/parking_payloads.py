"""
Shape parking_stats rows into per-place summaries. Output here is raw: every route must pass
it through app.services.visibility before it leaves the process.
"""
from collections import defaultdict
from typing import Any, Iterable

from sqlalchemy.orm import Session

from app.core.constants import SUMMARY_RATE_DECIMALS
from app.models.parking_stats import ParkingStats


def build_place_summary(place_id: str, rows: list[ParkingStats], detailed: bool = False) -> dict[str, Any] | None:
    """
    Overall success rate = attempt-weighted mean of the per-slot rates (2 decimals).
    detailed=True adds per-outcome counts per slot (B2B shape). None when the place has no stats.
    """
    if not rows:
        return None
    by_time_slot: dict[str, dict[str, Any]] = {}
    total_attempts = 0
    weighted_success = 0.0
    for row in sorted(rows, key=lambda r: r.time_slot):
        slot: dict[str, Any] = {"attempts": row.total_attempts, "success_rate": row.success_rate}
        if detailed:
            slot.update(row.counts())
        by_time_slot[row.time_slot] = slot
        total_attempts += row.total_attempts
        weighted_success += row.success_rate * row.total_attempts
    last_updated = max((r.last_updated for r in rows if r.last_updated is not None), default=None)
    return {
        "place_id": place_id,
        "total_attempts": total_attempts,
        "success_rate": round(weighted_success / total_attempts, SUMMARY_RATE_DECIMALS) if total_attempts else 0,
        "by_time_slot": by_time_slot,
        "last_updated": last_updated.isoformat() if last_updated else None,
    }


def group_by_place(rows: Iterable[ParkingStats]) -> dict[str, list[ParkingStats]]:
    grouped: dict[str, list[ParkingStats]] = defaultdict(list)
    for row in rows:
        grouped[row.place_id].append(row)
    return grouped


def empty_summary(place_id: str) -> dict[str, Any]:
    return {"place_id": place_id, "total_attempts": 0, "success_rate": 0, "by_time_slot": {}}


def load_place_summaries(
    db: Session,
    place_ids: list[str],
    detailed: bool = False,
) -> dict[str, dict[str, Any] | None]:
    """Summaries for many places in one query; places without stats map to None."""
    if not place_ids:
        return {}
    rows = db.query(ParkingStats).filter(ParkingStats.place_id.in_(place_ids)).all()
    grouped = group_by_place(rows)
    return {p: build_place_summary(p, grouped.get(p, []), detailed=detailed) for p in place_ids}
