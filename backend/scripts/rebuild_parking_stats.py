#!/usr/bin/env python3
"""
Recompute parking_stats for every (place, time slot) from parking_reports.
Safe to run any time; each pair is a full replace.
Run: cd backend && python scripts/rebuild_parking_stats.py
"""
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.db.session import SessionLocal
from app.services.aggregation import recalculate_all_stats


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    print("Rebuilding parking_stats from parking_reports...")
    db = SessionLocal()
    try:
        result = recalculate_all_stats(db)
    finally:
        db.close()
    print(f"Done. recomputed={result.recomputed}, empty={result.empty}, failed={len(result.failed)}")
    if result.failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
