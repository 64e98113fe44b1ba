#!/usr/bin/env python3
"""
Operator action: set a region's status by hand (typically CANDIDATE -> CORE after review).
The promotion batch never does this. Writes an audit row.
Run: cd backend && python scripts/set_region_status.py "대구광역시 수성구" CORE --note "reviewed"
"""
import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.core.enums import RegionStatus
from app.db.session import SessionLocal
from app.services.region import set_region_status_manually


def main():
    parser = argparse.ArgumentParser(description="Set a region's visibility status (operator only).")
    parser.add_argument("region_id", help='Region id, e.g. "서울특별시 강남구"')
    parser.add_argument("status", choices=[s.value for s in RegionStatus])
    parser.add_argument("--note", default=None, help="Reason, stored in the audit row")
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    db = SessionLocal()
    try:
        row = set_region_status_manually(db, args.region_id, args.status, note=args.note)
        print(f"{row.region_id}: {row.status}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
