#!/usr/bin/env python3
"""
Run the region promotion batch once: aggregate every region and promote qualifying OPEN regions
to CANDIDATE. Use this from cron when the API runs with SCHEDULER_ENABLED=false.
Run: cd backend && python scripts/run_region_promotion.py
cron (daily 04:00): 0 4 * * * cd /path/to/backend && python scripts/run_region_promotion.py
"""
import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.config import settings
from app.db.session import SessionLocal
from app.services.region import run_region_promotion_batch


def main():
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument(
        "--soft-timeout",
        type=int,
        default=settings.region_batch_soft_timeout_seconds,
        help="Stop starting new regions after N seconds (0 = no limit)",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    print("=" * 60)
    print("Region promotion batch")
    print("=" * 60)
    db = SessionLocal()
    try:
        result = run_region_promotion_batch(db, soft_timeout_seconds=args.soft_timeout or None)
    finally:
        db.close()

    print(
        f"Done. regions={len(result.succeeded)}, promoted={len(result.promoted)}, "
        f"failed={len(result.failed)}, unprocessed={len(result.unprocessed)}"
    )
    if result.promoted:
        print(f"Promoted: {', '.join(result.promoted)}")
    for region_id, error in result.failed.items():
        print(f"  FAILED {region_id}: {error}")
    if not result.ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
