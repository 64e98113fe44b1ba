"""
Daily region promotion: aggregate every region's participation metrics and promote OPEN regions
that qualify to CANDIDATE. Scheduled in main.py (cron, once a day); also runnable through
scripts/run_region_promotion.py.
"""
import logging

from app.config import settings
from app.db.session import SessionLocal
from app.services.region import run_region_promotion_batch

logger = logging.getLogger(__name__)


def run_region_promotion_job() -> None:
    db = SessionLocal()
    try:
        result = run_region_promotion_batch(
            db,
            soft_timeout_seconds=settings.region_batch_soft_timeout_seconds or None,
        )
        if result.skipped:
            return
        if result.failed:
            logger.warning(
                "Region promotion job: %s region(s) failed and will be retried next run: %s",
                len(result.failed), sorted(result.failed),
            )
        logger.info("Region promotion job: %s", result.summary())
    except Exception as e:
        logger.exception("Region promotion job failed: %s", e)
        db.rollback()
    finally:
        db.close()
