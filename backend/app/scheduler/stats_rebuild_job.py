"""
Daily full rebuild of parking_stats. The per-report hook keeps pairs current as reports arrive;
this refreshes decay weights for pairs with no new reports and repairs pairs whose hook failed.
"""
import logging

from app.db.session import SessionLocal
from app.services.aggregation import recalculate_all_stats

logger = logging.getLogger(__name__)


def run_stats_rebuild_job() -> None:
    db = SessionLocal()
    try:
        result = recalculate_all_stats(db)
        if result.failed:
            logger.warning("Stats rebuild job: %s pair(s) failed: %s", len(result.failed), sorted(result.failed))
    except Exception as e:
        logger.exception("Stats rebuild job failed: %s", e)
        db.rollback()
    finally:
        db.close()
