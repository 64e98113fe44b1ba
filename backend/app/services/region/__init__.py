"""
Region lifecycle: metrics aggregation, promotion policy, the daily promotion batch and
status lookups used by the visibility gate.
"""
from app.services.region.batch import PromotionBatchResult, run_promotion_batch, run_region_promotion_batch
from app.services.region.metrics import RegionMetrics, aggregate_region_metrics, list_region_ids
from app.services.region.policy import (
    AUTOMATIC_TRANSITIONS,
    meets_promotion_criteria,
    next_automatic_status,
    should_promote,
)
from app.services.region.state import (
    get_region_status,
    get_region_statuses,
    set_region_status_manually,
)

__all__ = [
    "AUTOMATIC_TRANSITIONS",
    "PromotionBatchResult",
    "RegionMetrics",
    "aggregate_region_metrics",
    "get_region_status",
    "get_region_statuses",
    "list_region_ids",
    "meets_promotion_criteria",
    "next_automatic_status",
    "run_promotion_batch",
    "run_region_promotion_batch",
    "set_region_status_manually",
    "should_promote",
]
