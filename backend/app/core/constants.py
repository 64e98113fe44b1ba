"""
Centralized constants for aggregation, region promotion and the scheduler.

Change thresholds, job IDs or public field names here instead of scattering literals
across services and routes.
"""
from app.core.enums import RegionStatus

# Scheduler job IDs (must match ids used in main.py add_job)
REGION_PROMOTION_JOB_ID = "region_promotion"
STATS_REBUILD_JOB_ID = "parking_stats_rebuild"

# Decay: a report loses weight linearly and counts for nothing after this many days
DECAY_WINDOW_DAYS = 30
# "minor inconvenience" counts as half a success
PARTIAL_SUCCESS_WEIGHT = 0.5
# parking_stats.success_rate precision; per-place summaries round to 2
SUCCESS_RATE_DECIMALS = 3
SUMMARY_RATE_DECIMALS = 2

# Weekday reports from this hour on belong to the dinner slot
DINNER_START_HOUR = 18

# Automatic OPEN -> CANDIDATE promotion. All four must hold at once.
PROMOTION_THRESHOLDS = {
    "total_records": 300,
    "unique_participants": 80,
    "time_slot_count": 3,
    "days_since_first_record": 60,
}

# Audit actors
ACTOR_BATCH = "batch"
ACTOR_OPERATOR = "operator"

# Public region labels. The internal lifecycle status is never sent to clients.
REGION_LABEL_AVAILABLE = "AVAILABLE"
REGION_LABEL_COLLECTING = "COLLECTING"

# Only CORE regions may expose statistics
STATS_VISIBLE_STATUSES = frozenset({RegionStatus.CORE})

# Every key that carries statistics in any outbound payload. The visibility gate deletes
# these (never nulls them) for regions that are not CORE. Add new stats keys here.
STATS_FIELDS = (
    "success_rate",
    "total_attempts",
    "by_time_slot",
    "success_count",
    "partial_count",
    "fail_count",
    "unknown_count",
    "stats",
    "badges",
    "parking_stats",
    "last_updated",
)

# Scalability: hard cap on ids accepted by multi-place lookups
MAX_BULK_PLACE_IDS = 100
