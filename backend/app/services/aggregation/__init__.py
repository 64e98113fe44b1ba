"""
Parking statistics aggregation.
- update_stats_on_new_report: hot path, called after every stored parking report.
- recalculate_all_stats: daily full rebuild (scheduler / scripts/rebuild_parking_stats.py).
"""
from app.services.aggregation.stats import (
    StatsRebuildResult,
    StatsSnapshot,
    compute_stats,
    recalculate_all_stats,
    recompute_stats_for_place_timeslot,
    update_stats_on_new_report,
)
from app.services.aggregation.weighting import decay_weight

__all__ = [
    "StatsRebuildResult",
    "StatsSnapshot",
    "compute_stats",
    "decay_weight",
    "recalculate_all_stats",
    "recompute_stats_for_place_timeslot",
    "update_stats_on_new_report",
]
