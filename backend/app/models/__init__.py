from app.models.parking_report import ParkingReport
from app.models.parking_stats import ParkingStats
from app.models.region_promotion_audit import RegionPromotionAudit
from app.models.region_state import RegionState

__all__ = [
    "ParkingReport",
    "ParkingStats",
    "RegionPromotionAudit",
    "RegionState",
]
