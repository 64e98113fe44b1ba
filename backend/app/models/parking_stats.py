"""
Derived statistics per (place_id, time_slot). Fully recomputed from parking_reports on every
qualifying report and by the daily rebuild; never patched incrementally because decay weights
drift with time.
"""
from sqlalchemy import Column, DateTime, Float, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from app.db.base import Base


class ParkingStats(Base):
    __tablename__ = "parking_stats"

    id = Column(Integer, primary_key=True, autoincrement=True)
    place_id = Column(String(64), nullable=False, index=True)
    time_slot = Column(String(20), nullable=False)

    # Raw (unweighted) counts over parking_available reports
    total_attempts = Column(Integer, nullable=False, default=0)
    success_count = Column(Integer, nullable=False, default=0)  # no-problem
    partial_count = Column(Integer, nullable=False, default=0)  # minor-inconvenience
    fail_count = Column(Integer, nullable=False, default=0)  # could-not-park
    unknown_count = Column(Integer, nullable=False, default=0)

    # 0.0–1.0, decay-weighted, unknown excluded, partial counts half
    success_rate = Column(Float, nullable=False, default=0.0)
    last_updated = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (UniqueConstraint("place_id", "time_slot", name="uq_parking_stats_place_slot"),)

    def counts(self) -> dict[str, int]:
        return {
            "success_count": self.success_count,
            "partial_count": self.partial_count,
            "fail_count": self.fail_count,
            "unknown_count": self.unknown_count,
        }
