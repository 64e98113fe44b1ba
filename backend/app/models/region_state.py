"""
Visibility lifecycle per region (OPEN -> CANDIDATE -> CORE).

The metrics columns are an internal snapshot used for promotion decisions and operational audit
only. No route, client payload or report may serialize them.
"""
from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.sql import func

from app.core.enums import RegionStatus
from app.db.base import Base


class RegionState(Base):
    __tablename__ = "region_states"

    id = Column(Integer, primary_key=True, autoincrement=True)
    region_id = Column(String(128), nullable=False, unique=True)
    status = Column(String(16), nullable=False, default=RegionStatus.OPEN.value, index=True)

    # Internal metrics snapshot (last batch run)
    total_records = Column(Integer, nullable=False, default=0)
    unique_participants = Column(Integer, nullable=False, default=0)
    time_slot_count = Column(Integer, nullable=False, default=0)
    first_recorded_at = Column(DateTime(timezone=True), nullable=True)
    last_recorded_at = Column(DateTime(timezone=True), nullable=True)

    promoted_at = Column(DateTime(timezone=True), nullable=True)  # last upward transition
    last_aggregated_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    @property
    def region_status(self) -> RegionStatus:
        return RegionStatus.parse(self.status)
