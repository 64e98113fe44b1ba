"""Append-only audit trail of region status transitions (automatic batch promotions and operator actions)."""
from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.sql import func

from app.db.base import Base


class RegionPromotionAudit(Base):
    __tablename__ = "region_promotion_audits"

    id = Column(Integer, primary_key=True, autoincrement=True)
    region_id = Column(String(128), nullable=False, index=True)
    from_status = Column(String(16), nullable=False)
    to_status = Column(String(16), nullable=False)
    actor = Column(String(16), nullable=False)  # batch | operator
    promoted_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Metrics that triggered the transition (NULL for operator actions without a snapshot)
    total_records = Column(Integer, nullable=True)
    unique_participants = Column(Integer, nullable=True)
    time_slot_count = Column(Integer, nullable=True)
    days_since_first_record = Column(Integer, nullable=True)
    note = Column(String(256), nullable=True)
