"""
One parking experience per (room_id, participant_id): a visitor's report after the team visited a place.
Upserts by the same participant overwrite the row; reported_at keeps the first submission time and is
the timestamp the decay weight is computed from.
parking_experience is NULL whenever parking_available is false (enforced by CHECK, not just ignored).
"""
from sqlalchemy import Boolean, CheckConstraint, Column, Date, DateTime, Index, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from app.db.base import Base


class ParkingReport(Base):
    __tablename__ = "parking_reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    room_id = Column(String(64), nullable=False)
    participant_id = Column(String(64), nullable=False)
    place_id = Column(String(64), nullable=False, index=True)
    region_id = Column(String(128), nullable=True)  # "<province> <city>" from the place address
    visit_date = Column(Date, nullable=False)
    time_slot = Column(String(20), nullable=False)  # TimeSlot value
    parking_available = Column(Boolean, nullable=False)
    parking_experience = Column(String(32), nullable=True)  # ParkingExperience value
    reported_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("room_id", "participant_id", name="uq_parking_reports_room_participant"),
        CheckConstraint(
            "parking_available OR parking_experience IS NULL",
            name="ck_parking_reports_experience_requires_parking",
        ),
        Index("ix_parking_reports_place_slot_reported", "place_id", "time_slot", "reported_at"),
        Index("ix_parking_reports_region_reported", "region_id", "reported_at"),
    )
