import os
from datetime import date, datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SCHEDULER_ENABLED", "false")

import app.models  # noqa: F401,E402  (registers tables on Base.metadata)
from app.core.enums import RegionStatus, TimeSlot  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.session import get_db  # noqa: E402
from app.main import app as fastapi_app  # noqa: E402
from app.models.parking_report import ParkingReport  # noqa: E402
from app.models.region_state import RegionState  # noqa: E402

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    fastapi_app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(fastapi_app)
    finally:
        fastapi_app.dependency_overrides.clear()


@pytest.fixture
def add_report(db):
    """Insert a ParkingReport directly (bypasses the stats hook). Unique room per call unless given."""
    counter = {"n": 0}

    def _add(
        place_id: str = "P1",
        time_slot: TimeSlot | str = TimeSlot.WEEKDAY_LUNCH,
        parking_available: bool = True,
        parking_experience: str | None = "no-problem",
        reported_at: datetime = NOW,
        participant_id: str | None = None,
        room_id: str | None = None,
        region_id: str | None = None,
        commit: bool = True,
    ) -> ParkingReport:
        counter["n"] += 1
        n = counter["n"]
        report = ParkingReport(
            room_id=room_id or f"room-{n}",
            participant_id=participant_id or f"user-{n}",
            place_id=place_id,
            region_id=region_id,
            visit_date=reported_at.date(),
            time_slot=TimeSlot(time_slot).value,
            parking_available=parking_available,
            parking_experience=parking_experience if parking_available else None,
            reported_at=reported_at,
        )
        db.add(report)
        if commit:
            db.commit()
        return report

    return _add


@pytest.fixture
def set_region(db):
    def _set(region_id: str, status: RegionStatus) -> RegionState:
        row = db.query(RegionState).filter(RegionState.region_id == region_id).first()
        if row is None:
            row = RegionState(region_id=region_id)
            db.add(row)
        row.status = status.value
        db.commit()
        return row

    return _set


@pytest.fixture
def seed_eligible_region(db):
    """
    Region with exactly: 300 reports, 80 participants, all 3 time slots, first report 61 days ago.
    `records` lets a test drop below the threshold with everything else unchanged.
    """
    slots = list(TimeSlot)

    def _seed(region_id: str = "R1", records: int = 300, participants: int = 80, first_days_ago: int = 61):
        for i in range(records):
            reported_at = NOW - timedelta(days=first_days_ago) if i == 0 else NOW - timedelta(days=1)
            db.add(ParkingReport(
                room_id=f"{region_id}-room-{i}",
                participant_id=f"{region_id}-user-{i % participants}",
                place_id=f"{region_id}-place-{i % 7}",
                region_id=region_id,
                visit_date=date(2026, 1, 1),
                time_slot=slots[i % len(slots)].value,
                parking_available=i % 5 != 0,
                parking_experience="no-problem" if i % 5 != 0 else None,
                reported_at=reported_at,
            ))
        db.commit()

    return _seed
