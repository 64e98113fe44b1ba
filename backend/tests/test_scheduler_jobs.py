import logging

from app.models.parking_stats import ParkingStats
from app.models.region_state import RegionState
from app.scheduler import region_promotion_job, stats_rebuild_job


def test_region_promotion_job_uses_its_own_session(db, session_factory, seed_eligible_region, monkeypatch):
    seed_eligible_region("R1", first_days_ago=400)
    monkeypatch.setattr(region_promotion_job, "SessionLocal", session_factory)

    region_promotion_job.run_region_promotion_job()

    db.expire_all()
    assert db.query(RegionState).filter_by(region_id="R1").one().status == "CANDIDATE"


def test_region_promotion_job_logs_instead_of_raising(session_factory, monkeypatch, caplog):
    def broken(*args, **kwargs):
        raise RuntimeError("database is down")

    monkeypatch.setattr(region_promotion_job, "SessionLocal", session_factory)
    monkeypatch.setattr(region_promotion_job, "run_region_promotion_batch", broken)

    with caplog.at_level(logging.ERROR, logger="app.scheduler.region_promotion_job"):
        region_promotion_job.run_region_promotion_job()

    assert "Region promotion job failed" in caplog.text


def test_stats_rebuild_job(db, session_factory, add_report, monkeypatch):
    add_report(place_id="P1")
    add_report(place_id="P2", parking_experience="could-not-park")
    monkeypatch.setattr(stats_rebuild_job, "SessionLocal", session_factory)

    stats_rebuild_job.run_stats_rebuild_job()

    db.expire_all()
    assert {r.place_id for r in db.query(ParkingStats).all()} == {"P1", "P2"}


def test_region_promotion_job_logs_run_summary(seed_eligible_region, session_factory, monkeypatch, caplog):
    seed_eligible_region("R1", first_days_ago=400)
    monkeypatch.setattr(region_promotion_job, "SessionLocal", session_factory)

    with caplog.at_level(logging.INFO, logger="app.scheduler.region_promotion_job"):
        region_promotion_job.run_region_promotion_job()

    assert "'promoted': ['R1']" in caplog.text
