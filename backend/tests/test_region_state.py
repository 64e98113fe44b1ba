from app.core.enums import RegionStatus
from app.models.region_promotion_audit import RegionPromotionAudit
from app.services.region.batch import run_promotion_batch
from app.services.region.state import get_region_status, set_region_status_manually


def test_operator_promotes_candidate_to_core_with_audit(db, seed_eligible_region, now):
    seed_eligible_region("R1")
    run_promotion_batch(db, now=now)

    row = set_region_status_manually(db, "R1", RegionStatus.CORE, note="reviewed", now=now)

    assert row.status == "CORE"
    assert get_region_status(db, "R1") is RegionStatus.CORE
    audit = db.query(RegionPromotionAudit).filter_by(actor="operator").one()
    assert (audit.from_status, audit.to_status, audit.note) == ("CANDIDATE", "CORE", "reviewed")
    assert audit.total_records == 300


def test_operator_can_set_status_of_unaggregated_region(db, now):
    row = set_region_status_manually(db, "R-new", "CORE", now=now)
    assert row.status == "CORE"
    audit = db.query(RegionPromotionAudit).one()
    assert audit.total_records is None


def test_setting_the_same_status_is_a_noop(db, set_region, now):
    set_region("R1", RegionStatus.CANDIDATE)
    set_region_status_manually(db, "R1", RegionStatus.CANDIDATE, now=now)
    assert db.query(RegionPromotionAudit).count() == 0


def test_status_parse_falls_back_to_open():
    assert RegionStatus.parse("core") is RegionStatus.CORE
    assert RegionStatus.parse("unknown-status") is RegionStatus.OPEN
    assert RegionStatus.parse(None) is RegionStatus.OPEN
    assert RegionStatus.OPEN.rank < RegionStatus.CANDIDATE.rank < RegionStatus.CORE.rank
