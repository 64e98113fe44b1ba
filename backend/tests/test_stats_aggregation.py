from datetime import timedelta

import pytest
from sqlalchemy import event

from app.core.enums import TimeSlot
from app.models.parking_stats import ParkingStats
from app.services.aggregation import stats as stats_module
from app.services.aggregation import (
    compute_stats,
    recalculate_all_stats,
    recompute_stats_for_place_timeslot,
    update_stats_on_new_report,
)


def _stats_rows(db):
    return db.query(ParkingStats).all()


def test_three_fresh_reports_scenario(db, add_report, now):
    for experience in ("no-problem", "no-problem", "minor-inconvenience"):
        add_report(parking_experience=experience)

    stats = recompute_stats_for_place_timeslot(db, "P1", TimeSlot.WEEKDAY_LUNCH, now=now)

    assert stats is not None
    assert stats.total_attempts == 3
    assert stats.success_count == 2
    assert stats.partial_count == 1
    assert stats.success_rate == 0.833


def test_unknown_outcomes_are_excluded_from_the_rate_but_counted(db, add_report, now):
    add_report(parking_experience="no-problem")
    add_report(parking_experience="could-not-park")
    add_report(parking_experience="unknown")
    add_report(parking_experience="unknown")

    stats = recompute_stats_for_place_timeslot(db, "P1", "weekday-lunch", now=now)

    assert stats.success_rate == 0.5
    assert stats.total_attempts == 4
    assert stats.unknown_count == 2
    assert stats.fail_count == 1


def test_only_unknown_outcomes_give_zero_rate(db, add_report, now):
    add_report(parking_experience="unknown")
    stats = recompute_stats_for_place_timeslot(db, "P1", "weekday-lunch", now=now)
    assert stats.success_rate == 0
    assert stats.total_attempts == 1


def test_decay_weights_old_reports_down_but_raw_counts_keep_them(db, add_report, now):
    # 15 days old success (weight 0.5) + fresh failure (weight 1.0) -> 0.5 / 1.5
    add_report(parking_experience="no-problem", reported_at=now - timedelta(days=15))
    add_report(parking_experience="could-not-park", reported_at=now)
    # Beyond the window: weight 0, still counted raw
    add_report(parking_experience="no-problem", reported_at=now - timedelta(days=40))

    stats = recompute_stats_for_place_timeslot(db, "P1", "weekday-lunch", now=now)

    assert stats.success_rate == 0.333
    assert stats.total_attempts == 3
    assert stats.success_count == 2


def test_all_reports_past_the_window_give_zero_rate(db, add_report, now):
    add_report(parking_experience="no-problem", reported_at=now - timedelta(days=31))
    stats = recompute_stats_for_place_timeslot(db, "P1", "weekday-lunch", now=now)
    assert stats.success_rate == 0
    assert stats.total_attempts == 1


def test_no_qualifying_reports_returns_none_and_writes_nothing(db, add_report, now):
    add_report(parking_available=False)
    add_report(place_id="P2")

    assert recompute_stats_for_place_timeslot(db, "P1", "weekday-lunch", now=now) is None
    assert recompute_stats_for_place_timeslot(db, "P3", "weekend", now=now) is None
    assert _stats_rows(db) == []


def test_unavailable_reports_never_affect_stats(db, add_report, now):
    add_report(parking_experience="no-problem")
    before = recompute_stats_for_place_timeslot(db, "P1", "weekday-lunch", now=now)
    before_values = (before.total_attempts, before.success_rate, before.fail_count, before.unknown_count)

    for _ in range(5):
        add_report(parking_available=False, parking_experience=None)
    after = recompute_stats_for_place_timeslot(db, "P1", "weekday-lunch", now=now)

    assert (after.total_attempts, after.success_rate, after.fail_count, after.unknown_count) == before_values


def test_recompute_is_idempotent(db, add_report, now):
    add_report(parking_experience="no-problem")
    add_report(parking_experience="minor-inconvenience", reported_at=now - timedelta(days=3))

    first = recompute_stats_for_place_timeslot(db, "P1", "weekday-lunch", now=now)
    first_values = (first.total_attempts, first.success_rate, dict(first.counts()))
    second = recompute_stats_for_place_timeslot(db, "P1", "weekday-lunch", now=now)

    assert (second.total_attempts, second.success_rate, dict(second.counts())) == first_values
    assert len(_stats_rows(db)) == 1


def test_recompute_fully_replaces_the_row(db, add_report, now):
    add_report(parking_experience="could-not-park")
    recompute_stats_for_place_timeslot(db, "P1", "weekday-lunch", now=now)
    add_report(parking_experience="no-problem")

    stats = recompute_stats_for_place_timeslot(db, "P1", "weekday-lunch", now=now)

    assert stats.total_attempts == 2
    assert stats.success_rate == 0.5
    assert len(_stats_rows(db)) == 1


def test_time_slots_and_places_are_aggregated_separately(db, add_report, now):
    add_report(place_id="P1", time_slot="weekday-lunch", parking_experience="no-problem")
    add_report(place_id="P1", time_slot="weekend", parking_experience="could-not-park")
    add_report(place_id="P2", time_slot="weekday-lunch", parking_experience="could-not-park")

    lunch = recompute_stats_for_place_timeslot(db, "P1", "weekday-lunch", now=now)
    assert (lunch.total_attempts, lunch.success_rate) == (1, 1.0)


def test_hook_skips_reports_without_parking(db, add_report, now):
    report = add_report(parking_available=False)
    assert update_stats_on_new_report(db, report, now=now) is None
    assert _stats_rows(db) == []


def test_hook_recomputes_only_the_report_pair(db, add_report, now):
    add_report(place_id="P2", parking_experience="no-problem")
    report = add_report(place_id="P1", parking_experience="no-problem")

    stats = update_stats_on_new_report(db, report, now=now)

    assert stats.place_id == "P1"
    assert [(r.place_id, r.time_slot) for r in _stats_rows(db)] == [("P1", "weekday-lunch")]


def test_compute_stats_on_empty_input_is_none(now):
    assert compute_stats([], now) is None


def test_unrecognised_experience_counts_as_unknown(db, add_report, now):
    add_report(parking_experience="no-problem")
    add_report(parking_experience=None)
    stats = recompute_stats_for_place_timeslot(db, "P1", "weekday-lunch", now=now)
    assert stats.unknown_count == 1
    assert stats.success_rate == 1.0


def test_invalid_time_slot_is_rejected(db):
    with pytest.raises(ValueError):
        recompute_stats_for_place_timeslot(db, "P1", "brunch")


def test_recalculate_all_stats_rebuilds_every_pair(db, add_report, now):
    add_report(place_id="P1", time_slot="weekday-lunch")
    add_report(place_id="P1", time_slot="weekday-dinner")
    add_report(place_id="P2", time_slot="weekend", parking_experience="could-not-park")
    add_report(place_id="P3", parking_available=False)

    result = recalculate_all_stats(db, now=now)

    assert result.recomputed == 3
    assert result.failed == {}
    pairs = {(r.place_id, r.time_slot): r.success_rate for r in _stats_rows(db)}
    assert pairs == {("P1", "weekday-lunch"): 1.0, ("P1", "weekday-dinner"): 1.0, ("P2", "weekend"): 0.0}


def test_rebuild_refreshes_decay_drift(db, add_report, now):
    add_report(parking_experience="no-problem", reported_at=now - timedelta(days=20))
    add_report(parking_experience="could-not-park", reported_at=now - timedelta(days=1))
    early = recompute_stats_for_place_timeslot(db, "P1", "weekday-lunch", now=now).success_rate

    recalculate_all_stats(db, now=now + timedelta(days=10))
    later = db.query(ParkingStats).one().success_rate

    assert later < early
    assert later == 0.0


def test_pair_lock_is_taken_before_reports_are_read(db, add_report, now, monkeypatch):
    add_report()
    calls = []
    monkeypatch.setattr(
        stats_module, "_lock_pair",
        lambda session, dialect, place_id, time_slot: calls.append(("lock", place_id, time_slot)),
    )

    def on_query(state):
        calls.append(("query",))

    event.listen(db, "do_orm_execute", on_query)
    try:
        recompute_stats_for_place_timeslot(db, "P1", "weekday-lunch", now=now)
    finally:
        event.remove(db, "do_orm_execute", on_query)

    assert calls[0] == ("lock", "P1", "weekday-lunch")
    assert ("query",) in calls[1:]


def test_pair_lock_keys_are_stable_and_per_pair():
    key = stats_module._pair_lock_key("P1", "weekday-lunch")
    assert key == stats_module._pair_lock_key("P1", "weekday-lunch")
    assert key != stats_module._pair_lock_key("P1", "weekend")
    assert key != stats_module._pair_lock_key("P2", "weekday-lunch")
    assert 0 <= key < 2**63


def test_recompute_overwrites_a_row_another_worker_inserted_first(db, session_factory, add_report, now):
    add_report(parking_experience="could-not-park")
    other = session_factory()
    try:
        other.add(ParkingStats(place_id="P1", time_slot="weekday-lunch", total_attempts=99, success_rate=0.9))
        other.commit()
    finally:
        other.close()

    stats = recompute_stats_for_place_timeslot(db, "P1", "weekday-lunch", now=now)

    assert (stats.total_attempts, stats.fail_count, stats.success_rate) == (1, 1, 0.0)
    assert db.query(ParkingStats).count() == 1
