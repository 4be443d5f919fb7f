"""Tests for the dashboard orchestration service."""

from __future__ import annotations

import logging

import pytest

from datastore.facilities import FacilitySeed, FacilityStore
from datastore.feedback import FeedbackStore
from datastore.history import TemperatureHistoryLog
from datastore.readings import InMemoryReadingStore
from fake_clock import FakeClock
from models.records import FeedbackRating
from services.broadcaster import DashboardBroadcaster
from services.dashboard import DashboardService, check_range
from services.errors import FacilityNotFoundError, InvalidArgumentError, ReadingNotFoundError


def _dashboard(clock: FakeClock | None = None, seed: bool = True) -> DashboardService:
    dashboard = DashboardService(
        facilities=FacilityStore(),
        readings=InMemoryReadingStore(),
        history=TemperatureHistoryLog(),
        feedback=FeedbackStore(),
        broadcaster=DashboardBroadcaster(),
        clock=clock or FakeClock(),
    )
    if seed:
        dashboard.seed_default_facilities()
    return dashboard


def test_seed_creates_default_facilities_once() -> None:
    dashboard = _dashboard()

    assert dashboard.seed_default_facilities() == []
    names = [status.facility.name for status in dashboard.list_facilities()]
    assert names == ["Sauna 1", "Sauna 2", "Steam Room", "Cold Plunge"]


def test_facility_status_falls_back_to_raw_temperature() -> None:
    dashboard = _dashboard()

    status = dashboard.get_facility_status(1)

    assert status.facility.current_temp == 95.0
    assert status.raw_temp == 95.0
    assert status.weighted_temp is None
    assert status.recent_readings == []
    assert status.total_votes == 0
    assert status.satisfaction_percent == 0
    assert status.in_range is True


def test_facility_status_overlays_crowd_estimate() -> None:
    clock = FakeClock()
    dashboard = _dashboard(clock)
    first = dashboard.submit_reading(1, 90.0, submitted_by="Mike T.")
    clock.advance(seconds=5)
    second = dashboard.submit_reading(1, 96.0, submitted_by="Jenny S.")
    dashboard.cast_vote(first.id, True)
    dashboard.cast_vote(first.id, True)
    dashboard.cast_vote(second.id, False)

    status = dashboard.get_facility_status(1)

    assert status.facility.current_temp == 91.5
    assert status.raw_temp == 95.0
    assert status.weighted_temp == 91.5
    assert [item.reading.id for item in status.recent_readings] == [second.id, first.id]
    assert dashboard.facilities.get(1).current_temp == 95.0


def test_status_reports_out_of_range_estimate() -> None:
    dashboard = _dashboard()
    dashboard.submit_reading(4, 12.5)

    status = dashboard.get_facility_status(4)

    assert status.facility.current_temp == 12.5
    assert status.in_range is False


def test_submit_reading_converts_fahrenheit_and_defaults_name() -> None:
    dashboard = _dashboard()

    reading = dashboard.submit_reading(3, 113.0, submitted_by="   ", unit="fahrenheit")

    assert reading.temperature_celsius == pytest.approx(45.0)
    assert reading.submitted_by == "Anonymous"
    assert dashboard.history.series(3)[-1].temperature == pytest.approx(45.0)


def test_submit_reading_for_unknown_facility_raises() -> None:
    dashboard = _dashboard()

    with pytest.raises(FacilityNotFoundError) as excinfo:
        dashboard.submit_reading(99, 80.0)

    assert str(excinfo.value) == "Facility 99 not found."


def test_submit_reading_rejects_non_finite_values() -> None:
    dashboard = _dashboard()

    with pytest.raises(InvalidArgumentError):
        dashboard.submit_reading(1, float("nan"), unit="fahrenheit")


def test_cast_vote_logs_rejection(caplog) -> None:
    dashboard = _dashboard()

    with caplog.at_level(logging.WARNING):
        with pytest.raises(ReadingNotFoundError):
            dashboard.cast_vote(404, False)

    record = next(r for r in caplog.records if r.getMessage() == "Rejected vote")
    assert record.levelno == logging.WARNING
    assert record.reading_id == 404
    assert record.reason == "unknown reading"


def test_submit_reading_logs_context(caplog) -> None:
    dashboard = _dashboard()

    with caplog.at_level(logging.INFO, logger="services.dashboard"):
        reading = dashboard.submit_reading(2, 86.0)

    record = next(r for r in caplog.records if r.getMessage() == "Accepted temperature reading")
    assert record.facility_id == 2
    assert record.reading_id == reading.id
    assert record.temperature_c == 86.0


def test_recent_readings_uses_configured_default_limit() -> None:
    clock = FakeClock()
    dashboard = _dashboard(clock)
    for value in range(7):
        clock.advance(seconds=1)
        dashboard.submit_reading(2, 80.0 + value)

    assert len(dashboard.recent_readings(2)) == 5
    assert len(dashboard.recent_readings(2, limit=7)) == 7
    assert dashboard.recent_readings(2, limit=1)[0].reading.temperature_celsius == 86.0


def test_weighted_temperature_requires_known_facility() -> None:
    dashboard = _dashboard()

    assert dashboard.weighted_temperature(1) is None
    with pytest.raises(FacilityNotFoundError):
        dashboard.weighted_temperature(42)


def test_temperature_history_window() -> None:
    clock = FakeClock()
    dashboard = _dashboard(clock)
    dashboard.update_facility_temperature(2, 84.0)
    clock.advance(hours=30)
    dashboard.update_facility_temperature(2, 86.0)
    clock.advance(minutes=10)
    dashboard.submit_reading(2, 87.0)

    recent = dashboard.temperature_history(2)
    everything = dashboard.temperature_history(2, hours=48)

    assert [point.temperature for point in recent] == [86.0, 87.0]
    assert [point.temperature for point in everything] == [84.0, 86.0, 87.0]
    with pytest.raises(InvalidArgumentError):
        dashboard.temperature_history(2, hours=0)


def test_update_facility_temperature_raises_alert_outside_range() -> None:
    clock = FakeClock()
    dashboard = _dashboard(clock)
    clock.advance(minutes=1)

    facility, alert = dashboard.update_facility_temperature(1, 101.0)

    assert facility.current_temp == 101.0
    assert facility.last_update == clock.now
    assert alert is not None
    assert alert.direction == "above"
    assert alert.bound == 100.0
    assert alert.message == (
        "Sauna 1 is currently above the recommended temperature range (100°)."
    )

    _, calm = dashboard.update_facility_temperature(1, 92.0)
    assert calm is None


def test_update_unknown_facility_raises() -> None:
    dashboard = _dashboard()

    with pytest.raises(FacilityNotFoundError):
        dashboard.update_facility_temperature(77, 20.0)


def test_check_range_depends_only_on_bounds() -> None:
    store = FacilityStore()
    fake = FakeClock()
    plunge = store.create(FacilitySeed("Cold Plunge", 7.0, 5.0, 10.0, "ri-snowy-line"), fake.now)
    renamed = store.create(FacilitySeed("Tub", 7.0, 5.0, 10.0, "ri-snowy-line"), fake.now)

    low = check_range(plunge, 4.0)
    low_renamed = check_range(renamed, 4.0)

    assert low is not None and low_renamed is not None
    assert (low.direction, low.bound) == (low_renamed.direction, low_renamed.bound) == ("below", 5.0)
    assert check_range(plunge, 5.0) is None
    assert check_range(plunge, 10.0) is None


def test_feedback_feeds_satisfaction() -> None:
    dashboard = _dashboard()
    dashboard.record_feedback(1, "too-hot", submitted_by="Mike T.")
    dashboard.record_feedback(1, "perfect")
    dashboard.record_feedback(1, "perfect")

    status = dashboard.get_facility_status(1)

    assert status.total_votes == 3
    assert status.feedback.too_hot_percent == 33
    assert status.satisfaction_percent == 67


def test_feedback_rejects_unknown_rating() -> None:
    dashboard = _dashboard()

    with pytest.raises(InvalidArgumentError):
        dashboard.record_feedback(1, "lukewarm")


def test_recent_feedbacks_are_newest_first_with_names() -> None:
    clock = FakeClock()
    dashboard = _dashboard(clock)
    dashboard.record_feedback(1, "too-hot", submitted_by="Mike T.")
    clock.advance(seconds=5)
    dashboard.record_feedback(4, "perfect")
    clock.advance(seconds=5)
    dashboard.record_feedback(3, "too-cold", submitted_by="Jenny S.")

    entries = dashboard.recent_feedbacks(limit=2)

    assert [entry.feedback.facility_id for entry in entries] == [3, 4]
    assert [entry.facility_name for entry in entries] == ["Steam Room", "Cold Plunge"]
    assert [entry.username for entry in entries] == ["Jenny S.", "Anonymous"]
    assert len(dashboard.recent_feedbacks()) == 3
    assert dashboard.recent_feedbacks(limit=0) == []


def test_recent_feedbacks_label_missing_facility_as_unknown() -> None:
    clock = FakeClock()
    dashboard = _dashboard(clock)
    dashboard.feedback.add(facility_id=99, rating=FeedbackRating.perfect, submitted_at=clock.now)

    (entry,) = dashboard.recent_feedbacks()

    assert entry.facility_name == "Unknown"
    assert entry.username == "Anonymous"


def test_status_overlays_estimate_and_keeps_raw_value() -> None:
    dashboard = _dashboard()
    dashboard.submit_reading(1, 90.0)
    dashboard.submit_reading(1, 96.0)

    status = dashboard.get_facility_status(1)

    assert status.weighted_temp == 93.0
    assert status.facility.current_temp == 93.0
    assert status.raw_temp == 95.0
    assert dashboard.get_facility_status(2).weighted_temp is None
    assert dashboard.get_facility_status(2).facility.current_temp == 85.0
