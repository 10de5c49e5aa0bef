# tests/test_event_service.py
"""Tests for event validation, the guarded capacity counter, and auto-completion."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import timedelta
from app.models.event import Event, EventStatus
from app.services import event_service
from app.services.errors import (
    EventNotFound, EventNotActive, EventOutsideWindow, EventFull, InvalidRequest,
)
from conftest import NOW, make_event


class TestValidateForAdmission:
    def test_open_event_is_returned(self, db):
        event = make_event(db)
        assert event_service.validate_for_admission(db, event.id, NOW).id == event.id

    def test_missing_event(self, db):
        with pytest.raises(EventNotFound):
            event_service.validate_for_admission(db, 999, NOW)

    @pytest.mark.parametrize("status", [EventStatus.INACTIVE, EventStatus.COMPLETED])
    def test_non_active_event(self, db, status):
        event = make_event(db, status=status)
        with pytest.raises(EventNotActive):
            event_service.validate_for_admission(db, event.id, NOW)

    def test_event_already_ended(self, db):
        event = make_event(db, start=NOW - timedelta(days=2), end=NOW - timedelta(days=1))
        with pytest.raises(EventOutsideWindow):
            event_service.validate_for_admission(db, event.id, NOW)

    def test_event_not_started(self, db):
        event = make_event(db, start=NOW + timedelta(hours=1), end=NOW + timedelta(hours=3))
        with pytest.raises(EventOutsideWindow):
            event_service.validate_for_admission(db, event.id, NOW)

    def test_window_bounds_are_inclusive(self, db):
        event = make_event(db, start=NOW, end=NOW + timedelta(hours=1))
        event_service.validate_for_admission(db, event.id, NOW)
        event_service.validate_for_admission(db, event.id, NOW + timedelta(hours=1))


class TestCapacity:
    def test_check_capacity(self, db):
        event_service.check_capacity(make_event(db, available_bags=2, registered_count=1))
        with pytest.raises(EventFull):
            event_service.check_capacity(make_event(db, available_bags=2, registered_count=2))

    def test_guarded_increment_stops_at_available_bags(self, db):
        event = make_event(db, available_bags=2)
        event_service.increment_registered_count(db, event.id)
        event_service.increment_registered_count(db, event.id)
        with pytest.raises(EventFull):
            event_service.increment_registered_count(db, event.id)
        db.commit()
        db.refresh(event)
        assert event.registered_count == 2

    def test_increment_sees_count_written_by_another_session(self, db, session_factory):
        event = make_event(db, available_bags=1)
        other = session_factory()
        try:
            # Another worker already took the last bag
            event_service.increment_registered_count(other, event.id)
            other.commit()
        finally:
            other.close()

        event_service.check_capacity(event)   # stale in-memory copy still looks open
        with pytest.raises(EventFull):
            event_service.increment_registered_count(db, event.id)


class TestLifecycle:
    def test_create_event_starts_active_and_empty(self, db):
        event = event_service.create_event(db, "Food Drive", 50, NOW, NOW + timedelta(hours=4))
        assert event.status == EventStatus.ACTIVE
        assert event.registered_count == 0

    def test_create_event_rejects_inverted_window(self, db):
        with pytest.raises(InvalidRequest):
            event_service.create_event(db, "Bad", 5, NOW, NOW - timedelta(hours=1))

    def test_set_status_allows_any_transition(self, db):
        event = make_event(db)
        assert event_service.set_status(db, event.id, EventStatus.COMPLETED).status == EventStatus.COMPLETED
        assert event_service.set_status(db, event.id, EventStatus.ACTIVE).status == EventStatus.ACTIVE

    def test_set_status_missing_event(self, db):
        with pytest.raises(EventNotFound):
            event_service.set_status(db, 42, EventStatus.INACTIVE)

    def test_set_capacity(self, db):
        event = make_event(db, available_bags=5, registered_count=4)
        assert event_service.set_capacity(db, event.id, 3).available_bags == 3


class TestAutoCompleteExpired:
    def test_completes_only_ended_active_or_inactive_events(self, db):
        ended_active = make_event(db, start=NOW - timedelta(days=2), end=NOW - timedelta(days=1))
        ended_inactive = make_event(db, start=NOW - timedelta(days=2), end=NOW - timedelta(hours=1),
                                    status=EventStatus.INACTIVE)
        running = make_event(db)

        assert event_service.auto_complete_expired(db, NOW) == 2

        statuses = {e.id: e.status for e in db.query(Event).all()}
        assert statuses[ended_active.id] == EventStatus.COMPLETED
        assert statuses[ended_inactive.id] == EventStatus.COMPLETED
        assert statuses[running.id] == EventStatus.ACTIVE

    def test_second_run_changes_nothing(self, db):
        make_event(db, start=NOW - timedelta(days=2), end=NOW - timedelta(days=1))
        assert event_service.auto_complete_expired(db, NOW) == 1
        assert event_service.auto_complete_expired(db, NOW) == 0


class TestListActiveEvents:
    def test_only_open_events_soonest_first(self, db):
        later = make_event(db, name="Later", start=NOW - timedelta(minutes=10))
        sooner = make_event(db, name="Sooner", start=NOW - timedelta(hours=3))
        make_event(db, name="Closed", status=EventStatus.INACTIVE)
        make_event(db, name="Future", start=NOW + timedelta(hours=1), end=NOW + timedelta(hours=2))

        assert [e.id for e in event_service.list_active_events(db, NOW)] == [sooner.id, later.id]
