# tests/test_qr_session_service.py
"""Tests for issuing, resolving and deactivating QR registration sessions."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import timedelta
from unittest.mock import patch
from app.models.event import EventStatus
from app.models.qr_session import QRSession
from app.services import qr_session_service
from app.services.errors import (
    EventNotFound, InvalidRequest, SessionNotFound, SessionExpired, SessionInactive,
    SessionCodeCollision,
)
from conftest import NOW, make_event


class TestIssue:
    def test_issue_returns_code_url_and_expiry(self, db):
        event = make_event(db)
        result = qr_session_service.issue(db, event.id, expiration_hours=2, now=NOW)

        assert len(result["session_code"]) == 32
        assert result["registration_url"] == \
            f"https://foodbank.test/register?session={result['session_code']}"
        assert result["qr_data"] == result["registration_url"]
        assert result["expires_at"] == NOW + timedelta(hours=2)

    def test_default_lifetime_is_24_hours(self, db):
        event = make_event(db)
        result = qr_session_service.issue(db, event.id, now=NOW)
        assert result["expires_at"] == NOW + timedelta(hours=24)

    @pytest.mark.parametrize("hours", [0, 169, -1])
    def test_lifetime_out_of_bounds(self, db, hours):
        event = make_event(db)
        with pytest.raises(InvalidRequest):
            qr_session_service.issue(db, event.id, expiration_hours=hours, now=NOW)

    @pytest.mark.parametrize("hours", [1, 168])
    def test_lifetime_bounds_are_inclusive(self, db, hours):
        event = make_event(db)
        qr_session_service.issue(db, event.id, expiration_hours=hours, now=NOW)

    def test_unknown_event(self, db):
        with pytest.raises(EventNotFound):
            qr_session_service.issue(db, 404, now=NOW)

    def test_codes_are_unique(self, db):
        event = make_event(db)
        codes = {qr_session_service.issue(db, event.id, now=NOW)["session_code"] for _ in range(20)}
        assert len(codes) == 20

    def test_colliding_code_is_regenerated(self, db):
        event = make_event(db)
        db.add(QRSession(session_code="a" * 32, event_id=event.id,
                         expires_at=NOW + timedelta(hours=1), is_active=True))
        db.commit()

        with patch("app.services.qr_session_service.generate_session_code",
                   side_effect=["a" * 32, "b" * 32]):
            result = qr_session_service.issue(db, event.id, now=NOW)
        assert result["session_code"] == "b" * 32

    def test_gives_up_after_repeated_collisions(self, db):
        event = make_event(db)
        db.add(QRSession(session_code="a" * 32, event_id=event.id,
                         expires_at=NOW + timedelta(hours=1), is_active=True))
        db.commit()

        with patch("app.services.qr_session_service.generate_session_code", return_value="a" * 32):
            with pytest.raises(SessionCodeCollision):
                qr_session_service.issue(db, event.id, now=NOW)


class TestResolve:
    def test_resolves_to_event(self, db):
        event = make_event(db)
        code = qr_session_service.issue(db, event.id, expiration_hours=1, now=NOW)["session_code"]
        assert qr_session_service.resolve(db, code, now=NOW).id == event.id

    def test_usable_up_to_expiry_instant(self, db):
        event = make_event(db)
        code = qr_session_service.issue(db, event.id, expiration_hours=1, now=NOW)["session_code"]
        qr_session_service.resolve(db, code, now=NOW + timedelta(hours=1))

    def test_expired_one_second_after_expiry(self, db):
        event = make_event(db)
        code = qr_session_service.issue(db, event.id, expiration_hours=1, now=NOW)["session_code"]
        with pytest.raises(SessionExpired):
            qr_session_service.resolve(db, code, now=NOW + timedelta(hours=1, seconds=1))

    def test_unknown_code(self, db):
        with pytest.raises(SessionNotFound):
            qr_session_service.resolve(db, "deadbeef", now=NOW)

    def test_deactivated(self, db):
        event = make_event(db)
        code = qr_session_service.issue(db, event.id, now=NOW)["session_code"]
        qr_session_service.deactivate(db, code)
        with pytest.raises(SessionInactive):
            qr_session_service.resolve(db, code, now=NOW)

    def test_expired_reported_before_inactive(self, db):
        event = make_event(db)
        code = qr_session_service.issue(db, event.id, expiration_hours=1, now=NOW)["session_code"]
        qr_session_service.deactivate(db, code)
        with pytest.raises(SessionExpired):
            qr_session_service.resolve(db, code, now=NOW + timedelta(hours=2))

    def test_resolve_does_not_check_event_status(self, db):
        event = make_event(db, status=EventStatus.INACTIVE)
        code = qr_session_service.issue(db, event.id, now=NOW)["session_code"]
        assert qr_session_service.resolve(db, code, now=NOW).id == event.id

    def test_deactivate_unknown_code(self, db):
        with pytest.raises(SessionNotFound):
            qr_session_service.deactivate(db, "nope")


class TestFeatured:
    def test_newest_usable_session_for_open_event(self, db):
        event = make_event(db)
        qr_session_service.issue(db, event.id, now=NOW - timedelta(minutes=30))
        newest = qr_session_service.issue(db, event.id, now=NOW - timedelta(minutes=5))

        featured = qr_session_service.get_featured(db, now=NOW)
        assert featured["session_code"] == newest["session_code"]
        assert featured["event"].id == event.id

    def test_none_when_event_closed(self, db):
        event = make_event(db, status=EventStatus.COMPLETED)
        qr_session_service.issue(db, event.id, now=NOW)
        assert qr_session_service.get_featured(db, now=NOW) is None

    def test_none_when_session_deactivated(self, db):
        event = make_event(db)
        code = qr_session_service.issue(db, event.id, now=NOW)["session_code"]
        qr_session_service.deactivate(db, code)
        assert qr_session_service.get_featured(db, now=NOW) is None
