# tests/test_auth_service.py
"""Unit tests for passwords, access tokens and the role permission table."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import datetime, timedelta
from jose import jwt
from app.config import settings
from app.models.user import Role
from app.services import auth_service
from app.services.auth_service import (
    Principal, OPERATION_ROLES, authorize, create_access_token, decode_access_token,
    hash_password, verify_password,
)
from app.services.errors import Unauthorized, Forbidden
from conftest import make_user


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("s3cret!")
        assert hashed != "s3cret!"
        assert verify_password("s3cret!", hashed)
        assert not verify_password("wrong", hashed)

    def test_garbage_hash_never_verifies(self):
        assert not verify_password("anything", "not-a-bcrypt-hash")


class TestTokens:
    def test_round_trip_carries_user_role_and_username(self, db):
        user = make_user(db, "staff1", Role.STAFF)
        principal = decode_access_token(create_access_token(user))
        assert principal == Principal(user_id=user.id, role=Role.STAFF, username="staff1")

    def test_token_lifetime_is_24_hours(self, db):
        user = make_user(db)
        now = datetime.utcnow().replace(microsecond=0)
        claims = jwt.get_unverified_claims(create_access_token(user, now=now))
        assert claims["exp"] - claims["iat"] == 24 * 3600

    def test_expired_token_is_unauthorized(self, db):
        user = make_user(db)
        token = create_access_token(user, now=datetime.utcnow() - timedelta(hours=25))
        with pytest.raises(Unauthorized):
            decode_access_token(token)

    def test_token_signed_with_other_secret_is_unauthorized(self):
        token = jwt.encode({"userId": 1, "role": "ADMIN", "username": "x",
                            "exp": datetime.utcnow() + timedelta(hours=1)},
                           "another-secret", algorithm=settings.JWT_ALGORITHM)
        with pytest.raises(Unauthorized):
            decode_access_token(token)

    @pytest.mark.parametrize("token", [None, "", "not.a.jwt", "abc"])
    def test_missing_or_malformed_token_is_unauthorized(self, token):
        with pytest.raises(Unauthorized):
            decode_access_token(token)

    def test_unknown_role_is_unauthorized(self):
        token = jwt.encode({"userId": 1, "role": "SUPERUSER", "username": "x",
                            "exp": datetime.utcnow() + timedelta(hours=1)},
                           settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
        with pytest.raises(Unauthorized):
            decode_access_token(token)


class TestAuthorize:
    def admin(self):
        return Principal(1, Role.ADMIN, "admin")

    def staff(self):
        return Principal(2, Role.STAFF, "staff")

    def citizen(self):
        return Principal(3, Role.CITIZEN, "citizen")

    def test_admin_only_operations(self):
        for op in ("events.create", "qr_sessions.issue", "settings.update", "users.create_staff"):
            authorize(self.admin(), op)
            with pytest.raises(Forbidden):
                authorize(self.staff(), op)
            with pytest.raises(Forbidden):
                authorize(self.citizen(), op)

    def test_staff_operations_admit_admin_and_staff(self):
        for op in ("registrations.check_in", "registrations.search", "exports.citizen_profiles"):
            authorize(self.admin(), op)
            authorize(self.staff(), op)
            with pytest.raises(Forbidden):
                authorize(self.citizen(), op)

    def test_citizen_operation(self):
        authorize(self.citizen(), "registrations.mine")
        with pytest.raises(Forbidden):
            authorize(self.staff(), "registrations.mine")

    def test_unknown_operation_is_a_programming_error(self):
        with pytest.raises(KeyError):
            authorize(self.admin(), "events.delete")

    def test_every_entry_uses_known_roles(self):
        for roles in OPERATION_ROLES.values():
            assert roles and roles <= set(Role)


class TestLogin:
    def test_valid_credentials_return_token(self, db):
        make_user(db, "admin", Role.ADMIN, password="pw123456")
        result = auth_service.login(db, "admin", "pw123456")
        assert decode_access_token(result["token"]).role == Role.ADMIN

    def test_wrong_password(self, db):
        make_user(db, "admin", Role.ADMIN, password="pw123456")
        with pytest.raises(Unauthorized):
            auth_service.login(db, "admin", "nope")

    def test_unknown_user(self, db):
        with pytest.raises(Unauthorized):
            auth_service.login(db, "ghost", "pw")

    def test_deactivated_user_cannot_log_in(self, db):
        make_user(db, "olduser", Role.STAFF, password="pw123456", is_active=False)
        with pytest.raises(Unauthorized):
            auth_service.login(db, "olduser", "pw123456")
