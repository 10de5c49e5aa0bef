"""
Identity & access: password hashing, signed access tokens, and the
role → operation permission table.

Tokens are HS256 JWTs carrying userId, role and username, valid for
ACCESS_TOKEN_EXPIRE_HOURS. Every protected operation names itself in
OPERATION_ROLES; authorize() is the only place roles are compared.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import bcrypt
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.config import settings
from app.models.user import User, Role
from app.services.errors import Unauthorized, Forbidden
from app.utils.logger import get_logger

logger = get_logger(__name__)

_ADMIN = frozenset({Role.ADMIN})
_STAFF = frozenset({Role.ADMIN, Role.STAFF})
_CITIZEN = frozenset({Role.CITIZEN})
_ANY = frozenset(Role)

OPERATION_ROLES = {
    # Events
    "events.list": _STAFF,
    "events.details": _STAFF,
    "events.create": _ADMIN,
    "events.set_status": _ADMIN,
    "events.set_capacity": _ADMIN,
    "events.auto_complete": _ADMIN,
    # QR sessions
    "qr_sessions.issue": _ADMIN,
    "qr_sessions.deactivate": _ADMIN,
    # Registrations
    "registrations.assisted": _STAFF,
    "registrations.search": _STAFF,
    "registrations.recent": _STAFF,
    "registrations.check_in": _STAFF,
    "registrations.mine": _CITIZEN,
    # Directory, exports, stats
    "citizen_profiles.list": _STAFF,
    "exports.citizen_profiles": _STAFF,
    "stats.dashboard": _STAFF,
    # Settings
    "settings.read": _ADMIN,
    "settings.update": _ADMIN,
    # Users
    "users.list": _ADMIN,
    "users.create_staff": _ADMIN,
    "users.create_citizen": _STAFF,
    "users.set_staff_active": _ADMIN,
    "users.set_citizen_active": _STAFF,
    "users.update_staff": _ADMIN,
    "users.update_citizen": _STAFF,
    "users.view_own_profile": _ANY,
    "users.update_own_profile": _ANY,
}


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, as decoded from a token."""
    user_id: int
    role: Role
    username: str


# ── Passwords ─────────────────────────────────────────────────────────────
def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"),
                         bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored hash is not a bcrypt hash
        return False


# ── Tokens ────────────────────────────────────────────────────────────────
def create_access_token(user: User, now: Optional[datetime] = None,
                        expires_delta: Optional[timedelta] = None) -> str:
    now = now or datetime.utcnow()
    expires = now + (expires_delta or timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS))
    role = user.role.value if isinstance(user.role, Role) else str(user.role)
    payload = {
        "userId": user.id,
        "role": role,
        "username": user.username,
        "iat": now,
        "exp": expires,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: Optional[str]) -> Principal:
    """Verify a token and return its principal. Any defect is Unauthorized."""
    if not token:
        raise Unauthorized("Missing authentication token")
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.debug(f"Token rejected: {e}")
        raise Unauthorized()

    user_id = payload.get("userId")
    username = payload.get("username")
    try:
        role = Role(payload.get("role"))
    except ValueError:
        raise Unauthorized()
    if not isinstance(user_id, int) or not username:
        raise Unauthorized()
    return Principal(user_id=user_id, role=role, username=username)


def authorize(principal: Principal, operation: str) -> Principal:
    allowed = OPERATION_ROLES.get(operation)
    if allowed is None:
        # Unknown operation names are a programming error, never a pass
        raise KeyError(f"No permission entry for operation '{operation}'")
    if principal.role not in allowed:
        logger.info(f"Denied {operation} for {principal.username} ({principal.role.value})")
        raise Forbidden()
    return principal


# ── Login ─────────────────────────────────────────────────────────────────
def authenticate(db: Session, username: str, password: str) -> User:
    user = db.query(User).filter(User.username == username).first()
    if not user or not verify_password(password, user.password_hash):
        logger.info(f"Failed login for username={username!r}")
        raise Unauthorized("Invalid username or password")
    if not user.is_active:
        logger.info(f"Login refused for deactivated user {username!r}")
        raise Unauthorized("This account has been deactivated")
    return user


def login(db: Session, username: str, password: str, now: Optional[datetime] = None) -> dict:
    user = authenticate(db, username, password)
    token = create_access_token(user, now=now)
    logger.info(f"User {user.username} logged in ({user.role.value})")
    return {"token": token, "user": user}
