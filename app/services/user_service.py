"""
User management: staff and citizen accounts, account edits, activation
toggles, self-service profile changes, and the seed accounts created by
scripts/setup/init_db.py.
"""

from typing import Optional
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from app.models.citizen_profile import CitizenProfile
from app.models.registration import Registration
from app.models.user import User, Role
from app.services.auth_service import hash_password, verify_password
from app.services.citizen_profile_service import link_user, normalized_phone_or_reject
from app.services.errors import Conflict, UserNotFound, InvalidRequest
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _ensure_username_free(db: Session, username: str) -> None:
    if db.query(User.id).filter(User.username == username).first():
        raise Conflict("Username already exists")


def _split_full_name(full_name: str) -> tuple[str, str]:
    parts = full_name.split()
    if not parts:
        return full_name, ""
    return parts[0], " ".join(parts[1:])


def create_staff(db: Session, username: str, password: str, full_name: str,
                 email: Optional[str] = None, phone_number: Optional[str] = None) -> User:
    _ensure_username_free(db, username)
    user = User(
        username=username,
        password_hash=hash_password(password),
        role=Role.STAFF,
        full_name=full_name,
        email=email or None,
        phone_number=normalized_phone_or_reject(phone_number) if phone_number else None,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Staff user created: {username}")
    return user


def create_citizen(db: Session, username: str, password: str, full_name: str,
                   email: Optional[str] = None, phone_number: Optional[str] = None) -> User:
    """Create a citizen login and link it to the phone's directory entry, if a phone is given."""
    _ensure_username_free(db, username)
    normalized_phone = normalized_phone_or_reject(phone_number) if phone_number else None
    try:
        user = User(
            username=username,
            password_hash=hash_password(password),
            role=Role.CITIZEN,
            full_name=full_name,
            email=email or None,
            phone_number=normalized_phone,
            is_active=True,
        )
        db.add(user)
        db.flush()
        if normalized_phone:
            first, last = _split_full_name(full_name)
            link_user(db, normalized_phone, user.id, first, last, email or None)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(user)
    logger.info(f"Citizen user created: {username}")
    return user


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise UserNotFound()
    return user


def set_active(db: Session, user_id: int, is_active: bool, expected_role: Optional[Role] = None) -> User:
    user = get_user(db, user_id)
    if expected_role is not None and user.role != expected_role:
        raise InvalidRequest(f"User is not a {expected_role.value.lower()} account")
    user.is_active = is_active
    db.commit()
    db.refresh(user)
    logger.info(f"User {user.username} {'activated' if is_active else 'deactivated'}")
    return user


# ── Account edits ─────────────────────────────────────────────────────────
def _apply_account_changes(db: Session, user: User, changes: dict) -> None:
    """
    `changes` holds only the fields the caller sent. A None email or phone
    clears it; full_name is never cleared.
    """
    if changes.get("full_name"):
        user.full_name = changes["full_name"]
    if "email" in changes:
        user.email = changes["email"] or None
    if "phone_number" in changes:
        phone = changes["phone_number"]
        user.phone_number = normalized_phone_or_reject(phone) if phone else None
        if user.role == Role.CITIZEN and user.phone_number:
            first, last = _split_full_name(user.full_name)
            link_user(db, user.phone_number, user.id, first, last, user.email)
    if changes.get("new_password"):
        user.password_hash = hash_password(changes["new_password"])


def _update_account(db: Session, user_id: int, changes: dict, expected_role: Role) -> User:
    user = get_user(db, user_id)
    if user.role != expected_role:
        raise InvalidRequest(f"User is not a {expected_role.value.lower()} account")
    try:
        _apply_account_changes(db, user, changes)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(user)
    logger.info(f"Account {user.username} updated: {', '.join(sorted(changes)) or 'no changes'}")
    return user


def update_staff(db: Session, user_id: int, changes: dict) -> User:
    return _update_account(db, user_id, changes, Role.STAFF)


def update_citizen(db: Session, user_id: int, changes: dict) -> User:
    return _update_account(db, user_id, changes, Role.CITIZEN)


def registration_count(db: Session, user_id: int) -> int:
    """Registrations tied to the account directly or through its linked profile."""
    return (
        db.query(func.count(Registration.id))
        .outerjoin(CitizenProfile, Registration.citizen_profile_id == CitizenProfile.id)
        .filter(or_(Registration.user_id == user_id, CitizenProfile.user_id == user_id))
        .scalar()
    ) or 0


def get_profile(db: Session, user_id: int) -> dict:
    user = get_user(db, user_id)
    return {
        "id": user.id,
        "username": user.username,
        "role": user.role,
        "full_name": user.full_name,
        "email": user.email,
        "phone_number": user.phone_number,
        "is_active": user.is_active,
        "created_at": user.created_at,
        "registration_count": registration_count(db, user.id),
    }


def update_own_profile(db: Session, user_id: int, changes: dict) -> dict:
    """Self-service edit. A new password is only accepted with the correct current one."""
    changes = dict(changes)
    current_password = changes.pop("current_password", None)
    user = get_user(db, user_id)
    if changes.get("new_password"):
        if not current_password:
            raise InvalidRequest("Current password is required to change password")
        if not verify_password(current_password, user.password_hash):
            logger.info(f"Password change refused for {user.username}: wrong current password")
            raise InvalidRequest("Current password is incorrect")
    try:
        _apply_account_changes(db, user, changes)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info(f"User {user.username} updated own profile: {', '.join(sorted(changes)) or 'no changes'}")
    return get_profile(db, user_id)


def list_users(db: Session, role: Optional[Role] = None) -> list[User]:
    q = db.query(User)
    if role:
        q = q.filter(User.role == role)
    return q.order_by(User.created_at.desc(), User.id.desc()).all()


def ensure_seed_user(db: Session, username: str, password: str, role: Role,
                     full_name: str, email: Optional[str] = None) -> str:
    """Create the account, or reset its password if it drifted. Returns what happened."""
    user = db.query(User).filter(User.username == username).first()
    if not user:
        db.add(User(username=username, password_hash=hash_password(password), role=role,
                    full_name=full_name, email=email, is_active=True))
        db.commit()
        return "created"
    if not verify_password(password, user.password_hash):
        user.password_hash = hash_password(password)
        db.commit()
        return "password_updated"
    return "unchanged"
