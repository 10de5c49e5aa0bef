"""
Cooldown settings: a single admin-editable row, loaded fresh on every
admission and handed to the workflow as an immutable CooldownPolicy.
"""

from dataclasses import dataclass
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.config import settings
from app.database import dialect_insert
from app.models.admin_settings import AdminSettings, SETTINGS_ROW_ID
from app.services.errors import InvalidRequest
from app.utils.logger import get_logger

logger = get_logger(__name__)

MIN_COOLDOWN_DAYS = 1
MAX_COOLDOWN_DAYS = 365


@dataclass(frozen=True)
class CooldownPolicy:
    enabled: bool
    days: int


def _insert_defaults(db: Session) -> None:
    """Create the singleton row unless another worker already has."""
    values = {
        "id": SETTINGS_ROW_ID,
        "registration_cooldown_enabled": settings.DEFAULT_COOLDOWN_ENABLED,
        "registration_cooldown_days": settings.DEFAULT_COOLDOWN_DAYS,
    }
    insert = dialect_insert(db)
    if insert is not None:
        db.execute(insert(AdminSettings).values(**values).on_conflict_do_nothing(index_elements=["id"]))
        db.commit()
        return

    try:
        db.add(AdminSettings(**values))
        db.commit()
    except IntegrityError:
        db.rollback()


def get_or_init_settings(db: Session) -> AdminSettings:
    row = db.get(AdminSettings, SETTINGS_ROW_ID)
    if row is None:
        _insert_defaults(db)
        row = db.get(AdminSettings, SETTINGS_ROW_ID)
        logger.info(f"Admin settings initialized: {row}")
    return row


def load_cooldown_policy(db: Session) -> CooldownPolicy:
    row = get_or_init_settings(db)
    return CooldownPolicy(enabled=bool(row.registration_cooldown_enabled),
                          days=int(row.registration_cooldown_days))


def update_cooldown_settings(db: Session, enabled: Optional[bool] = None,
                             days: Optional[int] = None) -> AdminSettings:
    if days is not None and not MIN_COOLDOWN_DAYS <= days <= MAX_COOLDOWN_DAYS:
        raise InvalidRequest(f"Cooldown days must be between {MIN_COOLDOWN_DAYS} and {MAX_COOLDOWN_DAYS}")
    row = get_or_init_settings(db)
    if enabled is not None:
        row.registration_cooldown_enabled = enabled
    if days is not None:
        row.registration_cooldown_days = days
    db.commit()
    db.refresh(row)
    logger.info(f"Cooldown settings updated: enabled={row.registration_cooldown_enabled} "
                f"days={row.registration_cooldown_days}")
    return row
