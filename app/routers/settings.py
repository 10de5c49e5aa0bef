"""Registration cooldown settings (admin only)."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import require
from app.schemas.settings import CooldownSettingsOut, CooldownSettingsUpdate
from app.services import settings_service

router = APIRouter()


@router.get("/settings/cooldown", response_model=CooldownSettingsOut, summary="Read cooldown settings")
def get_cooldown(db: Session = Depends(get_db), _=Depends(require("settings.read"))):
    return settings_service.get_or_init_settings(db)


@router.put("/settings/cooldown", response_model=CooldownSettingsOut, summary="Update cooldown settings")
def update_cooldown(body: CooldownSettingsUpdate, db: Session = Depends(get_db),
                    _=Depends(require("settings.update"))):
    return settings_service.update_cooldown_settings(
        db, enabled=body.registration_cooldown_enabled, days=body.registration_cooldown_days,
    )
