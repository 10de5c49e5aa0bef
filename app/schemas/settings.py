from pydantic import BaseModel, Field
from typing import Optional


class CooldownSettingsOut(BaseModel):
    registration_cooldown_enabled: bool
    registration_cooldown_days: int

    class Config:
        from_attributes = True


class CooldownSettingsUpdate(BaseModel):
    registration_cooldown_enabled: Optional[bool] = None
    registration_cooldown_days: Optional[int] = Field(None, ge=1, le=365)
