# app/models/admin_settings.py
"""
Singleton settings row (id = SETTINGS_ROW_ID).
Created lazily by settings_service.get_or_init_settings.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, Boolean, DateTime
from app.database import Base

SETTINGS_ROW_ID = 1


class AdminSettings(Base):
    __tablename__ = "admin_settings"

    id = Column(Integer, primary_key=True, autoincrement=False)
    registration_cooldown_enabled = Column(Boolean, default=True, nullable=False)
    registration_cooldown_days = Column(Integer, default=14, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return (f"<AdminSettings cooldown={self.registration_cooldown_enabled} "
                f"days={self.registration_cooldown_days}>")
