# app/models/qr_session.py
"""
QR registration sessions. A session code resolves to exactly one event while
active and unexpired. Rows are kept for audit; only is_active ever changes.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base


class QRSession(Base):
    __tablename__ = "qr_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_code = Column(String(64), unique=True, nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    event = relationship("Event", back_populates="qr_sessions")

    def __repr__(self):
        return f"<QRSession {self.session_code[:8]}… event={self.event_id} active={self.is_active}>"
