"""
QR Session: short-lived codes that point self-service registration at one event.

Resolving a code only proves the session is usable; the event's own window
and capacity are checked again by the admission workflow.
"""

import secrets
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.orm import Session
from app.config import settings
from app.models.event import Event, EventStatus
from app.models.qr_session import QRSession
from app.services.event_service import get_event
from app.services.errors import (
    SessionNotFound, SessionExpired, SessionInactive, SessionCodeCollision, InvalidRequest,
)
from app.utils.logger import get_logger

logger = get_logger(__name__)

MIN_EXPIRATION_HOURS = 1
MAX_EXPIRATION_HOURS = 168   # one week
MAX_CODE_ATTEMPTS = 5


def generate_session_code() -> str:
    """128 random bits, hex encoded."""
    return secrets.token_hex(16)


def registration_url(session_code: str) -> str:
    return f"{settings.BASE_URL.rstrip('/')}/register?session={session_code}"


def _unique_session_code(db: Session) -> str:
    for _ in range(MAX_CODE_ATTEMPTS):
        code = generate_session_code()
        if not db.query(QRSession.id).filter(QRSession.session_code == code).first():
            return code
        logger.warning("QR session code collision, regenerating")
    raise SessionCodeCollision()


def issue(db: Session, event_id: int, expiration_hours: int = 24,
          now: Optional[datetime] = None) -> dict:
    now = now or datetime.utcnow()
    if not MIN_EXPIRATION_HOURS <= expiration_hours <= MAX_EXPIRATION_HOURS:
        raise InvalidRequest(
            f"Expiration must be between {MIN_EXPIRATION_HOURS} and {MAX_EXPIRATION_HOURS} hours"
        )
    event = get_event(db, event_id)

    session = QRSession(
        session_code=_unique_session_code(db),
        event_id=event.id,
        expires_at=now + timedelta(hours=expiration_hours),
        is_active=True,
        created_at=now,
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    logger.info(f"QR session issued for event {event.id}, expires {session.expires_at.isoformat()}")

    url = registration_url(session.session_code)
    return {
        "session_code": session.session_code,
        "registration_url": url,
        "expires_at": session.expires_at,
        "qr_data": url,
    }


def resolve(db: Session, session_code: str, now: Optional[datetime] = None) -> Event:
    now = now or datetime.utcnow()
    session = db.query(QRSession).filter(QRSession.session_code == session_code).first()
    if not session:
        raise SessionNotFound()
    if now > session.expires_at:
        raise SessionExpired()
    if not session.is_active:
        raise SessionInactive()
    return session.event


def deactivate(db: Session, session_code: str) -> QRSession:
    session = db.query(QRSession).filter(QRSession.session_code == session_code).first()
    if not session:
        raise SessionNotFound()
    session.is_active = False
    db.commit()
    db.refresh(session)
    logger.info(f"QR session {session_code[:8]}… deactivated (event {session.event_id})")
    return session


def get_featured(db: Session, now: Optional[datetime] = None) -> Optional[dict]:
    """Newest usable session whose event is open right now, for the landing page."""
    now = now or datetime.utcnow()
    session = (
        db.query(QRSession)
        .join(Event, QRSession.event_id == Event.id)
        .filter(QRSession.is_active.is_(True),
                QRSession.expires_at >= now,
                Event.status == EventStatus.ACTIVE,
                Event.start_datetime <= now,
                Event.end_datetime >= now)
        .order_by(QRSession.created_at.desc(), QRSession.id.desc())
        .first()
    )
    if not session:
        return None
    return {
        "session_code": session.session_code,
        "registration_url": registration_url(session.session_code),
        "expires_at": session.expires_at,
        "event": session.event,
    }
