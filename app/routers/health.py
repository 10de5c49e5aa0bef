# app/routers/health.py
"""
Liveness check for the load balancer and the admin dashboard.
An unconfigured SMS gateway is a supported mode and never degrades status.
"""

from datetime import datetime
from fastapi import APIRouter, Depends
from sqlalchemy import func, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.config import settings
from app.database import get_db
from app.models.event import Event, EventStatus
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


def _database_status(db: Session) -> tuple[str, int]:
    """Returns ("ok", open event count) or an error string and -1."""
    try:
        db.execute(text("SELECT 1"))
        active = db.query(func.count(Event.id)).filter(Event.status == EventStatus.ACTIVE).scalar()
        return "ok", int(active or 0)
    except SQLAlchemyError as e:
        logger.error(f"Health check database failure: {e}")
        return f"error: {e.__class__.__name__}", -1


@router.get("/health", summary="Database and SMS gateway status")
def health_check(db: Session = Depends(get_db)):
    database, active_events = _database_status(db)
    return {
        "status": "ok" if database == "ok" else "degraded",
        "timestamp": datetime.utcnow().isoformat(),
        "database": database,
        "active_events": active_events,
        "sms": "configured" if settings.SMS_ENABLED else "disabled",
    }
