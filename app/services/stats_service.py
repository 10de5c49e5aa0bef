"""Dashboard counters for the admin and staff home pages."""

from sqlalchemy import func
from sqlalchemy.orm import Session
from app.models.event import Event, EventStatus
from app.models.registration import Registration
from app.models.user import User


def dashboard_stats(db: Session) -> dict:
    total_events = db.query(func.count(Event.id)).scalar() or 0
    total_registrations = db.query(func.count(Registration.id)).scalar() or 0
    total_users = db.query(func.count(User.id)).scalar() or 0

    by_status = dict(db.query(Event.status, func.count(Event.id)).group_by(Event.status).all())
    checked_in = db.query(func.count(Registration.id)).filter(Registration.checked_in.is_(True)).scalar() or 0
    bags = db.query(func.coalesce(func.sum(Event.available_bags), 0),
                    func.coalesce(func.sum(Event.registered_count), 0)).one()

    return {
        "total_events": total_events,
        "active_events": by_status.get(EventStatus.ACTIVE, 0),
        "inactive_events": by_status.get(EventStatus.INACTIVE, 0),
        "completed_events": by_status.get(EventStatus.COMPLETED, 0),
        "total_registrations": total_registrations,
        "checked_in_count": checked_in,
        "check_in_rate": round(checked_in / total_registrations * 100) if total_registrations else 0,
        "total_users": total_users,
        "total_bags": int(bags[0]),
        "bags_registered": int(bags[1]),
    }
