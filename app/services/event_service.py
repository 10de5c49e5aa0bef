"""
Event Capacity: event lifecycle, time-window and capacity checks, and the
guarded registration counter.

The counter is only raised with a conditional UPDATE
(registered_count < available_bags), so two requests racing for the last
bag cannot both succeed.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from app.models.event import Event, EventStatus
from app.services.errors import (
    EventNotFound, EventNotActive, EventOutsideWindow, EventFull, InvalidRequest,
)
from app.utils.logger import get_logger

logger = get_logger(__name__)


def get_event(db: Session, event_id: int) -> Event:
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise EventNotFound()
    return event


def validate_for_admission(db: Session, event_id: int, now: Optional[datetime] = None) -> Event:
    """Return the event if it can take registrations right now."""
    now = now or datetime.utcnow()
    event = get_event(db, event_id)
    if event.status != EventStatus.ACTIVE:
        raise EventNotActive()
    if now < event.start_datetime or now > event.end_datetime:
        raise EventOutsideWindow()
    return event


def check_capacity(event: Event) -> None:
    if event.registered_count >= event.available_bags:
        raise EventFull()


def increment_registered_count(db: Session, event_id: int) -> None:
    """
    Add one registration to the event's counter inside the caller's transaction.
    Raises EventFull when no bag is left at write time. Does not commit.
    """
    updated = (
        db.query(Event)
        .filter(Event.id == event_id, Event.registered_count < Event.available_bags)
        .update({Event.registered_count: Event.registered_count + 1}, synchronize_session=False)
    )
    if updated != 1:
        logger.warning(f"Capacity reached for event {event_id} at increment time")
        raise EventFull()


def create_event(db: Session, name: str, available_bags: int, start_datetime: datetime,
                 end_datetime: datetime, description: Optional[str] = None) -> Event:
    if available_bags < 1:
        raise InvalidRequest("Must have at least 1 bag available")
    if end_datetime <= start_datetime:
        raise InvalidRequest("End datetime must be after start datetime")
    event = Event(
        name=name,
        description=description,
        available_bags=available_bags,
        registered_count=0,
        start_datetime=start_datetime,
        end_datetime=end_datetime,
        status=EventStatus.ACTIVE,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info(f"Event created: {event.id} {event.name!r} bags={available_bags}")
    return event


def set_status(db: Session, event_id: int, status: EventStatus) -> Event:
    """Admin transition. Any status may follow any other."""
    event = get_event(db, event_id)
    previous = event.status
    event.status = EventStatus(status)
    db.commit()
    db.refresh(event)
    logger.info(f"Event {event_id} status {previous.value} → {event.status.value}")
    return event


def set_capacity(db: Session, event_id: int, available_bags: int) -> Event:
    """Admin correction of available bags. May leave the event over-subscribed."""
    if available_bags < 1:
        raise InvalidRequest("Must have at least 1 bag available")
    event = get_event(db, event_id)
    event.available_bags = available_bags
    db.commit()
    db.refresh(event)
    if event.registered_count > available_bags:
        logger.warning(f"Event {event_id} now over capacity: {event.registered_count}/{available_bags}")
    return event


def auto_complete_expired(db: Session, now: Optional[datetime] = None) -> int:
    """Mark every ACTIVE/INACTIVE event that has ended as COMPLETED. Returns rows changed."""
    now = now or datetime.utcnow()
    completed = (
        db.query(Event)
        .filter(Event.status.in_([EventStatus.ACTIVE, EventStatus.INACTIVE]),
                Event.end_datetime < now)
        .update({Event.status: EventStatus.COMPLETED}, synchronize_session=False)
    )
    db.commit()
    if completed:
        logger.info(f"Marked {completed} expired event(s) as COMPLETED")
    return completed


def list_active_events(db: Session, now: Optional[datetime] = None) -> list[Event]:
    """Events open for registration right now, soonest first."""
    now = now or datetime.utcnow()
    return (
        db.query(Event)
        .filter(Event.status == EventStatus.ACTIVE,
                Event.start_datetime <= now,
                Event.end_datetime >= now)
        .order_by(Event.start_datetime.asc())
        .all()
    )


def list_events(db: Session, status: Optional[EventStatus] = None) -> list[Event]:
    q = db.query(Event)
    if status:
        q = q.filter(Event.status == status)
    return q.order_by(Event.start_datetime.desc()).all()
