"""
Event management endpoints.
GET /events/active is public (registration page); everything else needs staff or admin.
"""

from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import require
from app.models.event import EventStatus
from app.schemas.event import EventCreate, EventOut, EventStatusUpdate, EventCapacityUpdate, AutoCompleteResult
from app.schemas.registration import RegistrationOut
from app.services import event_service

router = APIRouter()


@router.get("/events/active", response_model=list[EventOut], summary="Events open for registration now")
def list_active_events(db: Session = Depends(get_db)):
    return event_service.list_active_events(db)


@router.get("/events", response_model=list[EventOut], summary="All events")
def list_events(status: Optional[EventStatus] = None, db: Session = Depends(get_db),
                _=Depends(require("events.list"))):
    return event_service.list_events(db, status)


@router.post("/events", response_model=EventOut, status_code=201, summary="Create an event")
def create_event(body: EventCreate, db: Session = Depends(get_db),
                 _=Depends(require("events.create"))):
    return event_service.create_event(
        db, name=body.name, description=body.description, available_bags=body.available_bags,
        start_datetime=body.start_datetime, end_datetime=body.end_datetime,
    )


@router.post("/events/auto-complete", response_model=AutoCompleteResult,
             summary="Mark ended events as COMPLETED")
def auto_complete(db: Session = Depends(get_db), _=Depends(require("events.auto_complete"))):
    count = event_service.auto_complete_expired(db)
    return {"completed_count": count, "message": f"Marked {count} expired event(s) as COMPLETED"}


@router.get("/events/{event_id}", summary="Event with its registrations")
def get_event_details(event_id: int, db: Session = Depends(get_db),
                      _=Depends(require("events.details"))):
    event = event_service.get_event(db, event_id)
    return {
        "event": EventOut.model_validate(event),
        "registrations": [RegistrationOut.from_registration(r) for r in event.registrations],
    }


@router.put("/events/{event_id}/status", response_model=EventOut, summary="Set event status")
def update_status(event_id: int, body: EventStatusUpdate, db: Session = Depends(get_db),
                  _=Depends(require("events.set_status"))):
    return event_service.set_status(db, event_id, body.status)


@router.put("/events/{event_id}/capacity", response_model=EventOut, summary="Correct available bags")
def update_capacity(event_id: int, body: EventCapacityUpdate, db: Session = Depends(get_db),
                    _=Depends(require("events.set_capacity"))):
    return event_service.set_capacity(db, event_id, body.available_bags)
