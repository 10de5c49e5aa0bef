# app/models/event.py
"""
Food distribution events.
registered_count is only ever raised through the guarded increment in
event_service, so it cannot pass available_bags during admission.
"""

import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Text, Enum
from sqlalchemy.orm import relationship
from app.database import Base


class EventStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    COMPLETED = "COMPLETED"


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    description = Column(Text)
    available_bags = Column(Integer, nullable=False)
    registered_count = Column(Integer, default=0, nullable=False)
    start_datetime = Column(DateTime, nullable=False, index=True)
    end_datetime = Column(DateTime, nullable=False, index=True)
    status = Column(Enum(EventStatus, name="event_status"), default=EventStatus.ACTIVE,
                    nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    registrations = relationship("Registration", back_populates="event")
    qr_sessions = relationship("QRSession", back_populates="event")

    @property
    def remaining_bags(self) -> int:
        return max(0, (self.available_bags or 0) - (self.registered_count or 0))

    def __repr__(self):
        return f"<Event {self.id} {self.name!r} {self.registered_count}/{self.available_bags} {self.status}>"
