# app/models/registration.py
"""
Admission records. Applicant fields are copied at registration time so that
history stays stable when the profile changes later.
Only checked_in / checked_in_at change after creation.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text, Float, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base


class Registration(Base):
    __tablename__ = "registrations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_number = Column(String(40), unique=True, nullable=False, index=True)

    first_name = Column(String(100), nullable=False)
    middle_name = Column(String(100))
    last_name = Column(String(100), nullable=False)
    phone_number = Column(String(30), nullable=False, index=True)
    email = Column(String(200))
    is_homeless = Column(Boolean, default=False, nullable=False)
    total_individuals = Column(Integer, default=1, nullable=False)
    address = Column(String(300))
    apartment_suite = Column(String(100))
    city_town = Column(String(100))
    state_province = Column(String(100))
    zip_postal_code = Column(String(20))
    country = Column(String(100))
    county = Column(String(100))
    digital_signature = Column(Text)
    alternate_pickup_person = Column(String(200))

    income_eligibility = Column(Boolean, default=False, nullable=False)
    snap = Column(Boolean, default=False, nullable=False)
    tanf = Column(Boolean, default=False, nullable=False)
    ssi = Column(Boolean, default=False, nullable=False)
    medicaid = Column(Boolean, default=False, nullable=False)
    income_salary = Column(Float)

    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    citizen_profile_id = Column(Integer, ForeignKey("citizen_profiles.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"))
    registered_by = Column(String(20), nullable=False, default="self")   # self | staff

    registration_date = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    checked_in = Column(Boolean, default=False, nullable=False)
    checked_in_at = Column(DateTime)

    event = relationship("Event", back_populates="registrations")
    citizen_profile = relationship("CitizenProfile", back_populates="registrations")
    user = relationship("User")

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.middle_name, self.last_name]
        return " ".join(p for p in parts if p).strip()

    def __repr__(self):
        return f"<Registration {self.order_number} event={self.event_id} checked_in={self.checked_in}>"
