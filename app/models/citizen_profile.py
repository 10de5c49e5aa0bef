# app/models/citizen_profile.py
"""
Citizen directory keyed by normalized phone number.
Overwritten with the latest registration's details; history lives in registrations.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base


class CitizenProfile(Base):
    __tablename__ = "citizen_profiles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    phone_number = Column(String(30), unique=True, nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    middle_name = Column(String(100))
    last_name = Column(String(100), nullable=False)
    email = Column(String(200))
    is_homeless = Column(Boolean, default=False, nullable=False)
    address = Column(String(300))
    apartment_suite = Column(String(100))
    city_town = Column(String(100))
    state_province = Column(String(100))
    zip_postal_code = Column(String(20))
    country = Column(String(100))
    county = Column(String(100))
    user_id = Column(Integer, ForeignKey("users.id"), unique=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User")
    registrations = relationship("Registration", back_populates="citizen_profile",
                                 order_by="Registration.registration_date.desc()")

    def __repr__(self):
        return f"<CitizenProfile {self.id} {self.phone_number}>"
