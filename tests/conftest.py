"""Shared fixtures: an in-memory SQLite database per test and small factories."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Must be set before app.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_TO_FILE"] = "false"
os.environ["BASE_URL"] = "https://foodbank.test"
os.environ["TWILIO_ACCOUNT_SID"] = ""
os.environ["TWILIO_AUTH_TOKEN"] = ""
os.environ["TWILIO_PHONE_NUMBER"] = ""

import pytest
from datetime import datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import create_tables
from app.models.event import Event, EventStatus
from app.models.user import User, Role
from app.schemas.registration import RegistrationCreate
from app.services.auth_service import hash_password

NOW = datetime(2026, 3, 2, 12, 0, 0)


@pytest.fixture
def engine():
    eng = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    create_tables(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


def make_event(db, available_bags=10, start=None, end=None, status=EventStatus.ACTIVE,
               name="Saturday Distribution", registered_count=0):
    event = Event(
        name=name,
        available_bags=available_bags,
        registered_count=registered_count,
        start_datetime=start or NOW - timedelta(hours=1),
        end_datetime=end or NOW + timedelta(hours=1),
        status=status,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def make_user(db, username="admin", role=Role.ADMIN, password="secret123", is_active=True):
    user = User(username=username, password_hash=hash_password(password), role=role,
                full_name=f"{username.title()} User", is_active=is_active)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_request(event_id=None, phone="555-123-4567", **overrides):
    data = {
        "event_id": event_id,
        "first_name": "Maria",
        "last_name": "Lopez",
        "phone_number": phone,
        "total_individuals": 3,
        "address": "12 Elm St",
        "city_town": "Springfield",
    }
    data.update(overrides)
    return RegistrationCreate(**data)
