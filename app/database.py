"""
Database connection, session management, and table creation.
Uses SQLAlchemy with PostgreSQL (SQLite for local runs and tests). All models
are auto-imported here so create_tables() creates every table in one call.
"""

from sqlalchemy import create_engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from app.config import settings


def _engine_options(url: str) -> dict:
    options = {
        "pool_pre_ping": True,   # Auto-reconnect if DB connection drops
        "echo": False,           # Set True to log all SQL queries (debug only)
    }
    if url.startswith("sqlite"):
        # Request handlers run in a threadpool
        options["connect_args"] = {"check_same_thread": False}
    else:
        options["pool_size"] = 10
        options["max_overflow"] = 20
    return options


engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency — yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def dialect_insert(db):
    """
    The INSERT construct with ON CONFLICT support for the session's backend,
    or None when the backend has none.
    """
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
        return insert
    if dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
        return insert
    return None


def create_tables(bind=None):
    """
    Creates all DB tables on startup. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from app.models.user import User                         # noqa
    from app.models.event import Event                       # noqa
    from app.models.qr_session import QRSession              # noqa
    from app.models.citizen_profile import CitizenProfile    # noqa
    from app.models.registration import Registration         # noqa
    from app.models.admin_settings import AdminSettings      # noqa

    Base.metadata.create_all(bind=bind or engine)
