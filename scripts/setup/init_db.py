# scripts/setup/init_db.py
"""
Initialize database — creates all tables, seeds the admin and staff accounts,
initializes cooldown settings and completes events that have already ended.
Safe to re-run: seed passwords are reset to ADMIN_PASSWORD if they drifted.
Usage: python scripts/setup/init_db.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from app.database import create_tables, engine, SessionLocal
from app.config import settings
from app.models.user import Role
from app.services.event_service import auto_complete_expired
from app.services.settings_service import get_or_init_settings
from app.services.user_service import ensure_seed_user
from sqlalchemy import text, inspect

SEED_USERS = [
    ("admin", Role.ADMIN, "System Administrator", "admin@foodbank.church"),
    ("staff", Role.STAFF, "Staff User", "staff@foodbank.church"),
]


def main():
    print("🗄️  Food Bank DB Initialization")
    print("=" * 40)
    print(f"📡 Database: {settings.DATABASE_URL}")

    # Test connection
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")
    except Exception as e:
        print(f"❌ Cannot connect to database: {e}")
        print("\nMake sure PostgreSQL is running:")
        print("  docker-compose up -d db")
        print("  # or: sudo systemctl start postgresql")
        sys.exit(1)

    print("\n📋 Creating tables...")
    create_tables()
    tables = sorted(inspect(engine).get_table_names())
    print(f"✅ Tables ready ({len(tables)} total):")
    for t in tables:
        print(f"   ✓ {t}")

    if settings.ADMIN_PASSWORD == "CHANGE_ME":
        print("\n⚠️  ADMIN_PASSWORD is still the default — set it in .env before going live")

    db = SessionLocal()
    try:
        print("\n👤 Seed accounts...")
        for username, role, full_name, email in SEED_USERS:
            outcome = ensure_seed_user(db, username, settings.ADMIN_PASSWORD, role, full_name, email)
            print(f"   ✓ {username} ({role.value}): {outcome.replace('_', ' ')}")

        row = get_or_init_settings(db)
        print(f"\n⚙️  Cooldown: enabled={row.registration_cooldown_enabled} "
              f"days={row.registration_cooldown_days}")

        completed = auto_complete_expired(db)
        print(f"\n📅 Marked {completed} expired event(s) as COMPLETED")
    finally:
        db.close()

    print("\n🎉 Database ready! You can now start the backend:")
    print(f"   uvicorn app.main:app --host {settings.HOST} --port {settings.PORT} --reload")


if __name__ == "__main__":
    main()
