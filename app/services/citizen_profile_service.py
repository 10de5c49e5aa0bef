"""
Citizen Profile Directory: one row per normalized phone number.
The newest registration's details always overwrite the stored ones.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.database import dialect_insert
from app.models.citizen_profile import CitizenProfile
from app.services.errors import InvalidRequest
from app.utils.phone import normalize_phone_number, digits_only, mask_phone_number
from app.utils.logger import get_logger

logger = get_logger(__name__)

PROFILE_FIELDS = (
    "first_name", "middle_name", "last_name", "email", "is_homeless",
    "address", "apartment_suite", "city_town", "state_province",
    "zip_postal_code", "country", "county",
)


def normalized_phone_or_reject(phone_number: str) -> str:
    """Normalize, turning an unusable number into an InvalidRequest."""
    try:
        return normalize_phone_number(phone_number)
    except ValueError as e:
        raise InvalidRequest(str(e))


def get_by_phone(db: Session, phone_number: str) -> Optional[CitizenProfile]:
    try:
        normalized = normalize_phone_number(phone_number)
    except ValueError:
        return None
    return db.query(CitizenProfile).filter(CitizenProfile.phone_number == normalized).first()


def _by_phone_query(db: Session, normalized_phone: str):
    return db.query(CitizenProfile).filter(CitizenProfile.phone_number == normalized_phone)


def _upsert_with_savepoint(db: Session, normalized_phone: str, values: dict) -> None:
    profile = _by_phone_query(db, normalized_phone).first()
    if profile is None:
        try:
            with db.begin_nested():
                db.add(CitizenProfile(phone_number=normalized_phone, **values))
            return
        except IntegrityError:
            # Another admission created it between our read and insert
            profile = _by_phone_query(db, normalized_phone).one()
    for key, value in values.items():
        setattr(profile, key, value)
    db.flush()


def upsert_profile(db: Session, normalized_phone: str, fields: dict,
                   now: Optional[datetime] = None) -> CitizenProfile:
    """
    Insert or overwrite the profile for a normalized phone number in one
    statement, so two first-time admissions for the same phone cannot collide
    on the unique index. Does not commit; runs inside the admission transaction.
    """
    now = now or datetime.utcnow()
    values = {k: fields.get(k) for k in PROFILE_FIELDS}
    values["is_homeless"] = bool(values["is_homeless"])

    insert = dialect_insert(db)
    if insert is not None:
        stmt = insert(CitizenProfile).values(
            phone_number=normalized_phone, created_at=now, updated_at=now, **values,
        )
        # onupdate defaults are not applied to ON CONFLICT updates
        stmt = stmt.on_conflict_do_update(
            index_elements=["phone_number"], set_={**values, "updated_at": now},
        )
        db.execute(stmt)
    else:
        _upsert_with_savepoint(db, normalized_phone, values)

    profile = _by_phone_query(db, normalized_phone).populate_existing().one()
    logger.debug(f"Profile {profile.id} upserted for {mask_phone_number(normalized_phone)}")
    return profile


def link_user(db: Session, normalized_phone: str, user_id: int, first_name: str,
              last_name: str, email: Optional[str] = None) -> CitizenProfile:
    """
    Attach a login account to the directory entry for its phone, creating one
    if needed. Any entry the account was linked to before is released.
    """
    db.query(CitizenProfile) \
        .filter(CitizenProfile.user_id == user_id, CitizenProfile.phone_number != normalized_phone) \
        .update({CitizenProfile.user_id: None}, synchronize_session="fetch")
    profile = db.query(CitizenProfile).filter(CitizenProfile.phone_number == normalized_phone).first()
    if profile:
        profile.user_id = user_id
        profile.first_name = first_name
        profile.last_name = last_name
        profile.email = email or profile.email
    else:
        profile = CitizenProfile(phone_number=normalized_phone, first_name=first_name,
                                 last_name=last_name, email=email, user_id=user_id)
        db.add(profile)
    db.flush()
    return profile


def list_profiles(db: Session, search: Optional[str] = None, limit: int = 100,
                  offset: int = 0) -> list[CitizenProfile]:
    q = db.query(CitizenProfile)
    if search:
        like = f"%{search.strip()}%"
        conditions = [CitizenProfile.first_name.ilike(like),
                      CitizenProfile.last_name.ilike(like),
                      CitizenProfile.email.ilike(like)]
        digits = digits_only(search)
        if digits:
            conditions.append(CitizenProfile.phone_number.contains(digits))
        q = q.filter(or_(*conditions))
    return q.order_by(CitizenProfile.created_at.desc(), CitizenProfile.id.desc()) \
        .offset(offset).limit(limit).all()
