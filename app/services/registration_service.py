"""
Registration Admission workflow + check-in + registration lookups.

register_citizen() runs the ordered admission decision:
  normalize phone → resolve QR session (optional) → validate event window
  → capacity pre-check → load cooldown policy → enforce cooldown
  → mint order number → [guarded counter increment, profile upsert,
  registration insert] in one transaction → commit → best-effort SMS.

Every rejection is a terminal FoodBankError; nothing here retries except the
bounded order-number collision loop.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from urllib.parse import quote

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.config import settings
from app.models.citizen_profile import CitizenProfile
from app.models.event import Event
from app.models.registration import Registration
from app.services import event_service, qr_session_service
from app.services.citizen_profile_service import upsert_profile, normalized_phone_or_reject, PROFILE_FIELDS
from app.services.errors import CooldownActive, OrderNumberCollision, RegistrationNotFound, InvalidRequest
from app.services.settings_service import CooldownPolicy, load_cooldown_policy
from app.services.sms_service import send_sms
from app.utils.order_number import generate_order_number, canonical_order_number
from app.utils.phone import digits_only, mask_phone_number
from app.utils.logger import get_logger

logger = get_logger(__name__)

MAX_ORDER_NUMBER_ATTEMPTS = 5

REGISTERED_BY_SELF = "self"
REGISTERED_BY_STAFF = "staff"

# Applicant fields copied verbatim onto the registration row
REGISTRATION_FIELDS = PROFILE_FIELDS + (
    "total_individuals", "digital_signature", "alternate_pickup_person",
    "income_eligibility", "snap", "tanf", "ssi", "medicaid", "income_salary",
)


@dataclass
class AdmissionResult:
    order_number: str
    qr_code_url: str
    search_url: str
    message: str
    registration: Registration
    event: Event
    sms_sent: bool = False


def build_lookup_links(order_number: str) -> tuple[str, str]:
    """Return (search_url, qr_code_url) for an order number."""
    search_url = f"{settings.BASE_URL.rstrip('/')}/citizen-search?orderNumber={order_number}"
    qr_code_url = (f"{settings.QR_IMAGE_SERVICE_URL}?size={settings.QR_IMAGE_SIZE}"
                   f"&data={quote(search_url, safe='')}")
    return search_url, qr_code_url


def _clean(value):
    # Blank strings from forms are stored as NULL
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _applicant_fields(request) -> dict:
    fields = {name: _clean(getattr(request, name, None)) for name in REGISTRATION_FIELDS}
    for flag in ("is_homeless", "income_eligibility", "snap", "tanf", "ssi", "medicaid"):
        fields[flag] = bool(fields[flag])
    fields["total_individuals"] = fields["total_individuals"] or 1
    return fields


# ── Admission steps ───────────────────────────────────────────────────────
def enforce_cooldown(db: Session, normalized_phone: str, policy: CooldownPolicy,
                     now: datetime) -> None:
    """Reject when this phone registered for any event inside the cooldown window."""
    if not policy.enabled:
        return
    since = now - timedelta(days=policy.days)
    recent = (
        db.query(Registration.id)
        .filter(Registration.phone_number == normalized_phone,
                Registration.registration_date >= since)
        .order_by(Registration.registration_date.desc())
        .first()
    )
    if recent:
        logger.info(f"Cooldown active for {mask_phone_number(normalized_phone)} ({policy.days} days)")
        raise CooldownActive(policy.days)


def unique_order_number(db: Session, now: datetime) -> str:
    for attempt in range(1, MAX_ORDER_NUMBER_ATTEMPTS + 1):
        candidate = generate_order_number(now)
        exists = db.query(Registration.id).filter(Registration.order_number == candidate).first()
        if not exists:
            return candidate
        logger.warning(f"Order number collision on attempt {attempt}: {candidate}")
    raise OrderNumberCollision()


def _resolve_event(db: Session, request, now: datetime) -> Event:
    event_id = getattr(request, "event_id", None)
    session_code = getattr(request, "session_code", None)
    if session_code:
        event = qr_session_service.resolve(db, session_code, now=now)
        if event_id is not None and event_id != event.id:
            raise InvalidRequest("QR session does not belong to the selected event")
        event_id = event.id
    if event_id is None:
        raise InvalidRequest("An event or a QR session code is required")
    return event_service.validate_for_admission(db, event_id, now=now)


async def register_citizen(db: Session, request, registered_by: str = REGISTERED_BY_SELF,
                           now: Optional[datetime] = None,
                           policy: Optional[CooldownPolicy] = None) -> AdmissionResult:
    """
    Admit a citizen to an event or raise the reason they cannot be admitted.

    `request` carries event_id or session_code plus the applicant fields
    (see schemas.registration.RegistrationCreate). `policy` defaults to the
    stored cooldown settings.
    """
    now = now or datetime.utcnow()
    normalized_phone = normalized_phone_or_reject(request.phone_number)

    event = _resolve_event(db, request, now)
    event_service.check_capacity(event)

    policy = policy or load_cooldown_policy(db)
    enforce_cooldown(db, normalized_phone, policy, now)

    order_number = unique_order_number(db, now)
    fields = _applicant_fields(request)
    event_id, event_name = event.id, event.name

    try:
        event_service.increment_registered_count(db, event_id)
        profile = upsert_profile(db, normalized_phone, fields, now=now)
        registration = Registration(
            order_number=order_number,
            phone_number=normalized_phone,
            event_id=event_id,
            citizen_profile_id=profile.id,
            user_id=profile.user_id,
            registered_by=registered_by,
            registration_date=now,
            checked_in=False,
            **fields,
        )
        db.add(registration)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(registration)
    logger.info(f"Registered {order_number} for event {event_id} ({registered_by}) "
                f"phone={mask_phone_number(normalized_phone)}")

    search_url, qr_code_url = build_lookup_links(order_number)
    sms_sent = await _notify(normalized_phone, event_name, order_number, search_url)
    message = ("Registration successful! You will receive an SMS confirmation shortly."
               if sms_sent else
               "Registration successful! Please keep your order number for pickup.")
    return AdmissionResult(
        order_number=order_number,
        qr_code_url=qr_code_url,
        search_url=search_url,
        message=message,
        registration=registration,
        event=registration.event,
        sms_sent=sms_sent,
    )


async def _notify(phone: str, event_name: str, order_number: str, search_url: str) -> bool:
    """Runs after commit. A failed notification never undoes the registration."""
    body = (f"Thank you for registering for {event_name}! Your order number is: {order_number}. "
            f"View your registration: {search_url}")
    try:
        return await send_sms(phone, body)
    except Exception as e:
        logger.error(f"SMS notification for {order_number} failed: {e}", exc_info=True)
        return False


# ── Check-in ──────────────────────────────────────────────────────────────
def set_checked_in(db: Session, registration_id: int, checked_in: bool,
                   now: Optional[datetime] = None) -> Registration:
    """
    Staff check-in toggle. A repeated check-in keeps the first checked_in_at;
    undoing clears it.
    """
    now = now or datetime.utcnow()
    registration = db.query(Registration).filter(Registration.id == registration_id).first()
    if not registration:
        raise RegistrationNotFound()

    if checked_in:
        if not registration.checked_in or registration.checked_in_at is None:
            registration.checked_in_at = now
        registration.checked_in = True
    else:
        registration.checked_in = False
        registration.checked_in_at = None
    db.commit()
    db.refresh(registration)
    logger.info(f"Registration {registration.order_number} checked_in={registration.checked_in}")
    return registration


# ── Lookups ───────────────────────────────────────────────────────────────
def get_by_order_number(db: Session, order_number: str) -> Optional[Registration]:
    return db.query(Registration).filter(
        Registration.order_number == canonical_order_number(order_number)
    ).first()


def lookup_registrations(db: Session, order_number: Optional[str] = None,
                         phone_number: Optional[str] = None) -> list[Registration]:
    """Public lookup: exact order number, or partial match on phone digits."""
    if order_number and order_number.strip():
        registration = get_by_order_number(db, order_number)
        return [registration] if registration else []
    digits = digits_only(phone_number or "")
    if not digits:
        raise InvalidRequest("Either phone number or order number is required")
    return (
        db.query(Registration)
        .filter(Registration.phone_number.contains(digits))
        .order_by(Registration.registration_date.desc())
        .all()
    )


def search_registrations(db: Session, query: str, limit: int = 50) -> list[Registration]:
    """Staff search across phone digits, order number and names."""
    query = (query or "").strip()
    if not query:
        raise InvalidRequest("Search query is required")
    like = f"%{query}%"
    conditions = [
        Registration.order_number.ilike(like),
        Registration.first_name.ilike(like),
        Registration.last_name.ilike(like),
    ]
    digits = digits_only(query)
    if digits:
        conditions.append(Registration.phone_number.contains(digits))
    return (
        db.query(Registration)
        .filter(or_(*conditions))
        .order_by(Registration.registration_date.desc())
        .limit(limit)
        .all()
    )


def recent_registrations(db: Session, limit: int = 20) -> list[Registration]:
    return db.query(Registration).order_by(Registration.registration_date.desc()).limit(limit).all()


def list_user_registrations(db: Session, user_id: int) -> list[Registration]:
    """Registrations tied to a citizen account directly or through its profile."""
    return (
        db.query(Registration)
        .outerjoin(CitizenProfile, Registration.citizen_profile_id == CitizenProfile.id)
        .filter(or_(Registration.user_id == user_id, CitizenProfile.user_id == user_id))
        .order_by(Registration.registration_date.desc())
        .all()
    )
