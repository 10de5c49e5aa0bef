"""
Registration endpoints.
POST /registrations          — public self-service admission (event id or QR session code)
POST /registrations/assisted — staff registering on a citizen's behalf
GET  /registrations/lookup   — public order-number / phone lookup (citizen-search page)
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import require
from app.schemas.registration import (
    RegistrationCreate, AdmissionOut, CheckInUpdate, RegistrationOut, RegistrationLookupOut,
)
from app.services import registration_service
from app.services.auth_service import Principal
from app.services.registration_service import REGISTERED_BY_SELF, REGISTERED_BY_STAFF
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


def _admission_out(result) -> AdmissionOut:
    return AdmissionOut(order_number=result.order_number, qr_code_url=result.qr_code_url,
                        search_url=result.search_url, message=result.message)


@router.post("/registrations", response_model=AdmissionOut, status_code=201,
             summary="Register for a distribution event")
async def register(body: RegistrationCreate, db: Session = Depends(get_db)):
    result = await registration_service.register_citizen(db, body, registered_by=REGISTERED_BY_SELF)
    return _admission_out(result)


@router.post("/registrations/assisted", response_model=AdmissionOut, status_code=201,
             summary="Staff-assisted registration")
async def register_assisted(body: RegistrationCreate, db: Session = Depends(get_db),
                            principal: Principal = Depends(require("registrations.assisted"))):
    result = await registration_service.register_citizen(db, body, registered_by=REGISTERED_BY_STAFF)
    logger.info(f"{result.order_number} registered by {principal.username}")
    return _admission_out(result)


@router.get("/registrations/lookup", response_model=list[RegistrationLookupOut],
            summary="Find registrations by order number or phone")
def lookup(order_number: Optional[str] = Query(None, alias="orderNumber"),
           phone_number: Optional[str] = Query(None, alias="phoneNumber"),
           db: Session = Depends(get_db)):
    registrations = registration_service.lookup_registrations(db, order_number, phone_number)
    out = []
    for reg in registrations:
        search_url, qr_code_url = registration_service.build_lookup_links(reg.order_number)
        base = RegistrationOut.from_registration(reg).model_dump()
        out.append(RegistrationLookupOut(**base, search_url=search_url, qr_code_url=qr_code_url))
    return out


@router.get("/registrations/search", response_model=list[RegistrationOut], summary="Staff search")
def search(q: str = Query(..., min_length=1), limit: int = Query(50, ge=1, le=200),
           db: Session = Depends(get_db), _=Depends(require("registrations.search"))):
    return [RegistrationOut.from_registration(r)
            for r in registration_service.search_registrations(db, q, limit)]


@router.get("/registrations/recent", response_model=list[RegistrationOut], summary="Latest registrations")
def recent(limit: int = Query(20, ge=1, le=200), db: Session = Depends(get_db),
           _=Depends(require("registrations.recent"))):
    return [RegistrationOut.from_registration(r)
            for r in registration_service.recent_registrations(db, limit)]


@router.get("/registrations/mine", response_model=list[RegistrationOut], summary="My registrations")
def mine(db: Session = Depends(get_db), principal: Principal = Depends(require("registrations.mine"))):
    return [RegistrationOut.from_registration(r)
            for r in registration_service.list_user_registrations(db, principal.user_id)]


@router.put("/registrations/{registration_id}/check-in", response_model=RegistrationOut,
            summary="Check a citizen in (or undo)")
def check_in(registration_id: int, body: CheckInUpdate, db: Session = Depends(get_db),
             principal: Principal = Depends(require("registrations.check_in"))):
    reg = registration_service.set_checked_in(db, registration_id, body.checked_in)
    logger.info(f"Check-in {reg.order_number}={reg.checked_in} by {principal.username}")
    return RegistrationOut.from_registration(reg)
