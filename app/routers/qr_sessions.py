"""QR registration sessions: issue (admin), resolve + featured (public), deactivate (admin)."""

from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import require
from app.schemas.event import EventOut
from app.schemas.qr_session import QRSessionCreate, QRSessionOut, FeaturedQRSessionOut, QRSessionStatusOut
from app.services import qr_session_service

router = APIRouter()


@router.post("/qr-sessions", response_model=QRSessionOut, status_code=201, summary="Issue a QR session")
def issue_session(body: QRSessionCreate, db: Session = Depends(get_db),
                  _=Depends(require("qr_sessions.issue"))):
    return qr_session_service.issue(db, body.event_id, body.expiration_hours)


@router.get("/qr-sessions/featured", response_model=Optional[FeaturedQRSessionOut],
            summary="Newest usable session for the landing page")
def featured_session(db: Session = Depends(get_db)):
    featured = qr_session_service.get_featured(db)
    if featured is None:
        return None
    return FeaturedQRSessionOut(**{**featured, "event": EventOut.model_validate(featured["event"])})


@router.get("/qr-sessions/{session_code}/event", response_model=EventOut,
            summary="Resolve a scanned code to its event")
def resolve_session(session_code: str, db: Session = Depends(get_db)):
    return qr_session_service.resolve(db, session_code)


@router.put("/qr-sessions/{session_code}/deactivate", response_model=QRSessionStatusOut,
            summary="Deactivate a QR session")
def deactivate_session(session_code: str, db: Session = Depends(get_db),
                       _=Depends(require("qr_sessions.deactivate"))):
    return qr_session_service.deactivate(db, session_code)
