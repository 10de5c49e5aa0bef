"""Citizen directory listing (staff + admin)."""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import require
from app.schemas.citizen_profile import CitizenProfileOut
from app.services import citizen_profile_service

router = APIRouter()


@router.get("/citizen-profiles", response_model=list[CitizenProfileOut], summary="Citizen directory")
def list_profiles(search: Optional[str] = None, limit: int = Query(100, ge=1, le=500),
                  offset: int = Query(0, ge=0), db: Session = Depends(get_db),
                  _=Depends(require("citizen_profiles.list"))):
    return citizen_profile_service.list_profiles(db, search, limit, offset)
