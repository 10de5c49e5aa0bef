"""Dashboard statistics."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import require
from app.services.stats_service import dashboard_stats

router = APIRouter()


@router.get("/stats/dashboard", summary="Event, registration and check-in counters")
def get_dashboard_stats(db: Session = Depends(get_db), _=Depends(require("stats.dashboard"))):
    return dashboard_stats(db)
