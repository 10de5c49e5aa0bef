"""CSV exports."""

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import require
from app.services.export_service import export_citizen_profiles_csv

router = APIRouter()


@router.get("/exports/citizen-profiles.csv", summary="Citizen profiles + registrations as CSV")
def export_profiles(db: Session = Depends(get_db), _=Depends(require("exports.citizen_profiles"))):
    export = export_citizen_profiles_csv(db)
    return Response(
        content=export["csv"],
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="{export["filename"]}"',
            "X-Row-Count": str(export["row_count"]),
        },
    )
