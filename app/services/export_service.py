"""
CSV export of the citizen directory: one row per registration, or a single
row with blank registration columns for profiles that never registered.
"""

import csv
import io
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session, selectinload
from app.models.citizen_profile import CitizenProfile
from app.models.registration import Registration

HEADERS = [
    "Profile ID", "Phone Number", "First Name", "Middle Name", "Last Name", "Email",
    "Is Homeless", "Address", "Apartment/Suite", "City/Town", "State/Province",
    "Zip/Postal Code", "Country", "County", "Has User Account", "Username",
    "Account Active", "Total Registrations", "Profile Created Date", "Profile Updated Date",
    "Registration Order Number", "Event Name", "Event Start Date", "Event End Date",
    "Event Status", "Registration Date", "Checked In", "Checked In Date", "Household Size",
    "Alternate Pickup Person", "Income Eligibility", "SNAP", "TANF", "SSI", "Medicaid",
    "Income/Salary", "Digital Signature",
]

_REGISTRATION_COLUMNS = len(HEADERS) - 20


def _yes_no(value) -> str:
    return "Yes" if value else "No"


def _iso(value: Optional[datetime]) -> str:
    return value.isoformat() if value else ""


def _profile_columns(profile: CitizenProfile) -> list:
    user = profile.user
    return [
        profile.id, profile.phone_number, profile.first_name, profile.middle_name or "",
        profile.last_name, profile.email or "", _yes_no(profile.is_homeless),
        profile.address or "", profile.apartment_suite or "", profile.city_town or "",
        profile.state_province or "", profile.zip_postal_code or "", profile.country or "",
        profile.county or "", _yes_no(user), user.username if user else "",
        _yes_no(user.is_active) if user else "", len(profile.registrations),
        _iso(profile.created_at), _iso(profile.updated_at),
    ]


def _registration_columns(reg: Registration) -> list:
    event = reg.event
    return [
        reg.order_number, event.name, _iso(event.start_datetime), _iso(event.end_datetime),
        event.status.value, _iso(reg.registration_date), _yes_no(reg.checked_in),
        _iso(reg.checked_in_at), reg.total_individuals, reg.alternate_pickup_person or "",
        _yes_no(reg.income_eligibility), _yes_no(reg.snap), _yes_no(reg.tanf),
        _yes_no(reg.ssi), _yes_no(reg.medicaid),
        "" if reg.income_salary is None else reg.income_salary,
        reg.digital_signature or "",
    ]


def export_citizen_profiles_csv(db: Session, now: Optional[datetime] = None) -> dict:
    """Returns {csv, filename, row_count}."""
    now = now or datetime.utcnow()
    profiles = (
        db.query(CitizenProfile)
        .options(selectinload(CitizenProfile.user),
                 selectinload(CitizenProfile.registrations).selectinload(Registration.event))
        .order_by(CitizenProfile.created_at.desc(), CitizenProfile.id.desc())
        .all()
    )

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(HEADERS)
    rows = 0
    for profile in profiles:
        base = _profile_columns(profile)
        if not profile.registrations:
            writer.writerow(base + [""] * _REGISTRATION_COLUMNS)
            rows += 1
            continue
        for reg in profile.registrations:
            writer.writerow(base + _registration_columns(reg))
            rows += 1

    return {
        "csv": buffer.getvalue(),
        "filename": f"citizen-profiles-export-{now.date().isoformat()}.csv",
        "row_count": rows,
    }
