from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from datetime import datetime
from typing import Optional
from app.utils.phone import has_enough_digits, MIN_PHONE_DIGITS


class RegistrationCreate(BaseModel):
    """Admission request. Exactly one of event_id / session_code selects the event."""
    event_id: Optional[int] = None
    session_code: Optional[str] = None

    first_name: str = Field(..., min_length=1, max_length=100)
    middle_name: Optional[str] = Field(None, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    is_homeless: bool = False
    total_individuals: int = Field(1, ge=1)
    address: Optional[str] = None
    apartment_suite: Optional[str] = None
    city_town: Optional[str] = None
    state_province: Optional[str] = None
    zip_postal_code: Optional[str] = None
    country: Optional[str] = None
    county: Optional[str] = None
    digital_signature: Optional[str] = None
    alternate_pickup_person: Optional[str] = None
    phone_number: str = Field(..., min_length=10)
    email: Optional[EmailStr] = None
    income_eligibility: bool = False
    snap: bool = False
    tanf: bool = False
    ssi: bool = False
    medicaid: bool = False
    income_salary: Optional[float] = Field(None, ge=0)

    @field_validator("email", "session_code", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("phone_number")
    @classmethod
    def phone_has_digits(cls, v):
        if not has_enough_digits(v):
            raise ValueError(f"Phone number must contain at least {MIN_PHONE_DIGITS} digits")
        return v

    @model_validator(mode="after")
    def check_event_selector(self):
        if self.event_id is None and not self.session_code:
            raise ValueError("Either event_id or session_code is required")
        return self


class AdmissionOut(BaseModel):
    success: bool = True
    order_number: str
    qr_code_url: str
    search_url: str
    message: str


class CheckInUpdate(BaseModel):
    checked_in: bool


class RegistrationOut(BaseModel):
    id: int
    order_number: str
    first_name: str
    middle_name: Optional[str]
    last_name: str
    full_name: str
    phone_number: str
    email: Optional[str]
    is_homeless: bool
    total_individuals: int
    address: Optional[str]
    city_town: Optional[str]
    state_province: Optional[str]
    zip_postal_code: Optional[str]
    registered_by: str
    registration_date: datetime
    checked_in: bool
    checked_in_at: Optional[datetime]
    event_id: int
    event_name: Optional[str] = None
    event_status: Optional[str] = None

    class Config:
        from_attributes = True

    @classmethod
    def from_registration(cls, reg) -> "RegistrationOut":
        out = cls.model_validate(reg)
        if reg.event is not None:
            out.event_name = reg.event.name
            out.event_status = reg.event.status.value
        return out


class RegistrationLookupOut(RegistrationOut):
    search_url: str
    qr_code_url: str
