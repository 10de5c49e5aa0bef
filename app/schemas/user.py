from pydantic import BaseModel, EmailStr, Field, field_validator
from datetime import datetime
from typing import Optional
from app.models.user import Role
from app.utils.phone import has_enough_digits, MIN_PHONE_DIGITS


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


def _check_phone(v):
    if v is not None and not has_enough_digits(v):
        raise ValueError(f"Phone number must contain at least {MIN_PHONE_DIGITS} digits")
    return v


class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=6)
    full_name: str = Field(..., min_length=2, max_length=200)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = Field(None, min_length=10)

    @field_validator("email", "phone_number", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return _blank_to_none(v)

    @field_validator("phone_number")
    @classmethod
    def phone_has_digits(cls, v):
        return _check_phone(v)


class UserUpdate(BaseModel):
    """
    Staff-side account edit. Only fields present in the request change;
    a blank email or phone clears it.
    """
    full_name: Optional[str] = Field(None, min_length=2, max_length=200)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = Field(None, min_length=10)
    new_password: Optional[str] = Field(None, min_length=6)

    @field_validator("email", "phone_number", "new_password", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return _blank_to_none(v)

    @field_validator("phone_number")
    @classmethod
    def phone_has_digits(cls, v):
        return _check_phone(v)


class ProfileUpdate(UserUpdate):
    """Self-service edit. Changing the password needs the current one."""
    current_password: Optional[str] = None


class UserActiveUpdate(BaseModel):
    is_active: bool


class UserOut(BaseModel):
    id: int
    username: str
    role: Role
    full_name: str
    email: Optional[str]
    phone_number: Optional[str]
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class UserProfileOut(UserOut):
    registration_count: int = 0
