from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class CitizenProfileOut(BaseModel):
    id: int
    phone_number: str
    first_name: str
    middle_name: Optional[str]
    last_name: str
    email: Optional[str]
    is_homeless: bool
    address: Optional[str]
    apartment_suite: Optional[str]
    city_town: Optional[str]
    state_province: Optional[str]
    zip_postal_code: Optional[str]
    country: Optional[str]
    county: Optional[str]
    user_id: Optional[int]
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
