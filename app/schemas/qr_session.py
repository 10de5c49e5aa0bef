from pydantic import BaseModel, Field
from datetime import datetime
from app.schemas.event import EventOut


class QRSessionCreate(BaseModel):
    event_id: int
    expiration_hours: int = Field(24, ge=1, le=168)   # max one week


class QRSessionOut(BaseModel):
    session_code: str
    registration_url: str
    expires_at: datetime
    qr_data: str


class FeaturedQRSessionOut(BaseModel):
    session_code: str
    registration_url: str
    expires_at: datetime
    event: EventOut


class QRSessionStatusOut(BaseModel):
    session_code: str
    event_id: int
    expires_at: datetime
    is_active: bool

    class Config:
        from_attributes = True
