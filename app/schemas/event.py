from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from typing import Optional
from app.models.event import EventStatus


class EventCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    available_bags: int = Field(..., ge=1)
    start_datetime: datetime
    end_datetime: datetime

    @model_validator(mode="after")
    def check_window(self):
        if self.end_datetime <= self.start_datetime:
            raise ValueError("End datetime must be after start datetime")
        return self


class EventStatusUpdate(BaseModel):
    status: EventStatus


class EventCapacityUpdate(BaseModel):
    available_bags: int = Field(..., ge=1)


class EventOut(BaseModel):
    id: int
    name: str
    description: Optional[str]
    available_bags: int
    registered_count: int
    remaining_bags: int
    start_datetime: datetime
    end_datetime: datetime
    status: EventStatus

    class Config:
        from_attributes = True


class AutoCompleteResult(BaseModel):
    completed_count: int
    message: str
