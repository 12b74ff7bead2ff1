"""
Pydantic schemas for booking-related request/response validation.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from lending.core.timeutils import to_naive_utc, utcnow
from lending.models import BookingStatus


class BookingCreate(BaseModel):
    item_id: int = Field(..., gt=0)
    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def normalize_timezone(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    @model_validator(mode="after")
    def check_window(self) -> "BookingCreate":
        if self.start < utcnow():
            raise ValueError("Start date cannot be in the past")
        if self.end <= self.start:
            raise ValueError("End date must be after start date")
        return self


class UserBrief(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class ItemBrief(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class BookingResponse(BaseModel):
    id: int
    start: datetime
    end: datetime
    status: BookingStatus
    booker: UserBrief
    item: ItemBrief

    model_config = {"from_attributes": True}


class BookingBrief(BaseModel):
    """The last/next booking attached to an item view."""

    id: int
    booker_id: int
    start: datetime
    end: datetime

    model_config = {"from_attributes": True}
