"""
Pydantic schemas for item requests.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class ItemRequestCreate(BaseModel):
    description: str = Field(..., max_length=1000)

    @field_validator("description")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Request description cannot be empty")
        return value


class ItemRequestItem(BaseModel):
    """An item some owner listed in answer to the request."""

    id: int
    name: str
    owner_id: int

    model_config = {"from_attributes": True}


class ItemRequestResponse(BaseModel):
    id: int
    description: str
    created: datetime
    items: list[ItemRequestItem] = []

    model_config = {"from_attributes": True}
