"""
Pydantic schemas for items and comments.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from lending.models import Comment
from lending.schemas.booking import BookingBrief


class ItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1, max_length=1000)
    available: bool
    request_id: Optional[int] = Field(None, gt=0)


class ItemUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    available: Optional[bool] = None


class ItemResponse(BaseModel):
    id: int
    name: str
    description: str
    available: bool
    owner_id: int
    request_id: Optional[int] = None

    model_config = {"from_attributes": True}


class CommentCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=1000)


class CommentResponse(BaseModel):
    id: int
    text: str
    author_name: str
    created: datetime

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentResponse":
        return cls(
            id=comment.id,
            text=comment.text,
            author_name=comment.author.name,
            created=comment.created,
        )


class ItemDetailResponse(ItemResponse):
    """Item with comments; last/next booking are filled in for the owner only."""

    last_booking: Optional[BookingBrief] = None
    next_booking: Optional[BookingBrief] = None
    comments: list[CommentResponse] = []
