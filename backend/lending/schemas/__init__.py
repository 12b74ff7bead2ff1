from lending.schemas.user import UserCreate, UserResponse, UserUpdate
from lending.schemas.booking import BookingBrief, BookingCreate, BookingResponse
from lending.schemas.item import (
    CommentCreate,
    CommentResponse,
    ItemCreate,
    ItemDetailResponse,
    ItemResponse,
    ItemUpdate,
)
from lending.schemas.item_request import ItemRequestCreate, ItemRequestItem, ItemRequestResponse

__all__ = [
    "UserCreate", "UserUpdate", "UserResponse",
    "BookingCreate", "BookingResponse", "BookingBrief",
    "ItemCreate", "ItemUpdate", "ItemResponse", "ItemDetailResponse",
    "CommentCreate", "CommentResponse",
    "ItemRequestCreate", "ItemRequestItem", "ItemRequestResponse",
]
