from lending.models.user import User
from lending.models.item import Item
from lending.models.item_request import ItemRequest
from lending.models.booking import Booking, BookingStatus
from lending.models.comment import Comment

__all__ = ["User", "Item", "ItemRequest", "Booking", "BookingStatus", "Comment"]
