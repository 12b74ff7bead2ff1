"""
Who may do what with a booking.

These are pure predicates over already-loaded objects. The lifecycle decides
which error to raise when one of them fails.
"""

from lending.models import Booking, Item


def is_booker(booking: Booking, actor_id: int) -> bool:
    return booking.booker_id == actor_id


def is_owner(booking: Booking, actor_id: int) -> bool:
    return booking.item.owner_id == actor_id


def can_approve_or_reject(booking: Booking, actor_id: int) -> bool:
    """Only the item's owner decides, whatever the booking's status."""
    return is_owner(booking, actor_id)


def can_view(booking: Booking, actor_id: int) -> bool:
    return is_booker(booking, actor_id) or is_owner(booking, actor_id)


def can_create(actor_id: int, item: Item) -> bool:
    """An owner may not book their own item."""
    return item.owner_id != actor_id
