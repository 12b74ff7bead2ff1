"""
"Last" and "next" approved booking per item, shown to the item's owner.

  last = APPROVED booking with end < now, greatest end
  next = APPROVED booking with start > now, smallest start

WAITING and REJECTED bookings never qualify. Anyone who is not the item's
owner (the booker included) gets an empty ItemBookings for it.

for_items() serves the owner's item list: it issues exactly two grouped
store queries for the whole batch instead of two per item.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from lending.core.logging import get_logger
from lending.core.timeutils import Clock, utcnow
from lending.models import Booking, Item
from lending.services.interfaces import BookingStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class ItemBookings:
    last: Optional[Booking] = None
    next: Optional[Booking] = None


class ItemBookingAggregator:
    def __init__(self, bookings: BookingStore, clock: Clock = utcnow) -> None:
        self.bookings = bookings
        self.clock = clock

    async def for_item(self, item: Item, actor_id: int) -> ItemBookings:
        return (await self.for_items([item], actor_id))[item.id]

    async def for_items(self, items: Sequence[Item], actor_id: int) -> Dict[int, ItemBookings]:
        result = {item.id: ItemBookings() for item in items}

        owned_ids = [item.id for item in items if item.owner_id == actor_id]
        if not owned_ids:
            return result

        now = self.clock()
        ended = await self.bookings.find_approved_ending_before(owned_ids, now)
        upcoming = await self.bookings.find_approved_starting_after(owned_ids, now)

        for item_id in owned_ids:
            result[item_id] = ItemBookings(
                last=max(ended.get(item_id, ()), key=lambda b: b.end, default=None),
                next=min(upcoming.get(item_id, ()), key=lambda b: b.start, default=None),
            )

        logger.debug("item_bookings_computed", item_count=len(owned_ids), owner_id=actor_id)
        return result
