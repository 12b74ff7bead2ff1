"""
Dict-backed stores for tests.

Each instance owns its own data; build a fresh set per test. Model objects
are plain transient SQLAlchemy instances, so the services cannot tell these
apart from the SQL stores.
"""

import asyncio
import itertools
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from lending.core.exceptions import NotFoundError
from lending.models import Booking, BookingStatus, Item, User
from lending.services.booking_states import BookingCriteria
from lending.services.interfaces import BookingStore, ItemDirectory, UserDirectory


class InMemoryUserDirectory(UserDirectory):
    def __init__(self) -> None:
        self._users: Dict[int, User] = {}
        self._ids = itertools.count(1)

    def add(self, user: User) -> User:
        if user.id is None:
            user.id = next(self._ids)
        self._users[user.id] = user
        return user

    async def exists(self, user_id: int) -> bool:
        return user_id in self._users

    async def get(self, user_id: int) -> User:
        try:
            return self._users[user_id]
        except KeyError:
            raise NotFoundError("User", user_id)


class InMemoryItemDirectory(ItemDirectory):
    def __init__(self) -> None:
        self._items: Dict[int, Item] = {}
        self._ids = itertools.count(1)

    def add(self, item: Item) -> Item:
        if item.id is None:
            item.id = next(self._ids)
        if item.available is None:
            item.available = True
        self._items[item.id] = item
        return item

    async def get(self, item_id: int) -> Item:
        try:
            return self._items[item_id]
        except KeyError:
            raise NotFoundError("Item", item_id)


class InMemoryBookingStore(BookingStore):
    def __init__(self, users: InMemoryUserDirectory, items: InMemoryItemDirectory) -> None:
        self.users = users
        self.items = items
        self._bookings: Dict[int, Booking] = {}
        self._ids = itertools.count(1)
        self._lock = asyncio.Lock()

    async def save(self, booking: Booking) -> Booking:
        if booking.item is None:
            booking.item = await self.items.get(booking.item_id)
        if booking.booker is None:
            booking.booker = await self.users.get(booking.booker_id)
        if booking.id is None:
            booking.id = next(self._ids)
        self._bookings[booking.id] = booking
        return booking

    async def find_by_id(self, booking_id: int) -> Optional[Booking]:
        return self._bookings.get(booking_id)

    async def find(self, criteria: BookingCriteria) -> List[Booking]:
        return [booking for booking in self._bookings.values() if criteria.matches(booking)]

    async def transition_status(self, booking_id: int, new_status: BookingStatus) -> bool:
        async with self._lock:
            booking = self._bookings.get(booking_id)
            if booking is None or booking.status != BookingStatus.WAITING:
                return False
            booking.status = new_status.value
            return True

    def _approved(self, item_ids: Sequence[int]) -> List[Booking]:
        wanted = set(item_ids)
        return [
            booking
            for booking in self._bookings.values()
            if booking.item_id in wanted and booking.status == BookingStatus.APPROVED
        ]

    async def find_approved_ending_before(
        self, item_ids: Sequence[int], now: datetime
    ) -> Dict[int, List[Booking]]:
        grouped: Dict[int, List[Booking]] = {}
        for booking in self._approved(item_ids):
            if booking.end < now:
                grouped.setdefault(booking.item_id, []).append(booking)
        return grouped

    async def find_approved_starting_after(
        self, item_ids: Sequence[int], now: datetime
    ) -> Dict[int, List[Booking]]:
        grouped: Dict[int, List[Booking]] = {}
        for booking in self._approved(item_ids):
            if booking.start > now:
                grouped.setdefault(booking.item_id, []).append(booking)
        return grouped

    async def has_finished_approved_booking(
        self, booker_id: int, item_id: int, now: datetime
    ) -> bool:
        return any(
            booking.booker_id == booker_id and booking.end < now
            for booking in self._approved([item_id])
        )
