"""
Persistence interfaces consumed by the booking core.

Implementations:
- lending.repositories.sql: SQLAlchemy AsyncSession (production)
- lending.repositories.memory: dict-backed, one instance per test
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from lending.models import Booking, BookingStatus, Item, User
from lending.services.booking_states import BookingCriteria


class UserDirectory(ABC):

    @abstractmethod
    async def exists(self, user_id: int) -> bool:
        pass

    @abstractmethod
    async def get(self, user_id: int) -> User:
        """Return the user or raise NotFoundError."""
        pass


class ItemDirectory(ABC):

    @abstractmethod
    async def get(self, item_id: int) -> Item:
        """Return the item (with owner_id and available) or raise NotFoundError."""
        pass


class BookingStore(ABC):
    """
    Booking persistence.

    Every booking returned has `item` and `booker` loaded, so callers can
    read `booking.item.owner_id` without further queries.
    """

    @abstractmethod
    async def save(self, booking: Booking) -> Booking:
        """Insert or update. Assigns the id on insert."""
        pass

    @abstractmethod
    async def find_by_id(self, booking_id: int) -> Optional[Booking]:
        pass

    @abstractmethod
    async def find(self, criteria: BookingCriteria) -> List[Booking]:
        """All bookings matching the criteria, in no particular order."""
        pass

    @abstractmethod
    async def transition_status(self, booking_id: int, new_status: BookingStatus) -> bool:
        """
        Atomically move a WAITING booking to new_status.

        Returns False, and changes nothing, if the booking is no longer WAITING.
        """
        pass

    @abstractmethod
    async def find_approved_ending_before(
        self, item_ids: Sequence[int], now: datetime
    ) -> Dict[int, List[Booking]]:
        """APPROVED bookings with end < now, grouped by item id."""
        pass

    @abstractmethod
    async def find_approved_starting_after(
        self, item_ids: Sequence[int], now: datetime
    ) -> Dict[int, List[Booking]]:
        """APPROVED bookings with start > now, grouped by item id."""
        pass

    @abstractmethod
    async def has_finished_approved_booking(
        self, booker_id: int, item_id: int, now: datetime
    ) -> bool:
        pass
