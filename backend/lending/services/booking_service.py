"""
Booking lifecycle.

STATE MACHINE
=============

    WAITING --approve--> APPROVED   (terminal)
       |
       +-----reject----> REJECTED   (terminal)

A booking is created WAITING and its status changes at most once.

CONCURRENCY
===========

Two owners' tabs (or a double click) can approve the same booking at the
same time. Both read WAITING, both pass the checks, both write.

The write is therefore a compare-and-set delegated to the store:

    UPDATE bookings SET status = :new WHERE id = :id AND status = 'WAITING'

If no row was affected, somebody else processed the booking between our
read and our write. We re-read it and fail with the same InvalidArgumentError
a sequential second call would get, naming the status we found. There is no
retry: the first writer wins and the outcome is final.

Check order for set_approval is fixed: existence, then ownership, then status.
A stranger probing a processed booking gets AccessDenied, never a status leak.
"""

from datetime import datetime
from typing import List, Union

from lending.core.exceptions import AccessDeniedError, InvalidArgumentError, NotFoundError
from lending.core.logging import get_logger
from lending.core.metrics import record_booking_operation, record_transition_conflict
from lending.core.timeutils import Clock, utcnow
from lending.models import Booking, BookingStatus
from lending.services.booking_guard import can_approve_or_reject, can_create, can_view
from lending.services.booking_states import BookingState, Role, criteria_for
from lending.services.interfaces import BookingStore, ItemDirectory, UserDirectory

logger = get_logger(__name__)


def _ensure_waiting(booking: Booking) -> None:
    status = BookingStatus(booking.status)
    if status is not BookingStatus.WAITING:
        raise InvalidArgumentError(
            f"Booking {booking.id} has already been processed. Current status: {status.value}",
            details={"booking_id": booking.id, "status": status.value},
        )


class BookingService:
    def __init__(
        self,
        bookings: BookingStore,
        users: UserDirectory,
        items: ItemDirectory,
        clock: Clock = utcnow,
    ) -> None:
        self.bookings = bookings
        self.users = users
        self.items = items
        self.clock = clock

    async def create(
        self,
        booker_id: int,
        item_id: int,
        start: datetime,
        end: datetime,
    ) -> Booking:
        """Request a booking of `item_id` for [start, end]. Starts out WAITING."""
        await self.users.get(booker_id)
        item = await self.items.get(item_id)

        if not can_create(booker_id, item):
            logger.warning("booking_create_refused", reason="owner_is_booker", item_id=item_id, user_id=booker_id)
            record_booking_operation("create", "invalid")
            raise InvalidArgumentError(
                "Owner cannot book their own item",
                details={"item_id": item_id, "user_id": booker_id},
            )

        if not item.available:
            logger.warning("booking_create_refused", reason="item_unavailable", item_id=item_id, user_id=booker_id)
            record_booking_operation("create", "invalid")
            raise InvalidArgumentError(
                f"Item {item_id} is not available for booking",
                details={"item_id": item_id},
            )

        if end <= start:
            record_booking_operation("create", "invalid")
            raise InvalidArgumentError(
                "Booking end must be after its start",
                details={"start": start.isoformat(), "end": end.isoformat()},
            )

        booking = await self.bookings.save(
            Booking(
                start=start,
                end=end,
                item_id=item.id,
                booker_id=booker_id,
                status=BookingStatus.WAITING.value,
            )
        )

        logger.info(
            "booking_created",
            booking_id=booking.id,
            item_id=item.id,
            booker_id=booker_id,
            owner_id=item.owner_id,
        )
        record_booking_operation("create", "success")
        return booking

    async def set_approval(self, actor_id: int, booking_id: int, approved: bool) -> Booking:
        """Owner approves or rejects a WAITING booking."""
        booking = await self.bookings.find_by_id(booking_id)
        if booking is None:
            record_booking_operation("set_approval", "not_found")
            raise NotFoundError("Booking", booking_id)

        if not can_approve_or_reject(booking, actor_id):
            logger.warning("booking_approval_denied", booking_id=booking_id, user_id=actor_id)
            record_booking_operation("set_approval", "denied")
            raise AccessDeniedError(
                f"User {actor_id} is not the owner of the booked item",
                details={"booking_id": booking_id, "user_id": actor_id},
            )

        _ensure_waiting(booking)

        new_status = BookingStatus.APPROVED if approved else BookingStatus.REJECTED
        if not await self.bookings.transition_status(booking.id, new_status):
            # Lost the race: report the status the winner left behind.
            current = await self.bookings.find_by_id(booking.id)
            logger.info(
                "booking_transition_conflict",
                booking_id=booking.id,
                requested=new_status.value,
                found=current.status if current else None,
            )
            record_transition_conflict()
            record_booking_operation("set_approval", "conflict")
            if current is None:
                raise NotFoundError("Booking", booking_id)
            _ensure_waiting(current)
            raise InvalidArgumentError(f"Booking {booking.id} could not be updated")

        booking = await self.bookings.find_by_id(booking.id)
        logger.info(
            "booking_status_changed",
            booking_id=booking.id,
            status=new_status.value,
            owner_id=actor_id,
        )
        record_booking_operation("set_approval", "success")
        return booking

    async def get_by_id(self, actor_id: int, booking_id: int) -> Booking:
        """A booking is visible to its booker and to the item's owner only."""
        if not await self.users.exists(actor_id):
            raise NotFoundError("User", actor_id)

        booking = await self.bookings.find_by_id(booking_id)
        if booking is None:
            raise NotFoundError("Booking", booking_id)

        if not can_view(booking, actor_id):
            logger.warning("booking_view_denied", booking_id=booking_id, user_id=actor_id)
            raise AccessDeniedError(
                f"User {actor_id} may not view booking {booking_id}",
                details={"booking_id": booking_id, "user_id": actor_id},
            )
        return booking

    async def list_by_booker(
        self, actor_id: int, state: Union[BookingState, str] = BookingState.ALL
    ) -> List[Booking]:
        return await self._list(Role.BOOKER, actor_id, state)

    async def list_by_owner(
        self, actor_id: int, state: Union[BookingState, str] = BookingState.ALL
    ) -> List[Booking]:
        return await self._list(Role.OWNER, actor_id, state)

    async def _list(
        self, role: Role, actor_id: int, state: Union[BookingState, str]
    ) -> List[Booking]:
        if not await self.users.exists(actor_id):
            raise NotFoundError("User", actor_id)

        criteria = criteria_for(role, actor_id, state, self.clock())
        bookings = await self.bookings.find(criteria)

        # Newest start first, whatever order the store returned.
        bookings.sort(key=lambda booking: booking.start, reverse=True)

        logger.info(
            "bookings_listed",
            role=role.value,
            user_id=actor_id,
            state=BookingState.parse(state).value,
            count=len(bookings),
        )
        return bookings
