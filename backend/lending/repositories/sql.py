"""
SQLAlchemy implementations of the store interfaces.

All of them share the request's AsyncSession; nothing here commits. Routes
that invalidate cached lists commit first, the session dependency commits
the rest once the route has finished.
"""

from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy import Select, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from lending.core.exceptions import NotFoundError
from lending.models import Booking, BookingStatus, Item, User
from lending.services.booking_states import BookingCriteria
from lending.services.interfaces import BookingStore, ItemDirectory, UserDirectory


def _with_relations(stmt: Select) -> Select:
    # populate_existing: a status written by a conditional UPDATE must
    # replace whatever the identity map still holds.
    return stmt.options(
        selectinload(Booking.item),
        selectinload(Booking.booker),
    ).execution_options(populate_existing=True)


def _group_by_item(bookings: Sequence[Booking]) -> Dict[int, List[Booking]]:
    grouped: Dict[int, List[Booking]] = defaultdict(list)
    for booking in bookings:
        grouped[booking.item_id].append(booking)
    return dict(grouped)


class SqlUserDirectory(UserDirectory):
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def exists(self, user_id: int) -> bool:
        result = await self.db.execute(select(User.id).where(User.id == user_id))
        return result.scalar_one_or_none() is not None

    async def get(self, user_id: int) -> User:
        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user


class SqlItemDirectory(ItemDirectory):
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get(self, item_id: int) -> Item:
        item = await self.db.get(Item, item_id)
        if item is None:
            raise NotFoundError("Item", item_id)
        return item


class SqlBookingStore(BookingStore):
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def save(self, booking: Booking) -> Booking:
        self.db.add(booking)
        await self.db.flush()
        return await self.find_by_id(booking.id)

    async def find_by_id(self, booking_id: int) -> Optional[Booking]:
        result = await self.db.execute(
            _with_relations(select(Booking).where(Booking.id == booking_id))
        )
        return result.scalar_one_or_none()

    async def find(self, criteria: BookingCriteria) -> List[Booking]:
        query = select(Booking)
        conditions = []

        if criteria.booker_id is not None:
            conditions.append(Booking.booker_id == criteria.booker_id)
        if criteria.owner_id is not None:
            query = query.join(Item, Booking.item_id == Item.id)
            conditions.append(Item.owner_id == criteria.owner_id)
        if criteria.status is not None:
            conditions.append(Booking.status == criteria.status.value)
        if criteria.start_at_or_before is not None:
            conditions.append(Booking.start <= criteria.start_at_or_before)
        if criteria.end_at_or_after is not None:
            conditions.append(Booking.end >= criteria.end_at_or_after)
        if criteria.end_before is not None:
            conditions.append(Booking.end < criteria.end_before)
        if criteria.start_after is not None:
            conditions.append(Booking.start > criteria.start_after)

        if conditions:
            query = query.where(*conditions)

        result = await self.db.execute(_with_relations(query))
        return list(result.scalars().all())

    async def transition_status(self, booking_id: int, new_status: BookingStatus) -> bool:
        result = await self.db.execute(
            update(Booking)
            .where(
                Booking.id == booking_id,
                Booking.status == BookingStatus.WAITING.value,
            )
            .values(status=new_status.value)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def find_approved_ending_before(
        self, item_ids: Sequence[int], now: datetime
    ) -> Dict[int, List[Booking]]:
        if not item_ids:
            return {}
        result = await self.db.execute(
            _with_relations(
                select(Booking)
                .where(
                    Booking.item_id.in_(item_ids),
                    Booking.status == BookingStatus.APPROVED.value,
                    Booking.end < now,
                )
                .order_by(Booking.item_id, Booking.end.desc())
            )
        )
        return _group_by_item(result.scalars().all())

    async def find_approved_starting_after(
        self, item_ids: Sequence[int], now: datetime
    ) -> Dict[int, List[Booking]]:
        if not item_ids:
            return {}
        result = await self.db.execute(
            _with_relations(
                select(Booking)
                .where(
                    Booking.item_id.in_(item_ids),
                    Booking.status == BookingStatus.APPROVED.value,
                    Booking.start > now,
                )
                .order_by(Booking.item_id, Booking.start.asc())
            )
        )
        return _group_by_item(result.scalars().all())

    async def has_finished_approved_booking(
        self, booker_id: int, item_id: int, now: datetime
    ) -> bool:
        result = await self.db.execute(
            select(Booking.id)
            .where(
                Booking.booker_id == booker_id,
                Booking.item_id == item_id,
                Booking.status == BookingStatus.APPROVED.value,
                Booking.end < now,
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None
