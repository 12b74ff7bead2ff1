"""
Tests for the SQL booking store's conditional status update, against a real
database: a status committed by someone else between the read and the write
must win, and must be what the loser gets to see.
"""

from datetime import timedelta

import pytest
from sqlalchemy import select, update

from lending.core.exceptions import InvalidArgumentError
from lending.core.timeutils import utcnow
from lending.models import Booking, BookingStatus
from lending.repositories.sql import SqlBookingStore, SqlItemDirectory, SqlUserDirectory
from lending.services.booking_service import BookingService


class _ApprovedUnderneathStore(SqlBookingStore):
    """Commits an approval right before the conditional update runs."""

    async def transition_status(self, booking_id: int, new_status: BookingStatus) -> bool:
        await self.db.execute(
            update(Booking)
            .where(Booking.id == booking_id)
            .values(status=BookingStatus.APPROVED.value)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return await super().transition_status(booking_id, new_status)


def _service(db_session, store: SqlBookingStore) -> BookingService:
    return BookingService(store, SqlUserDirectory(db_session), SqlItemDirectory(db_session))


async def _status_in_database(db_session, booking_id: int) -> str:
    result = await db_session.execute(select(Booking.status).where(Booking.id == booking_id))
    return result.scalar_one()


@pytest.fixture
def window():
    start = utcnow() + timedelta(days=1)
    return start, start + timedelta(days=1)


@pytest.mark.asyncio
async def test_transition_from_waiting(db_session, booker, item, make_booking, window):
    booking = await make_booking(item, booker, *window)

    assert await SqlBookingStore(db_session).transition_status(booking.id, BookingStatus.REJECTED) is True
    assert await _status_in_database(db_session, booking.id) == "REJECTED"


@pytest.mark.asyncio
async def test_no_transition_once_processed(db_session, booker, item, make_booking, window):
    booking = await make_booking(item, booker, *window, status=BookingStatus.APPROVED)

    assert await SqlBookingStore(db_session).transition_status(booking.id, BookingStatus.REJECTED) is False
    assert await _status_in_database(db_session, booking.id) == "APPROVED"


@pytest.mark.asyncio
async def test_find_by_id_sees_status_written_by_update(db_session, booker, item, make_booking, window):
    booking = await make_booking(item, booker, *window)
    store = SqlBookingStore(db_session)
    assert (await store.find_by_id(booking.id)).status == "WAITING"

    await store.transition_status(booking.id, BookingStatus.APPROVED)

    assert (await store.find_by_id(booking.id)).status == "APPROVED"


@pytest.mark.asyncio
async def test_rejection_loses_to_committed_approval(db_session, owner, booker, item, make_booking, window):
    booking = await make_booking(item, booker, *window)
    service = _service(db_session, _ApprovedUnderneathStore(db_session))

    with pytest.raises(InvalidArgumentError) as exc_info:
        await service.set_approval(owner.id, booking.id, False)

    assert "Current status: APPROVED" in exc_info.value.message
    assert await _status_in_database(db_session, booking.id) == "APPROVED"
    assert (await SqlBookingStore(db_session).find_by_id(booking.id)).status == "APPROVED"
