"""
Booking endpoints: request, approve/reject, view and list.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from lending.api.deps import get_actor_id, get_booking_service
from lending.core.logging import get_logger
from lending.db.session import get_db
from lending.schemas.booking import BookingCreate, BookingResponse
from lending.services.booking_service import BookingService
from lending.services.booking_states import BookingState, Role
from lending.services.cache_service import (
    get_cached_bookings,
    invalidate_after_commit,
    set_cached_bookings,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/bookings", tags=["Bookings"])


async def _list_bookings(
    service: BookingService,
    role: Role,
    actor_id: int,
    state: str,
) -> list[BookingResponse]:
    # Parse first: an unknown state is a 400 whether or not Redis is up.
    parsed = BookingState.parse(state)

    cached = await get_cached_bookings(role, actor_id, parsed)
    if cached is not None:
        logger.info("bookings_list_cache_hit", role=role.value, state=parsed.value)
        return [BookingResponse(**entry) for entry in cached]

    if role is Role.BOOKER:
        bookings = await service.list_by_booker(actor_id, parsed)
    else:
        bookings = await service.list_by_owner(actor_id, parsed)

    response = [BookingResponse.model_validate(booking) for booking in bookings]
    await set_cached_bookings(
        role, actor_id, parsed, [entry.model_dump(mode="json") for entry in response]
    )
    return response


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    actor_id: int = Depends(get_actor_id),
    service: BookingService = Depends(get_booking_service),
    db: AsyncSession = Depends(get_db),
):
    """Request a booking. It starts WAITING until the item's owner decides."""
    booking = await service.create(
        actor_id, booking_data.item_id, booking_data.start, booking_data.end
    )
    await invalidate_after_commit(db, booker_ids=[booking.booker_id], owner_ids=[booking.item.owner_id])
    return booking


@router.patch("/{booking_id}", response_model=BookingResponse)
async def set_booking_approval(
    booking_id: int,
    approved: bool = Query(...),
    actor_id: int = Depends(get_actor_id),
    service: BookingService = Depends(get_booking_service),
    db: AsyncSession = Depends(get_db),
):
    """Owner approves (approved=true) or rejects a WAITING booking. Processed bookings are final."""
    booking = await service.set_approval(actor_id, booking_id, approved)
    await invalidate_after_commit(db, booker_ids=[booking.booker_id], owner_ids=[booking.item.owner_id])
    return booking


@router.get("/owner", response_model=list[BookingResponse])
async def list_owner_bookings(
    state: str = Query("ALL"),
    actor_id: int = Depends(get_actor_id),
    service: BookingService = Depends(get_booking_service),
):
    """Bookings of the caller's items, newest start first."""
    return await _list_bookings(service, Role.OWNER, actor_id, state)


@router.get("/", response_model=list[BookingResponse])
async def list_my_bookings(
    state: str = Query("ALL"),
    actor_id: int = Depends(get_actor_id),
    service: BookingService = Depends(get_booking_service),
):
    """The caller's own booking requests, newest start first."""
    return await _list_bookings(service, Role.BOOKER, actor_id, state)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: int,
    actor_id: int = Depends(get_actor_id),
    service: BookingService = Depends(get_booking_service),
):
    """Visible to the booker and to the item's owner."""
    return await service.get_by_id(actor_id, booking_id)
