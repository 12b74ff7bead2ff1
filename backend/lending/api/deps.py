"""
Request dependencies: caller identity and service wiring.
"""

import structlog
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from lending.core.config import get_settings
from lending.core.exceptions import InvalidArgumentError
from lending.db.session import get_db
from lending.repositories.sql import SqlBookingStore, SqlItemDirectory, SqlUserDirectory
from lending.services.booking_service import BookingService

settings = get_settings()


async def get_actor_id(request: Request) -> int:
    """
    The caller's user id, taken as-is from the identity header.

    Authentication happens upstream; this service trusts the header.
    """
    raw = request.headers.get(settings.USER_ID_HEADER)
    if raw is None:
        raise InvalidArgumentError(f"Missing {settings.USER_ID_HEADER} header")
    try:
        actor_id = int(raw)
    except ValueError:
        raise InvalidArgumentError(f"{settings.USER_ID_HEADER} must be an integer, got {raw!r}")
    if actor_id <= 0:
        raise InvalidArgumentError(f"{settings.USER_ID_HEADER} must be a positive number")

    structlog.contextvars.bind_contextvars(actor_id=actor_id)
    return actor_id


async def get_booking_service(db: AsyncSession = Depends(get_db)) -> BookingService:
    return BookingService(
        bookings=SqlBookingStore(db),
        users=SqlUserDirectory(db),
        items=SqlItemDirectory(db),
    )
