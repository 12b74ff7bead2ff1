"""
User registration, lookup, update and removal.

Emails are unique regardless of case. A user who still owns items, has
bookings or has open item requests cannot be deleted.
"""

from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lending.core.exceptions import ConflictError
from lending.core.logging import get_logger
from lending.models import Booking, Item, ItemRequest, User
from lending.repositories.sql import SqlUserDirectory
from lending.schemas.user import UserCreate, UserUpdate

logger = get_logger(__name__)


async def _email_taken(db: AsyncSession, email: str, exclude_id: Optional[int] = None) -> bool:
    query = select(User.id).where(func.lower(User.email) == email.strip().lower())
    if exclude_id is not None:
        query = query.where(User.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none() is not None


async def register_user(db: AsyncSession, user_data: UserCreate) -> User:
    """Create a user. Raises 409 if the email is already registered."""
    if await _email_taken(db, user_data.email):
        logger.warning("registration_failed", reason="email_exists", email=user_data.email)
        raise ConflictError(
            "Email already registered",
            details={"email": user_data.email},
        )

    user = User(name=user_data.name, email=user_data.email)
    db.add(user)
    await db.flush()
    await db.refresh(user)

    logger.info("user_registered", user_id=user.id, email=user.email)
    return user


async def get_user(db: AsyncSession, user_id: int) -> User:
    return await SqlUserDirectory(db).get(user_id)


async def list_users(db: AsyncSession) -> List[User]:
    result = await db.execute(select(User).order_by(User.id.asc()))
    return list(result.scalars().all())


async def update_user(db: AsyncSession, user_id: int, user_data: UserUpdate) -> User:
    """Apply the provided, non-blank fields. A new email must not belong to anyone else."""
    user = await SqlUserDirectory(db).get(user_id)

    if user_data.email and user_data.email.strip():
        if await _email_taken(db, user_data.email, exclude_id=user.id):
            logger.warning("user_update_failed", reason="email_exists", user_id=user_id)
            raise ConflictError(
                "Email already registered",
                details={"email": user_data.email},
            )
        user.email = user_data.email.strip()

    if user_data.name and user_data.name.strip():
        user.name = user_data.name

    await db.flush()
    await db.refresh(user)

    logger.info("user_updated", user_id=user.id)
    return user


async def delete_user(db: AsyncSession, user_id: int) -> None:
    user = await SqlUserDirectory(db).get(user_id)

    for model, column, what in (
        (Item, Item.owner_id, "items"),
        (Booking, Booking.booker_id, "bookings"),
        (ItemRequest, ItemRequest.requester_id, "item requests"),
    ):
        result = await db.execute(select(model.id).where(column == user_id).limit(1))
        if result.scalar_one_or_none() is not None:
            logger.warning("user_delete_refused", user_id=user_id, reason=what)
            raise ConflictError(
                f"User {user_id} still has {what}",
                details={"user_id": user_id, "blocking": what},
            )

    db.expunge(user)
    await db.execute(
        delete(User).where(User.id == user_id).execution_options(synchronize_session=False)
    )
    logger.info("user_deleted", user_id=user_id)


async def owners_booked_from(db: AsyncSession, user_id: int) -> List[int]:
    """Owners of every item `user_id` has booked; their lists show this user's name."""
    result = await db.execute(
        select(Item.owner_id)
        .join(Booking, Booking.item_id == Item.id)
        .where(Booking.booker_id == user_id)
        .distinct()
    )
    return list(result.scalars().all())
