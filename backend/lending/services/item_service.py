"""
Item management and the item views that carry booking enrichment.

get_item and list_owner_items are the two callers of the aggregator:
the single-item view and the owner's list, which enriches every item with
one batch call. Comments are attached for every caller.
"""

from collections import defaultdict
from typing import Dict, List, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from lending.core.exceptions import (
    AccessDeniedError,
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
)
from lending.core.logging import get_logger
from lending.core.timeutils import Clock, utcnow
from lending.models import Booking, Comment, Item, ItemRequest
from lending.repositories.sql import SqlBookingStore, SqlItemDirectory, SqlUserDirectory
from lending.schemas.booking import BookingBrief
from lending.schemas.item import (
    CommentCreate,
    CommentResponse,
    ItemCreate,
    ItemDetailResponse,
    ItemUpdate,
)
from lending.services.item_bookings import ItemBookingAggregator, ItemBookings

logger = get_logger(__name__)


def _to_detail(item: Item, bookings: ItemBookings, comments: Sequence[Comment]) -> ItemDetailResponse:
    return ItemDetailResponse(
        id=item.id,
        name=item.name,
        description=item.description,
        available=item.available,
        owner_id=item.owner_id,
        request_id=item.request_id,
        last_booking=BookingBrief.model_validate(bookings.last) if bookings.last else None,
        next_booking=BookingBrief.model_validate(bookings.next) if bookings.next else None,
        comments=[CommentResponse.from_comment(comment) for comment in comments],
    )


async def _comments_by_item(db: AsyncSession, item_ids: Sequence[int]) -> Dict[int, List[Comment]]:
    if not item_ids:
        return {}
    result = await db.execute(
        select(Comment)
        .where(Comment.item_id.in_(item_ids))
        .order_by(Comment.created.asc(), Comment.id.asc())
    )
    grouped: Dict[int, List[Comment]] = defaultdict(list)
    for comment in result.scalars().all():
        grouped[comment.item_id].append(comment)
    return grouped


async def create_item(db: AsyncSession, owner_id: int, item_data: ItemCreate) -> Item:
    await SqlUserDirectory(db).get(owner_id)

    if item_data.request_id is not None and await db.get(ItemRequest, item_data.request_id) is None:
        raise NotFoundError("Item Request", item_data.request_id)

    item = Item(
        name=item_data.name,
        description=item_data.description,
        available=item_data.available,
        owner_id=owner_id,
        request_id=item_data.request_id,
    )
    db.add(item)
    await db.flush()
    await db.refresh(item)

    logger.info("item_created", item_id=item.id, owner_id=owner_id, request_id=item.request_id)
    return item


async def update_item(db: AsyncSession, actor_id: int, item_id: int, item_data: ItemUpdate) -> Item:
    """Apply the provided, non-blank fields. Only the owner may edit."""
    item = await SqlItemDirectory(db).get(item_id)

    if item.owner_id != actor_id:
        logger.warning("item_update_denied", item_id=item_id, user_id=actor_id)
        raise AccessDeniedError(
            f"User {actor_id} is not the owner of item {item_id}",
            details={"item_id": item_id, "user_id": actor_id},
        )

    if item_data.name and item_data.name.strip():
        item.name = item_data.name
    if item_data.description and item_data.description.strip():
        item.description = item_data.description
    if item_data.available is not None:
        item.available = item_data.available

    await db.flush()
    await db.refresh(item)

    logger.info("item_updated", item_id=item.id, available=item.available)
    return item


async def delete_item(db: AsyncSession, actor_id: int, item_id: int) -> None:
    """Only the owner may delete, and only an item nobody has booked."""
    item = await SqlItemDirectory(db).get(item_id)

    if item.owner_id != actor_id:
        logger.warning("item_delete_denied", item_id=item_id, user_id=actor_id)
        raise AccessDeniedError(
            f"User {actor_id} is not the owner of item {item_id}",
            details={"item_id": item_id, "user_id": actor_id},
        )

    result = await db.execute(select(Booking.id).where(Booking.item_id == item_id).limit(1))
    if result.scalar_one_or_none() is not None:
        logger.warning("item_delete_refused", item_id=item_id, reason="bookings")
        raise ConflictError(
            f"Item {item_id} has bookings and cannot be deleted",
            details={"item_id": item_id},
        )

    db.expunge(item)
    await db.execute(
        delete(Comment).where(Comment.item_id == item_id).execution_options(synchronize_session=False)
    )
    await db.execute(
        delete(Item).where(Item.id == item_id).execution_options(synchronize_session=False)
    )
    logger.info("item_deleted", item_id=item_id, owner_id=actor_id)


async def bookers_of_item(db: AsyncSession, item_id: int) -> List[int]:
    """Everyone who has booked `item_id`; their lists show the item's name."""
    result = await db.execute(
        select(Booking.booker_id).where(Booking.item_id == item_id).distinct()
    )
    return list(result.scalars().all())


async def get_item(
    db: AsyncSession,
    actor_id: int,
    item_id: int,
    clock: Clock = utcnow,
) -> ItemDetailResponse:
    item = await SqlItemDirectory(db).get(item_id)

    bookings = await ItemBookingAggregator(SqlBookingStore(db), clock).for_item(item, actor_id)
    comments = await _comments_by_item(db, [item.id])

    return _to_detail(item, bookings, comments.get(item.id, []))


async def list_owner_items(
    db: AsyncSession,
    owner_id: int,
    clock: Clock = utcnow,
) -> List[ItemDetailResponse]:
    if not await SqlUserDirectory(db).exists(owner_id):
        raise NotFoundError("User", owner_id)

    result = await db.execute(
        select(Item).where(Item.owner_id == owner_id).order_by(Item.id.asc())
    )
    items = list(result.scalars().all())
    item_ids = [item.id for item in items]

    bookings = await ItemBookingAggregator(SqlBookingStore(db), clock).for_items(items, owner_id)
    comments = await _comments_by_item(db, item_ids)

    logger.info("owner_items_listed", owner_id=owner_id, count=len(items))
    return [_to_detail(item, bookings[item.id], comments.get(item.id, [])) for item in items]


async def add_comment(
    db: AsyncSession,
    author_id: int,
    item_id: int,
    comment_data: CommentCreate,
    clock: Clock = utcnow,
) -> Comment:
    """Only someone whose approved booking of the item has ended may comment."""
    author = await SqlUserDirectory(db).get(author_id)
    item = await SqlItemDirectory(db).get(item_id)

    now = clock()
    if not await SqlBookingStore(db).has_finished_approved_booking(author_id, item.id, now):
        logger.warning("comment_refused", item_id=item_id, user_id=author_id)
        raise InvalidArgumentError(
            f"User {author_id} can only comment on items they have booked in the past",
            details={"item_id": item_id, "user_id": author_id},
        )

    comment = Comment(text=comment_data.text, item_id=item.id, author=author, created=now)
    db.add(comment)
    await db.flush()

    logger.info("comment_added", comment_id=comment.id, item_id=item.id, author_id=author_id)
    return comment
