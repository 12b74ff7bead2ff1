"""
Item requests: a user asks for something nobody lists yet, owners answer
by listing an item with `request_id` set.

Every listing carries the answering items. Lists are newest first.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from lending.core.exceptions import NotFoundError
from lending.core.logging import get_logger
from lending.core.timeutils import Clock, utcnow
from lending.models import ItemRequest
from lending.repositories.sql import SqlUserDirectory
from lending.schemas.item_request import ItemRequestCreate

logger = get_logger(__name__)


def _with_items(query):
    return query.options(selectinload(ItemRequest.items))


async def _require_user(db: AsyncSession, user_id: int) -> None:
    if not await SqlUserDirectory(db).exists(user_id):
        raise NotFoundError("User", user_id)


async def create_request(
    db: AsyncSession,
    requester_id: int,
    request_data: ItemRequestCreate,
    clock: Clock = utcnow,
) -> ItemRequest:
    await _require_user(db, requester_id)

    item_request = ItemRequest(
        description=request_data.description,
        requester_id=requester_id,
        created=clock(),
    )
    db.add(item_request)
    await db.flush()

    logger.info("item_request_created", request_id=item_request.id, requester_id=requester_id)
    return await get_request(db, requester_id, item_request.id)


async def get_request(db: AsyncSession, user_id: int, request_id: int) -> ItemRequest:
    """Any existing user may view any request."""
    await _require_user(db, user_id)

    result = await db.execute(
        _with_items(select(ItemRequest))
        .where(ItemRequest.id == request_id)
        .execution_options(populate_existing=True)
    )
    item_request = result.scalar_one_or_none()
    if item_request is None:
        raise NotFoundError("Item Request", request_id)
    return item_request


async def list_own_requests(db: AsyncSession, user_id: int) -> List[ItemRequest]:
    await _require_user(db, user_id)

    result = await db.execute(
        _with_items(select(ItemRequest))
        .where(ItemRequest.requester_id == user_id)
        .order_by(ItemRequest.created.desc(), ItemRequest.id.desc())
    )
    return list(result.scalars().all())


async def list_other_requests(
    db: AsyncSession,
    user_id: int,
    from_: Optional[int] = None,
    size: Optional[int] = None,
) -> List[ItemRequest]:
    """
    Requests made by everyone except `user_id`.

    With both `from_` and `size` given the list is paged: the page holding
    element `from_` is returned, `size` requests long. Otherwise everything
    is returned.
    """
    await _require_user(db, user_id)

    query = (
        _with_items(select(ItemRequest))
        .where(ItemRequest.requester_id != user_id)
        .order_by(ItemRequest.created.desc(), ItemRequest.id.desc())
    )
    if from_ is not None and size is not None:
        query = query.offset((from_ // size) * size).limit(size)

    result = await db.execute(query)
    requests = list(result.scalars().all())
    logger.info("item_requests_listed", user_id=user_id, count=len(requests), from_=from_, size=size)
    return requests
