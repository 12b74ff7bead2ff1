"""
Item endpoints. Owners create, edit and delete their items. Item views
include comments for everyone and the last/next approved booking for the
item's owner.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from lending.api.deps import get_actor_id
from lending.db.session import get_db
from lending.schemas.item import (
    CommentCreate,
    CommentResponse,
    ItemCreate,
    ItemDetailResponse,
    ItemResponse,
    ItemUpdate,
)
from lending.services.cache_service import invalidate_after_commit
from lending.services.item_service import (
    add_comment,
    bookers_of_item,
    create_item,
    delete_item,
    get_item,
    list_owner_items,
    update_item,
)

router = APIRouter(prefix="/items", tags=["Items"])


@router.post("/", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
async def create_item_endpoint(
    item_data: ItemCreate,
    actor_id: int = Depends(get_actor_id),
    db: AsyncSession = Depends(get_db),
):
    """List a new item owned by the caller."""
    return await create_item(db, actor_id, item_data)


@router.patch("/{item_id}", response_model=ItemResponse)
async def update_item_endpoint(
    item_id: int,
    item_data: ItemUpdate,
    actor_id: int = Depends(get_actor_id),
    db: AsyncSession = Depends(get_db),
):
    """Owner-only edit. Booking lists showing the old name are dropped."""
    item = await update_item(db, actor_id, item_id, item_data)
    booker_ids = await bookers_of_item(db, item.id)
    await invalidate_after_commit(db, booker_ids=booker_ids, owner_ids=[item.owner_id])
    return item


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item_endpoint(
    item_id: int,
    actor_id: int = Depends(get_actor_id),
    db: AsyncSession = Depends(get_db),
):
    """Owner-only, and only while the item has no bookings."""
    await delete_item(db, actor_id, item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/", response_model=list[ItemDetailResponse])
async def list_owner_items_endpoint(
    actor_id: int = Depends(get_actor_id),
    db: AsyncSession = Depends(get_db),
):
    """The caller's items, each with its last/next booking and comments."""
    return await list_owner_items(db, actor_id)


@router.get("/{item_id}", response_model=ItemDetailResponse)
async def get_item_endpoint(
    item_id: int,
    actor_id: int = Depends(get_actor_id),
    db: AsyncSession = Depends(get_db),
):
    return await get_item(db, actor_id, item_id)


@router.post("/{item_id}/comment", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_comment_endpoint(
    item_id: int,
    comment_data: CommentCreate,
    actor_id: int = Depends(get_actor_id),
    db: AsyncSession = Depends(get_db),
):
    """Comment on an item the caller has finished an approved booking of."""
    comment = await add_comment(db, actor_id, item_id, comment_data)
    return CommentResponse.from_comment(comment)
