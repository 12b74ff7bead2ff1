"""
Item request endpoints: ask for an item, see your own requests and browse
everyone else's.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from lending.api.deps import get_actor_id
from lending.db.session import get_db
from lending.schemas.item_request import ItemRequestCreate, ItemRequestResponse
from lending.services.item_request_service import (
    create_request,
    get_request,
    list_other_requests,
    list_own_requests,
)

router = APIRouter(prefix="/requests", tags=["Item requests"])


@router.post("/", response_model=ItemRequestResponse, status_code=status.HTTP_201_CREATED)
async def create_request_endpoint(
    request_data: ItemRequestCreate,
    actor_id: int = Depends(get_actor_id),
    db: AsyncSession = Depends(get_db),
):
    return await create_request(db, actor_id, request_data)


@router.get("/", response_model=list[ItemRequestResponse])
async def list_own_requests_endpoint(
    actor_id: int = Depends(get_actor_id),
    db: AsyncSession = Depends(get_db),
):
    """The caller's requests with the items listed in answer, newest first."""
    return await list_own_requests(db, actor_id)


@router.get("/all", response_model=list[ItemRequestResponse])
async def list_other_requests_endpoint(
    from_: Optional[int] = Query(None, alias="from", ge=0),
    size: Optional[int] = Query(None, gt=0),
    actor_id: int = Depends(get_actor_id),
    db: AsyncSession = Depends(get_db),
):
    """Everyone else's requests, newest first, optionally paged."""
    return await list_other_requests(db, actor_id, from_, size)


@router.get("/{request_id}", response_model=ItemRequestResponse)
async def get_request_endpoint(
    request_id: int,
    actor_id: int = Depends(get_actor_id),
    db: AsyncSession = Depends(get_db),
):
    return await get_request(db, actor_id, request_id)
