"""
User endpoints: registration, lookup, update and removal.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from lending.db.session import get_db
from lending.schemas.user import UserCreate, UserResponse, UserUpdate
from lending.services.cache_service import invalidate_after_commit
from lending.services.user_service import (
    delete_user,
    get_user,
    list_users,
    owners_booked_from,
    register_user,
    update_user,
)

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, db: AsyncSession = Depends(get_db)):
    """Register a new user."""
    return await register_user(db, user_data)


@router.get("/", response_model=list[UserResponse])
async def list_users_endpoint(db: AsyncSession = Depends(get_db)):
    return await list_users(db)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user_endpoint(user_id: int, db: AsyncSession = Depends(get_db)):
    return await get_user(db, user_id)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user_endpoint(
    user_id: int,
    user_data: UserUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Change name and/or email. Booking lists showing the old name are dropped."""
    user = await update_user(db, user_id, user_data)
    owner_ids = await owners_booked_from(db, user.id)
    await invalidate_after_commit(db, booker_ids=[user.id], owner_ids=owner_ids)
    return user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user_endpoint(user_id: int, db: AsyncSession = Depends(get_db)):
    await delete_user(db, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
