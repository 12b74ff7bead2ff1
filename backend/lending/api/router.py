"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter

from lending.api.routes import bookings, items, requests, users

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(users.router)
api_router.include_router(items.router)
api_router.include_router(bookings.router)
api_router.include_router(requests.router)
