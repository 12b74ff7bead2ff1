"""
Service interfaces for dependency inversion.
Lets the booking core run against SQL or in-memory storage unchanged.
"""

from .stores import BookingStore, ItemDirectory, UserDirectory

__all__ = ["BookingStore", "ItemDirectory", "UserDirectory"]
