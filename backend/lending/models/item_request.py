"""
A user's request for an item nobody lists yet. Owners answer it by creating
an item with `request_id` pointing back at it.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from lending.db.base import Base


class ItemRequest(Base):
    __tablename__ = "item_requests"

    id = Column(Integer, primary_key=True, index=True)
    description = Column(String(1000), nullable=False)
    requester_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created = Column(DateTime, nullable=False, index=True)

    # Relationships
    requester = relationship("User", back_populates="item_requests")
    items = relationship("Item", back_populates="request", order_by="Item.id")

    def __repr__(self) -> str:
        return f"<ItemRequest(id={self.id}, requester={self.requester_id})>"
