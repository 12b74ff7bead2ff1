"""
Item model: something an owner lends out.

`available` is the owner's switch; bookings can only be requested while it
is true. Past bookings and comments stay attached when it is turned off.
"""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from lending.db.base import Base, TimestampMixin


class Item(Base, TimestampMixin):
    __tablename__ = "items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(1000), nullable=False)
    available = Column(Boolean, nullable=False, default=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    request_id = Column(Integer, ForeignKey("item_requests.id"), nullable=True, index=True)

    # Relationships
    owner = relationship("User", back_populates="items")
    bookings = relationship("Booking", back_populates="item")
    comments = relationship("Comment", back_populates="item")
    request = relationship("ItemRequest", back_populates="items")

    def __repr__(self) -> str:
        return f"<Item(id={self.id}, name={self.name}, owner={self.owner_id}, available={self.available})>"
