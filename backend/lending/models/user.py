"""
User model. Users are both item owners and bookers.
"""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from lending.db.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(512), unique=True, index=True, nullable=False)

    # Relationships
    items = relationship("Item", back_populates="owner")
    bookings = relationship("Booking", back_populates="booker")
    comments = relationship("Comment", back_populates="author")
    item_requests = relationship("ItemRequest", back_populates="requester")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
