"""
Comment left on an item by someone who has finished an approved booking of it.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from lending.db.base import Base


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True)
    text = Column(String(1000), nullable=False)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False, index=True)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created = Column(DateTime, nullable=False)

    # Relationships
    item = relationship("Item", back_populates="comments")
    author = relationship("User", back_populates="comments", lazy="joined")

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, item={self.item_id}, author={self.author_id})>"
