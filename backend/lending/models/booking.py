"""
Booking model: a booker's request to hold an item for a time window.

Key design decisions:
- Status is stored as a short string constrained to the BookingStatus values
- end_date > start_date is enforced by a CHECK constraint as well as by the service
- item_id and booker_id never change after insert; status changes at most once
- Composite index (item_id, status) backs the last/next booking lookups
"""

import enum

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from lending.db.base import Base, TimestampMixin


class BookingStatus(str, enum.Enum):
    WAITING = "WAITING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    start = Column("start_date", DateTime, nullable=False)
    end = Column("end_date", DateTime, nullable=False)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False, index=True)
    booker_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=BookingStatus.WAITING.value)

    # Relationships
    item = relationship("Item", back_populates="bookings")
    booker = relationship("User", back_populates="bookings")

    __table_args__ = (
        CheckConstraint("end_date > start_date", name="check_booking_end_after_start"),
        CheckConstraint(
            "status IN ('WAITING', 'APPROVED', 'REJECTED')",
            name="check_booking_status",
        ),
        Index("ix_bookings_start_date", "start_date"),
        Index("ix_bookings_item_status", "item_id", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, item={self.item_id}, booker={self.booker_id}, "
            f"status={self.status}, start={self.start}, end={self.end})>"
        )
