"""
Temporal classification of bookings.

A BookingState is a query selector, never a stored value. The six buckets
are defined once, in _STATE_FILTERS, as builders of BookingCriteria for a
given instant; the caller's role only decides which id field the criteria
is keyed on. Stores translate a BookingCriteria into their own query (SQL
WHERE clauses, or BookingCriteria.matches for the in-memory store).

Boundaries:
  CURRENT  start <= now AND end >= now   (both ends inclusive)
  PAST     end < now                     (strict)
  FUTURE   start > now                   (strict)

A booking ending exactly at `now` is CURRENT, not PAST.
"""

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, FrozenSet, Optional, Union

from lending.core.exceptions import InvalidArgumentError
from lending.models.booking import Booking, BookingStatus


class BookingState(str, enum.Enum):
    ALL = "ALL"
    CURRENT = "CURRENT"
    PAST = "PAST"
    FUTURE = "FUTURE"
    WAITING = "WAITING"
    REJECTED = "REJECTED"

    @classmethod
    def parse(cls, value: Union["BookingState", str]) -> "BookingState":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise InvalidArgumentError(
                f"Unknown state: {value}",
                details={"state": value, "allowed": [state.value for state in cls]},
            )

    @property
    def is_time_dependent(self) -> bool:
        return self in (BookingState.CURRENT, BookingState.PAST, BookingState.FUTURE)


class Role(str, enum.Enum):
    BOOKER = "booker"
    OWNER = "owner"


@dataclass(frozen=True)
class BookingCriteria:
    """Conjunction of optional predicates over a booking. None means "no constraint"."""

    booker_id: Optional[int] = None
    owner_id: Optional[int] = None
    status: Optional[BookingStatus] = None
    start_at_or_before: Optional[datetime] = None
    end_at_or_after: Optional[datetime] = None
    end_before: Optional[datetime] = None
    start_after: Optional[datetime] = None

    def matches(self, booking: Booking) -> bool:
        if self.booker_id is not None and booking.booker_id != self.booker_id:
            return False
        if self.owner_id is not None and booking.item.owner_id != self.owner_id:
            return False
        if self.status is not None and booking.status != self.status:
            return False
        if self.start_at_or_before is not None and not booking.start <= self.start_at_or_before:
            return False
        if self.end_at_or_after is not None and not booking.end >= self.end_at_or_after:
            return False
        if self.end_before is not None and not booking.end < self.end_before:
            return False
        if self.start_after is not None and not booking.start > self.start_after:
            return False
        return True


_STATE_FILTERS: Dict[BookingState, Callable[[datetime], Dict[str, Any]]] = {
    BookingState.ALL: lambda now: {},
    BookingState.CURRENT: lambda now: {"start_at_or_before": now, "end_at_or_after": now},
    BookingState.PAST: lambda now: {"end_before": now},
    BookingState.FUTURE: lambda now: {"start_after": now},
    BookingState.WAITING: lambda now: {"status": BookingStatus.WAITING},
    BookingState.REJECTED: lambda now: {"status": BookingStatus.REJECTED},
}

_ROLE_FIELDS = {
    Role.BOOKER: "booker_id",
    Role.OWNER: "owner_id",
}


def criteria_for(
    role: Role,
    actor_id: int,
    state: Union[BookingState, str],
    now: datetime,
) -> BookingCriteria:
    """Build the store query for `actor_id` acting as `role`, filtered by `state` at `now`."""
    state = BookingState.parse(state)
    return BookingCriteria(**{_ROLE_FIELDS[role]: actor_id}, **_STATE_FILTERS[state](now))


def classify(booking: Booking, now: datetime) -> FrozenSet[BookingState]:
    """Every bucket `booking` falls into at `now`. ALL is always included."""
    return frozenset(
        state
        for state, build in _STATE_FILTERS.items()
        if BookingCriteria(**build(now)).matches(booking)
    )
