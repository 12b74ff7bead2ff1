"""
Tests for the state classifier: bucket membership, boundaries and parsing.
"""

from datetime import datetime, timedelta

import pytest

from lending.core.exceptions import InvalidArgumentError
from lending.models import Booking, BookingStatus, Item
from lending.services.booking_states import (
    BookingCriteria,
    BookingState,
    Role,
    classify,
    criteria_for,
)

NOW = datetime(2030, 1, 15, 12, 0, 0)


def _booking(start_offset: timedelta, end_offset: timedelta,
             status: BookingStatus = BookingStatus.APPROVED) -> Booking:
    item = Item(id=10, name="Drill", description="Cordless drill", available=True, owner_id=1)
    return Booking(
        id=1,
        start=NOW + start_offset,
        end=NOW + end_offset,
        item_id=item.id,
        item=item,
        booker_id=2,
        status=status.value,
    )


@pytest.mark.parametrize("raw", ["ALL", "all", "Current", " past ", "FUTURE", "waiting", "REJECTED"])
def test_parse_is_case_insensitive(raw):
    assert BookingState.parse(raw).value == raw.strip().upper()


@pytest.mark.parametrize("raw", ["UNSUPPORTED_STATUS", "", "APPROVED", "CURRENTLY"])
def test_parse_unknown_state(raw):
    with pytest.raises(InvalidArgumentError) as exc_info:
        BookingState.parse(raw)
    assert f"Unknown state: {raw}" in exc_info.value.message


def test_parse_passes_enum_through():
    assert BookingState.parse(BookingState.PAST) is BookingState.PAST


def test_only_clock_states_are_time_dependent():
    assert {s for s in BookingState if s.is_time_dependent} == {
        BookingState.CURRENT,
        BookingState.PAST,
        BookingState.FUTURE,
    }


def test_past_booking():
    booking = _booking(-timedelta(days=2), -timedelta(days=1))
    assert classify(booking, NOW) == {BookingState.ALL, BookingState.PAST}


def test_future_booking():
    booking = _booking(timedelta(days=1), timedelta(days=2))
    assert classify(booking, NOW) == {BookingState.ALL, BookingState.FUTURE}


def test_current_booking():
    booking = _booking(-timedelta(hours=1), timedelta(hours=1))
    assert classify(booking, NOW) == {BookingState.ALL, BookingState.CURRENT}


def test_booking_ending_exactly_now_is_current_not_past():
    booking = _booking(-timedelta(days=1), timedelta(0))
    states = classify(booking, NOW)
    assert BookingState.CURRENT in states
    assert BookingState.PAST not in states


def test_booking_starting_exactly_now_is_current_not_future():
    booking = _booking(timedelta(0), timedelta(days=1))
    states = classify(booking, NOW)
    assert BookingState.CURRENT in states
    assert BookingState.FUTURE not in states


def test_status_buckets_overlap_with_time_buckets():
    waiting = _booking(timedelta(days=1), timedelta(days=2), BookingStatus.WAITING)
    assert classify(waiting, NOW) == {BookingState.ALL, BookingState.FUTURE, BookingState.WAITING}

    rejected = _booking(-timedelta(days=2), -timedelta(days=1), BookingStatus.REJECTED)
    assert classify(rejected, NOW) == {BookingState.ALL, BookingState.PAST, BookingState.REJECTED}


def test_approved_booking_is_in_no_status_bucket():
    booking = _booking(timedelta(days=1), timedelta(days=2), BookingStatus.APPROVED)
    states = classify(booking, NOW)
    assert BookingState.WAITING not in states
    assert BookingState.REJECTED not in states


def test_criteria_keyed_by_role():
    assert criteria_for(Role.BOOKER, 7, "ALL", NOW) == BookingCriteria(booker_id=7)
    assert criteria_for(Role.OWNER, 7, "ALL", NOW) == BookingCriteria(owner_id=7)


def test_criteria_for_each_state():
    assert criteria_for(Role.BOOKER, 7, "CURRENT", NOW) == BookingCriteria(
        booker_id=7, start_at_or_before=NOW, end_at_or_after=NOW
    )
    assert criteria_for(Role.BOOKER, 7, "PAST", NOW) == BookingCriteria(booker_id=7, end_before=NOW)
    assert criteria_for(Role.BOOKER, 7, "FUTURE", NOW) == BookingCriteria(booker_id=7, start_after=NOW)
    assert criteria_for(Role.OWNER, 7, "WAITING", NOW) == BookingCriteria(
        owner_id=7, status=BookingStatus.WAITING
    )
    assert criteria_for(Role.OWNER, 7, "REJECTED", NOW) == BookingCriteria(
        owner_id=7, status=BookingStatus.REJECTED
    )


def test_criteria_rejects_unknown_state():
    with pytest.raises(InvalidArgumentError):
        criteria_for(Role.OWNER, 7, "SOMETIME", NOW)


def test_owner_criteria_match_through_item():
    booking = _booking(timedelta(days=1), timedelta(days=2))
    assert criteria_for(Role.OWNER, 1, "ALL", NOW).matches(booking)
    assert not criteria_for(Role.OWNER, 2, "ALL", NOW).matches(booking)
    assert criteria_for(Role.BOOKER, 2, "ALL", NOW).matches(booking)
