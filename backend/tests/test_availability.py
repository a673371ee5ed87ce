"""Tests for slot computation and availability window management."""

from datetime import date, datetime, timedelta, timezone

import pytest

from ops_platform.errors import InvalidInput
from ops_platform.models import Booking, BookingStatus, Contact
from ops_platform.schemas.booking import AvailabilityWindowIn
from ops_platform.services.availability import (
    compute_slots,
    day_of_week,
    list_availability,
    parse_wall_time,
    set_availability,
)

from conftest import MONDAY


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def _book(db, workspace, booking_type, scheduled_at, status=BookingStatus.CONFIRMED):
    contact = Contact(workspace_id=workspace.id, email=f"c{scheduled_at.timestamp()}@example.com")
    db.add(contact)
    db.flush()
    booking = Booking(
        workspace_id=workspace.id,
        contact_id=contact.id,
        booking_type_id=booking_type.id,
        scheduled_at=scheduled_at,
        status=status,
    )
    db.add(booking)
    db.commit()
    return booking


class TestHelpers:
    def test_day_of_week_is_sunday_based(self):
        assert day_of_week(MONDAY) == 1
        assert day_of_week(MONDAY - timedelta(days=1)) == 0
        assert day_of_week(MONDAY + timedelta(days=5)) == 6

    def test_parse_wall_time_accepts_seconds(self):
        assert parse_wall_time("09:30") == 570
        assert parse_wall_time("09:30:00") == 570

    def test_parse_wall_time_rejects_garbage(self):
        with pytest.raises(InvalidInput):
            parse_wall_time("9am")


class TestComputeSlots:
    def test_haircut_monday_window(self, db_session, ready_workspace):
        workspace, haircut = ready_workspace

        slots = compute_slots(db_session, workspace.id, haircut.id, MONDAY)

        assert slots == [utc(2030, 1, 7, 9, 0), utc(2030, 1, 7, 9, 30)]

    def test_booked_slot_is_removed(self, db_session, ready_workspace):
        workspace, haircut = ready_workspace
        _book(db_session, workspace, haircut, datetime(2030, 1, 7, 9, 30))

        slots = compute_slots(db_session, workspace.id, haircut.id, MONDAY)

        assert slots == [utc(2030, 1, 7, 9, 0)]

    def test_cancelled_booking_frees_the_slot(self, db_session, ready_workspace):
        workspace, haircut = ready_workspace
        _book(db_session, workspace, haircut, datetime(2030, 1, 7, 9, 30), BookingStatus.CANCELLED)

        slots = compute_slots(db_session, workspace.id, haircut.id, MONDAY)

        assert utc(2030, 1, 7, 9, 30) in slots

    def test_overlapping_but_not_exact_booking_does_not_block(self, db_session, ready_workspace):
        workspace, haircut = ready_workspace
        _book(db_session, workspace, haircut, datetime(2030, 1, 7, 9, 15))

        slots = compute_slots(db_session, workspace.id, haircut.id, MONDAY)

        assert slots == [utc(2030, 1, 7, 9, 0), utc(2030, 1, 7, 9, 30)]

    def test_other_booking_type_does_not_block(self, db_session, ready_workspace, make_booking_type):
        workspace, haircut = ready_workspace
        color = make_booking_type(workspace, "Color", 30)
        _book(db_session, workspace, color, datetime(2030, 1, 7, 9, 0))

        slots = compute_slots(db_session, workspace.id, haircut.id, MONDAY)

        assert utc(2030, 1, 7, 9, 0) in slots

    def test_unknown_booking_type_yields_nothing(self, db_session, ready_workspace):
        workspace, _ = ready_workspace
        assert compute_slots(db_session, workspace.id, 9999, MONDAY) == []

    def test_unknown_workspace_yields_nothing(self, db_session, ready_workspace):
        _, haircut = ready_workspace
        assert compute_slots(db_session, 9999, haircut.id, MONDAY) == []

    def test_booking_type_of_another_workspace_yields_nothing(self, db_session, ready_workspace, make_workspace):
        _, haircut = ready_workspace
        other = make_workspace(name="Other")
        assert compute_slots(db_session, other.id, haircut.id, MONDAY) == []

    def test_day_without_windows_yields_nothing(self, db_session, ready_workspace):
        workspace, haircut = ready_workspace
        tuesday = MONDAY + timedelta(days=1)
        assert compute_slots(db_session, workspace.id, haircut.id, tuesday) == []

    def test_type_and_workspace_windows_are_unioned(self, db_session, ready_workspace, make_window):
        workspace, haircut = ready_workspace
        make_window(workspace, 1, "13:00", "14:00")

        slots = compute_slots(db_session, workspace.id, haircut.id, MONDAY)

        assert slots == [
            utc(2030, 1, 7, 9, 0),
            utc(2030, 1, 7, 9, 30),
            utc(2030, 1, 7, 13, 0),
            utc(2030, 1, 7, 13, 30),
        ]

    def test_grid_steps_half_hours_regardless_of_duration(self, db_session, make_workspace, make_booking_type, make_window):
        workspace = make_workspace()
        massage = make_booking_type(workspace, "Massage", 60)
        make_window(workspace, 1, "09:00", "10:30", booking_type=massage)

        slots = compute_slots(db_session, workspace.id, massage.id, MONDAY)

        assert slots == [utc(2030, 1, 7, 9, 0), utc(2030, 1, 7, 9, 30)]

    def test_duration_longer_than_window_yields_nothing(self, db_session, make_workspace, make_booking_type, make_window):
        workspace = make_workspace()
        long_type = make_booking_type(workspace, "Full day", 120)
        make_window(workspace, 1, "09:00", "10:00", booking_type=long_type)

        assert compute_slots(db_session, workspace.id, long_type.id, MONDAY) == []

    def test_windows_are_read_in_workspace_timezone(self, db_session, make_workspace, make_booking_type, make_window):
        workspace = make_workspace(timezone="America/New_York")
        haircut = make_booking_type(workspace, "Haircut", 30)
        make_window(workspace, 1, "09:00", "10:00", booking_type=haircut)
        # January: New York is UTC-5
        _book(db_session, workspace, haircut, datetime(2030, 1, 7, 14, 30))

        slots = compute_slots(db_session, workspace.id, haircut.id, MONDAY)

        assert slots == [utc(2030, 1, 7, 14, 0)]

    def test_slots_are_recomputed_every_call(self, db_session, ready_workspace):
        workspace, haircut = ready_workspace
        assert len(compute_slots(db_session, workspace.id, haircut.id, MONDAY)) == 2

        _book(db_session, workspace, haircut, datetime(2030, 1, 7, 9, 0))

        assert compute_slots(db_session, workspace.id, haircut.id, MONDAY) == [utc(2030, 1, 7, 9, 30)]


class TestSetAvailability:
    def test_replaces_only_the_given_scope(self, db_session, ready_workspace, make_window):
        workspace, haircut = ready_workspace
        make_window(workspace, 3, "10:00", "12:00")

        windows = set_availability(db_session, workspace.id, haircut.id, [
            AvailabilityWindowIn(day_of_week=2, start_time="08:00", end_time="09:00"),
            AvailabilityWindowIn(day_of_week=4, start_time="8:30", end_time="17:00"),
        ])

        assert [(w.day_of_week, w.start_time, w.end_time) for w in windows] == [
            (2, "08:00", "09:00"),
            (4, "08:30", "17:00"),
        ]
        workspace_wide = list_availability(db_session, workspace.id, None)
        assert [(w.day_of_week, w.start_time) for w in workspace_wide] == [(3, "10:00")]

    def test_empty_list_clears_the_scope(self, db_session, ready_workspace):
        workspace, haircut = ready_workspace

        assert set_availability(db_session, workspace.id, haircut.id, []) == []
        assert compute_slots(db_session, workspace.id, haircut.id, MONDAY) == []

    def test_start_must_precede_end(self, db_session, ready_workspace):
        workspace, haircut = ready_workspace
        with pytest.raises(InvalidInput):
            set_availability(db_session, workspace.id, haircut.id, [
                AvailabilityWindowIn(day_of_week=1, start_time="10:00", end_time="10:00"),
            ])

    def test_rejected_replace_keeps_existing_windows(self, db_session, ready_workspace):
        workspace, haircut = ready_workspace
        with pytest.raises(InvalidInput):
            set_availability(db_session, workspace.id, haircut.id, [
                AvailabilityWindowIn(day_of_week=1, start_time="nine", end_time="10:00"),
            ])

        assert len(list_availability(db_session, workspace.id, haircut.id)) == 1

    def test_booking_type_must_belong_to_workspace(self, db_session, ready_workspace, make_workspace):
        _, haircut = ready_workspace
        other = make_workspace(name="Other")
        with pytest.raises(InvalidInput):
            set_availability(db_session, other.id, haircut.id, [])

    def test_day_of_week_is_bounded(self):
        with pytest.raises(ValueError):
            AvailabilityWindowIn(day_of_week=7, start_time="09:00", end_time="10:00")

    def test_new_windows_open_slots(self, db_session, make_workspace, make_booking_type):
        workspace = make_workspace()
        haircut = make_booking_type(workspace)
        assert compute_slots(db_session, workspace.id, haircut.id, date(2030, 1, 8)) == []

        set_availability(db_session, workspace.id, None, [
            AvailabilityWindowIn(day_of_week=2, start_time="12:00", end_time="13:00"),
        ])

        assert compute_slots(db_session, workspace.id, haircut.id, date(2030, 1, 8)) == [
            utc(2030, 1, 8, 12, 0),
            utc(2030, 1, 8, 12, 30),
        ]
