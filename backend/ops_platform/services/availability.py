"""Availability engine: weekly windows minus existing bookings -> bookable slots.

Windows are wall-clock ``HH:MM`` ranges interpreted in the workspace timezone.
Slots are produced on a fixed 30 minute grid from each window's start,
independent of the service duration. Type-specific and workspace-wide windows
for the same weekday are unioned, and a slot is only blocked by a booking at
exactly the same instant.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ops_platform.errors import InvalidInput
from ops_platform.models.availability import AvailabilityWindow
from ops_platform.models.booking import Booking, BookingStatus
from ops_platform.models.booking_type import BookingType
from ops_platform.models.workspace import Workspace
from ops_platform.schemas.booking import AvailabilityWindowIn

logger = logging.getLogger(__name__)

SLOT_STEP_MINUTES = 30


def workspace_zone(workspace: Workspace) -> ZoneInfo:
    try:
        return ZoneInfo(workspace.timezone or "UTC")
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Workspace {workspace.id} has unknown timezone {workspace.timezone!r}, using UTC")
        return ZoneInfo("UTC")


def day_of_week(on_date: date) -> int:
    """0 = Sunday .. 6 = Saturday."""
    return on_date.isoweekday() % 7


def parse_wall_time(value: str) -> int:
    """Minutes since midnight for ``HH:MM`` (seconds are tolerated)."""
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            parsed = datetime.strptime(value, fmt)
            return parsed.hour * 60 + parsed.minute
        except ValueError:
            continue
    raise InvalidInput(f"Invalid time {value!r}, expected HH:MM")


def local_day_bounds_utc(on_date: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """Naive-UTC [start, end) of ``on_date`` as a calendar day in ``tz``."""
    start = datetime.combine(on_date, time.min, tzinfo=tz)
    end = datetime.combine(on_date + timedelta(days=1), time.min, tzinfo=tz)
    return (
        start.astimezone(timezone.utc).replace(tzinfo=None),
        end.astimezone(timezone.utc).replace(tzinfo=None),
    )


def compute_slots(db: Session, workspace_id: int, booking_type_id: int, on_date: date) -> list[datetime]:
    """Bookable start instants (aware, UTC) for one booking type on one local date.

    Unknown workspace, unknown booking type, no windows or a fully booked day
    all yield an empty list.
    """
    workspace = db.query(Workspace).filter(Workspace.id == workspace_id).first()
    if not workspace:
        return []

    booking_type = db.query(BookingType).filter(
        BookingType.id == booking_type_id,
        BookingType.workspace_id == workspace_id,
    ).first()
    if not booking_type:
        return []

    tz = workspace_zone(workspace)
    windows = db.query(AvailabilityWindow).filter(
        AvailabilityWindow.workspace_id == workspace_id,
        AvailabilityWindow.day_of_week == day_of_week(on_date),
        or_(
            AvailabilityWindow.booking_type_id == booking_type_id,
            AvailabilityWindow.booking_type_id.is_(None),
        ),
    ).order_by(AvailabilityWindow.start_time, AvailabilityWindow.id).all()
    if not windows:
        return []

    day_start, day_end = local_day_bounds_utc(on_date, tz)
    taken = {
        row.scheduled_at
        for row in db.query(Booking.scheduled_at).filter(
            Booking.workspace_id == workspace_id,
            Booking.booking_type_id == booking_type_id,
            Booking.scheduled_at >= day_start,
            Booking.scheduled_at < day_end,
            Booking.status != BookingStatus.CANCELLED,
        )
    }

    duration = booking_type.duration_minutes
    slots = []
    for window in windows:
        minute = parse_wall_time(window.start_time)
        end_minute = parse_wall_time(window.end_time)
        while minute + duration <= end_minute:
            local = datetime.combine(on_date, time(minute // 60, minute % 60), tzinfo=tz)
            instant = local.astimezone(timezone.utc)
            if instant.replace(tzinfo=None) not in taken:
                slots.append(instant)
            minute += SLOT_STEP_MINUTES
    return slots


def list_availability(db: Session, workspace_id: int, booking_type_id: Optional[int] = None) -> list[AvailabilityWindow]:
    """Windows of exactly one scope: a booking type, or workspace-wide when None."""
    scope = (
        AvailabilityWindow.booking_type_id.is_(None)
        if booking_type_id is None
        else AvailabilityWindow.booking_type_id == booking_type_id
    )
    return db.query(AvailabilityWindow).filter(
        AvailabilityWindow.workspace_id == workspace_id,
        scope,
    ).order_by(AvailabilityWindow.day_of_week, AvailabilityWindow.start_time).all()


def set_availability(
    db: Session,
    workspace_id: int,
    booking_type_id: Optional[int],
    windows: list[AvailabilityWindowIn],
) -> list[AvailabilityWindow]:
    """Replace every window of the scope with ``windows``."""
    if booking_type_id is not None:
        exists = db.query(BookingType.id).filter(
            BookingType.id == booking_type_id,
            BookingType.workspace_id == workspace_id,
        ).first()
        if not exists:
            raise InvalidInput("Invalid booking type")

    rows = []
    for window in windows:
        start = parse_wall_time(window.start_time)
        end = parse_wall_time(window.end_time)
        if start >= end:
            raise InvalidInput("start_time must be before end_time")
        rows.append(AvailabilityWindow(
            workspace_id=workspace_id,
            booking_type_id=booking_type_id,
            day_of_week=window.day_of_week,
            start_time=f"{start // 60:02d}:{start % 60:02d}",
            end_time=f"{end // 60:02d}:{end % 60:02d}",
        ))

    scope = (
        AvailabilityWindow.booking_type_id.is_(None)
        if booking_type_id is None
        else AvailabilityWindow.booking_type_id == booking_type_id
    )
    db.query(AvailabilityWindow).filter(
        AvailabilityWindow.workspace_id == workspace_id,
        scope,
    ).delete(synchronize_session=False)
    db.add_all(rows)
    db.commit()

    logger.info(f"Availability replaced for workspace {workspace_id} type {booking_type_id}: {len(rows)} window(s)")
    return list_availability(db, workspace_id, booking_type_id)
