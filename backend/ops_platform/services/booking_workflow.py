"""Booking workflow: customer slot request -> confirmed booking.

Steps run in order and each persisted step commits on its own:

1. workspace must exist and be active, booking type must belong to it
2. contact resolution and the booking insert (one commit)
3. best-effort confirmation by email and SMS
4. post-booking form fan-out (one commit)

A failed confirmation never undoes the booking.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ops_platform.database import utcnow
from ops_platform.errors import InvalidInput, InvalidState, NotFound, SlotUnavailable
from ops_platform.models.booking import Booking, BookingStatus
from ops_platform.models.booking_type import BookingType
from ops_platform.models.contact import Contact
from ops_platform.models.form import FormStatus, FormSubmission, FormTemplate
from ops_platform.models.integration import IntegrationType
from ops_platform.models.workspace import Workspace, WorkspaceStatus
from ops_platform.schemas.booking import BookingCreated, BookingListItem, BookingRequest
from ops_platform.services.availability import workspace_zone
from ops_platform.services.contacts import find_or_create_contact
from ops_platform.services.notifications import Notifier, deliver, send_best_effort
from ops_platform.services.sms_service import SMS_MAX_LENGTH

logger = logging.getLogger(__name__)

FORM_DUE_DAYS = 7


def to_utc_naive(value: datetime) -> datetime:
    """Storage format for instants. A naive value is already UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def confirmation_text(booking_type: BookingType, workspace: Workspace, scheduled_at: datetime) -> str:
    local = scheduled_at.replace(tzinfo=timezone.utc).astimezone(workspace_zone(workspace))
    when = local.strftime("%Y-%m-%d %H:%M")
    return f"Your booking for {booking_type.name} on {when} is confirmed."


def create_booking(
    db: Session,
    workspace_id: int,
    request: BookingRequest,
    notifier: Notifier = deliver,
) -> BookingCreated:
    workspace = db.query(Workspace).filter(Workspace.id == workspace_id).first()
    if not workspace:
        raise NotFound("Workspace not found")
    if workspace.status != WorkspaceStatus.ACTIVE:
        raise InvalidState("Bookings are not open")

    booking_type = db.query(BookingType).filter(
        BookingType.id == request.booking_type_id,
        BookingType.workspace_id == workspace_id,
    ).first()
    if not booking_type:
        raise InvalidInput("Invalid booking type")

    scheduled_at = to_utc_naive(request.scheduled_at)
    contact = find_or_create_contact(
        db,
        workspace_id,
        email=request.email,
        phone=request.phone,
        name=request.name,
    )

    booking = Booking(
        workspace_id=workspace_id,
        contact_id=contact.id,
        booking_type_id=booking_type.id,
        scheduled_at=scheduled_at,
        status=BookingStatus.CONFIRMED,
        notes=request.notes,
    )
    db.add(booking)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise SlotUnavailable("This time slot is already booked")
    db.refresh(booking)

    logger.info(
        f"Booking {booking.id} created in workspace {workspace_id} "
        f"for contact {contact.id} at {scheduled_at.isoformat()}"
    )

    message = confirmation_text(booking_type, workspace, scheduled_at)
    if request.email:
        send_best_effort(
            notifier, db, workspace_id, IntegrationType.EMAIL,
            request.email, message, subject="Booking confirmed",
        )
    if request.phone:
        send_best_effort(
            notifier, db, workspace_id, IntegrationType.SMS,
            request.phone, message[:SMS_MAX_LENGTH],
        )

    created = fan_out_forms(db, workspace_id, booking.id, booking_type.id, contact.id)
    if created:
        logger.info(f"Booking {booking.id}: {created} form submission(s) issued")

    return BookingCreated(booking_id=booking.id, contact_id=contact.id)


def fan_out_forms(db: Session, workspace_id: int, booking_id: int, booking_type_id: int, contact_id: int) -> int:
    """One pending submission per template linked to the type or to all types."""
    templates = db.query(FormTemplate).filter(
        FormTemplate.workspace_id == workspace_id,
        or_(
            FormTemplate.linked_booking_type_id.is_(None),
            FormTemplate.linked_booking_type_id == booking_type_id,
        ),
    ).order_by(FormTemplate.id).all()

    now = utcnow()
    for template in templates:
        db.add(FormSubmission(
            workspace_id=workspace_id,
            booking_id=booking_id,
            form_template_id=template.id,
            contact_id=contact_id,
            status=FormStatus.PENDING,
            sent_at=now,
            due_at=now + timedelta(days=FORM_DUE_DAYS),
        ))
    db.commit()
    return len(templates)


def update_booking_status(
    db: Session,
    workspace_id: int,
    booking_id: int,
    status: Union[BookingStatus, str],
) -> Booking:
    """Overwrite the status. Every transition is allowed, including back to confirmed."""
    try:
        new_status = BookingStatus(status)
    except ValueError:
        raise InvalidInput("Invalid status")

    booking = db.query(Booking).filter(
        Booking.id == booking_id,
        Booking.workspace_id == workspace_id,
    ).first()
    if not booking:
        raise NotFound("Booking not found")

    booking.status = new_status
    try:
        db.commit()
    except IntegrityError:
        # Re-confirming a cancelled booking whose slot was taken since
        db.rollback()
        raise SlotUnavailable("This time slot is already booked")
    db.refresh(booking)
    logger.info(f"Booking {booking_id} status set to {new_status.value}")
    return booking


def list_booking_types(db: Session, workspace_id: int) -> list[BookingType]:
    return db.query(BookingType).filter(
        BookingType.workspace_id == workspace_id
    ).order_by(BookingType.name).all()


def create_booking_type(
    db: Session,
    workspace_id: int,
    name: str,
    duration_minutes: int,
    location: Optional[str] = None,
    is_online: bool = False,
) -> BookingType:
    if not name or not name.strip():
        raise InvalidInput("Name is required")
    if duration_minutes <= 0:
        raise InvalidInput("Duration must be greater than zero")

    booking_type = BookingType(
        workspace_id=workspace_id,
        name=name.strip(),
        duration_minutes=duration_minutes,
        location=location,
        is_online=is_online,
    )
    db.add(booking_type)
    db.commit()
    db.refresh(booking_type)
    return booking_type


def booking_rows(db: Session, workspace_id: int):
    """Bookings joined with their contact and booking type."""
    return db.query(Booking, Contact, BookingType).join(
        Contact, Booking.contact_id == Contact.id
    ).join(
        BookingType, Booking.booking_type_id == BookingType.id
    ).filter(Booking.workspace_id == workspace_id)


def to_list_item(booking: Booking, contact: Contact, booking_type: BookingType) -> BookingListItem:
    return BookingListItem(
        id=booking.id,
        contact_id=booking.contact_id,
        booking_type_id=booking.booking_type_id,
        scheduled_at=booking.scheduled_at,
        status=booking.status,
        notes=booking.notes,
        created_at=booking.created_at,
        updated_at=booking.updated_at,
        contact_name=contact.name,
        contact_email=contact.email,
        contact_phone=contact.phone,
        booking_type_name=booking_type.name,
        duration_minutes=booking_type.duration_minutes,
    )


def list_bookings(
    db: Session,
    workspace_id: int,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    status: Optional[Union[BookingStatus, str]] = None,
) -> list[BookingListItem]:
    query = booking_rows(db, workspace_id)

    if start is not None:
        query = query.filter(Booking.scheduled_at >= to_utc_naive(start))
    if end is not None:
        query = query.filter(Booking.scheduled_at <= to_utc_naive(end))
    if status is not None:
        try:
            query = query.filter(Booking.status == BookingStatus(status))
        except ValueError:
            raise InvalidInput("Invalid status")

    rows = query.order_by(Booking.scheduled_at.asc(), Booking.id.asc()).all()
    return [to_list_item(*row) for row in rows]
