import logging
from typing import Optional, Union

from sqlalchemy.orm import Session

from ops_platform.database import utcnow
from ops_platform.errors import InvalidInput, InvalidState, NotFound
from ops_platform.models.booking import Booking
from ops_platform.models.booking_type import BookingType
from ops_platform.models.contact import Contact
from ops_platform.models.form import FormStatus, FormSubmission, FormTemplate

logger = logging.getLogger(__name__)


def list_form_templates(db: Session, workspace_id: int) -> list[dict]:
    rows = db.query(FormTemplate, BookingType.name).outerjoin(
        BookingType, FormTemplate.linked_booking_type_id == BookingType.id
    ).filter(
        FormTemplate.workspace_id == workspace_id
    ).order_by(FormTemplate.name).all()

    return [
        {
            "id": template.id,
            "name": template.name,
            "description": template.description,
            "fields": template.fields or [],
            "linked_booking_type_id": template.linked_booking_type_id,
            "linked_booking_type_name": type_name,
            "created_at": template.created_at,
        }
        for template, type_name in rows
    ]


def create_form_template(
    db: Session,
    workspace_id: int,
    name: str,
    description: Optional[str] = None,
    fields: Optional[list] = None,
    linked_booking_type_id: Optional[int] = None,
) -> FormTemplate:
    if not name or not name.strip():
        raise InvalidInput("Name is required")

    if linked_booking_type_id is not None:
        linked = db.query(BookingType.id).filter(
            BookingType.id == linked_booking_type_id,
            BookingType.workspace_id == workspace_id,
        ).first()
        if not linked:
            raise InvalidInput("Invalid booking type")

    template = FormTemplate(
        workspace_id=workspace_id,
        name=name.strip(),
        description=description,
        fields=fields or [],
        linked_booking_type_id=linked_booking_type_id,
    )
    db.add(template)
    db.commit()
    db.refresh(template)
    return template


def _submission_row(submission: FormSubmission, contact: Contact, booking: Booking, template: FormTemplate) -> dict:
    return {
        "id": submission.id,
        "status": submission.status.value,
        "data": submission.data,
        "due_at": submission.due_at,
        "sent_at": submission.sent_at,
        "completed_at": submission.completed_at,
        "booking_id": submission.booking_id,
        "contact_id": submission.contact_id,
        "form_template_id": submission.form_template_id,
        "contact_name": contact.name,
        "contact_email": contact.email,
        "booking_scheduled_at": booking.scheduled_at,
        "form_name": template.name,
        "created_at": submission.created_at,
    }


def _submissions_query(db: Session, workspace_id: int):
    return db.query(FormSubmission, Contact, Booking, FormTemplate).join(
        Contact, FormSubmission.contact_id == Contact.id
    ).join(
        Booking, FormSubmission.booking_id == Booking.id
    ).join(
        FormTemplate, FormSubmission.form_template_id == FormTemplate.id
    ).filter(FormSubmission.workspace_id == workspace_id)


def list_form_submissions(
    db: Session,
    workspace_id: int,
    status: Optional[Union[FormStatus, str]] = None,
) -> list[dict]:
    query = _submissions_query(db, workspace_id)
    if status is not None:
        try:
            query = query.filter(FormSubmission.status == FormStatus(status))
        except ValueError:
            raise InvalidInput("Invalid status")

    rows = query.order_by(FormSubmission.created_at.desc(), FormSubmission.id.desc()).all()
    return [_submission_row(*row) for row in rows]


def get_form_submission(db: Session, workspace_id: int, submission_id: int) -> dict:
    row = _submissions_query(db, workspace_id).filter(FormSubmission.id == submission_id).first()
    if not row:
        raise NotFound("Form submission not found")

    result = _submission_row(*row)
    result["form_fields"] = row[3].fields or []
    return result


def get_form_for_submission(db: Session, submission_id: int) -> dict:
    """What the customer sees when opening a form link. No auth, addressed by submission id."""
    submission = db.query(FormSubmission).filter(FormSubmission.id == submission_id).first()
    if not submission:
        raise NotFound("Form not found")

    template = submission.form_template
    return {
        "id": submission.id,
        "name": template.name,
        "fields": template.fields or [],
        "status": submission.status.value,
    }


def submit_form(db: Session, submission_id: int, data: dict) -> dict:
    submission = db.query(FormSubmission).filter(FormSubmission.id == submission_id).first()
    if not submission:
        raise NotFound("Form not found")
    if submission.status == FormStatus.COMPLETED:
        raise InvalidState("Form already completed")

    # Overdue submissions can still be completed
    submission.data = data
    submission.status = FormStatus.COMPLETED
    submission.completed_at = utcnow()
    db.commit()

    logger.info(f"Form submission {submission_id} completed")
    return {"success": True}
