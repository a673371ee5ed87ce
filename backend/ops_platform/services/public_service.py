"""Unauthenticated customer-facing operations: contact form and booking page."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ops_platform.database import utcnow
from ops_platform.errors import NotFound
from ops_platform.models.booking_type import BookingType
from ops_platform.models.conversation import Conversation, Message, MessageChannel, MessageDirection
from ops_platform.models.form import ContactForm
from ops_platform.models.integration import IntegrationType
from ops_platform.models.workspace import WorkspaceStatus
from ops_platform.services.contacts import find_or_create_contact, get_or_create_conversation
from ops_platform.services.notifications import Notifier, deliver, send_best_effort
from ops_platform.services.sms_service import SMS_MAX_LENGTH
from ops_platform.services.workspace_service import get_workspace, resolve_workspace_ref

logger = logging.getLogger(__name__)

DEFAULT_WELCOME_MESSAGE = "Thanks for reaching out! We'll get back to you soon."


def get_public_contact_form(db: Session, ref: str) -> dict:
    workspace = resolve_workspace_ref(db, ref)
    form = db.query(ContactForm).filter(ContactForm.workspace_id == workspace.id).first()
    if not form:
        raise NotFound("Form not found")

    return {
        "workspaceId": workspace.id,
        "workspaceName": workspace.name,
        "formName": form.name,
        "fields": form.fields or [],
    }


def render_welcome(template: Optional[str], name: Optional[str]) -> str:
    return (template or DEFAULT_WELCOME_MESSAGE).replace("{name}", name or "there")


def submit_contact_form(
    db: Session,
    workspace_id: int,
    name: Optional[str] = None,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    message: Optional[str] = None,
    notifier: Notifier = deliver,
) -> dict:
    """Record a lead as an inbound message on the contact's conversation, then welcome them."""
    workspace = get_workspace(db, workspace_id)

    contact = find_or_create_contact(db, workspace_id, email=email, phone=phone, name=name)
    conversation_id = get_or_create_conversation(db, workspace_id, contact.id)

    db.add(Message(
        workspace_id=workspace_id,
        conversation_id=conversation_id,
        direction=MessageDirection.IN,
        channel=MessageChannel.EMAIL,
        body=message or "",
        is_automated=False,
    ))
    conversation = db.query(Conversation).filter(Conversation.id == conversation_id).first()
    conversation.updated_at = utcnow()
    db.commit()

    logger.info(f"Contact form submitted in workspace {workspace_id} by contact {contact.id}")

    form = db.query(ContactForm).filter(ContactForm.workspace_id == workspace_id).first()
    welcome = render_welcome(form.welcome_message_template if form else None, name)

    if email and workspace.email_connected:
        send_best_effort(
            notifier, db, workspace_id, IntegrationType.EMAIL,
            email, welcome, subject="We received your message",
        )
    if phone and workspace.sms_connected:
        send_best_effort(
            notifier, db, workspace_id, IntegrationType.SMS,
            phone, welcome[:SMS_MAX_LENGTH],
        )

    return {"success": True, "contactId": contact.id, "conversationId": conversation_id}


def get_public_booking_page(db: Session, ref: str) -> dict:
    workspace = resolve_workspace_ref(db, ref)
    booking_types = db.query(BookingType).filter(
        BookingType.workspace_id == workspace.id
    ).order_by(BookingType.name).all()

    return {
        "workspaceId": workspace.id,
        "workspaceName": workspace.name,
        "timezone": workspace.timezone,
        "bookingOpen": workspace.status == WorkspaceStatus.ACTIVE,
        "bookingTypes": [
            {
                "id": bt.id,
                "name": bt.name,
                "duration_minutes": bt.duration_minutes,
                "location": bt.location,
                "is_online": bt.is_online,
            }
            for bt in booking_types
        ],
    }
