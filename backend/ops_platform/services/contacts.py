"""Contact de-duplication and conversation threading.

Repeated contact-form submissions and bookings from the same person must land
on one contact and one conversation per workspace.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ops_platform.errors import InvalidInput, NotFound
from ops_platform.models.contact import Contact
from ops_platform.models.conversation import Conversation, ConversationStatus, MessageDirection
from ops_platform.schemas.contact import ContactResolution

logger = logging.getLogger(__name__)


def find_or_create_contact(
    db: Session,
    workspace_id: int,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    name: Optional[str] = None,
) -> ContactResolution:
    """Upsert a contact keyed by email, falling back to phone.

    An existing contact only gains values: fields are overwritten when the
    incoming value is not None, never cleared.
    """
    key = email if email is not None else phone
    if not key:
        raise InvalidInput("Email or phone required")

    contact = db.query(Contact).filter(
        Contact.workspace_id == workspace_id,
        or_(Contact.email == key, Contact.phone == key),
    ).order_by(Contact.id).first()

    if contact:
        if name is not None:
            contact.name = name
        if email is not None:
            contact.email = email
        if phone is not None:
            contact.phone = phone
        db.flush()
        return ContactResolution(id=contact.id, created=False)

    contact = Contact(workspace_id=workspace_id, email=email, phone=phone, name=name)
    db.add(contact)
    db.flush()
    logger.info(f"Created contact {contact.id} in workspace {workspace_id}")
    return ContactResolution(id=contact.id, created=True)


def get_or_create_conversation(db: Session, workspace_id: int, contact_id: int) -> int:
    conversation = db.query(Conversation).filter(
        Conversation.workspace_id == workspace_id,
        Conversation.contact_id == contact_id,
    ).first()
    if conversation:
        return conversation.id

    conversation = Conversation(
        workspace_id=workspace_id,
        contact_id=contact_id,
        status=ConversationStatus.OPEN,
    )
    db.add(conversation)
    db.flush()
    return conversation.id


def conversation_has_unread(
    last_direction: Optional[MessageDirection],
    last_message_at: Optional[datetime],
    last_read_at: Optional[datetime],
) -> bool:
    """Unread iff the latest message is inbound and newer than the read receipt."""
    if last_direction != MessageDirection.IN:
        return False
    if last_read_at is None:
        return True
    return last_message_at is not None and last_message_at > last_read_at


def list_contacts(db: Session, workspace_id: int) -> list[Contact]:
    return db.query(Contact).filter(
        Contact.workspace_id == workspace_id
    ).order_by(Contact.updated_at.desc(), Contact.id.desc()).all()


def get_contact(db: Session, workspace_id: int, contact_id: int) -> Contact:
    contact = db.query(Contact).filter(
        Contact.workspace_id == workspace_id,
        Contact.id == contact_id,
    ).first()
    if not contact:
        raise NotFound("Contact not found")
    return contact
