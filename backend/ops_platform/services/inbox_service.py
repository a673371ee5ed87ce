import logging
from datetime import timedelta
from typing import Optional, Union

from sqlalchemy.orm import Session

from ops_platform.database import utcnow
from ops_platform.errors import InvalidInput, NotFound
from ops_platform.models.contact import Contact
from ops_platform.models.conversation import Conversation, Message, MessageChannel, MessageDirection
from ops_platform.models.integration import IntegrationType
from ops_platform.services.contacts import conversation_has_unread
from ops_platform.services.notifications import DeliveryResult, Notifier, deliver

logger = logging.getLogger(__name__)

# A manual reply holds back automated messages to the contact for this long
AUTOMATION_PAUSE = timedelta(hours=24)


def last_message(db: Session, conversation_id: int) -> Optional[Message]:
    return db.query(Message).filter(
        Message.conversation_id == conversation_id
    ).order_by(Message.created_at.desc(), Message.id.desc()).first()


def is_unread(db: Session, conversation: Conversation) -> bool:
    latest = last_message(db, conversation.id)
    if latest is None:
        return False
    return conversation_has_unread(latest.direction, latest.created_at, conversation.last_read_at)


def list_conversations(db: Session, workspace_id: int) -> list[dict]:
    """Newest activity first, with a preview of the latest message."""
    rows = db.query(Conversation, Contact).join(
        Contact, Conversation.contact_id == Contact.id
    ).filter(
        Conversation.workspace_id == workspace_id
    ).order_by(Conversation.updated_at.desc(), Conversation.id.desc()).all()

    conversations = []
    for conversation, contact in rows:
        latest = last_message(db, conversation.id)
        conversations.append({
            "id": conversation.id,
            "contact_id": contact.id,
            "status": conversation.status.value,
            "updated_at": conversation.updated_at,
            "last_read_at": conversation.last_read_at,
            "contact_name": contact.name,
            "contact_email": contact.email,
            "contact_phone": contact.phone,
            "last_message": latest.body if latest else None,
            "last_message_at": latest.created_at if latest else None,
            "last_message_direction": latest.direction.value if latest else None,
            "has_unread": conversation_has_unread(
                latest.direction if latest else None,
                latest.created_at if latest else None,
                conversation.last_read_at,
            ),
        })
    return conversations


def _get_conversation(db: Session, workspace_id: int, conversation_id: int) -> Conversation:
    conversation = db.query(Conversation).filter(
        Conversation.id == conversation_id,
        Conversation.workspace_id == workspace_id,
    ).first()
    if not conversation:
        raise NotFound("Conversation not found")
    return conversation


def get_conversation(db: Session, workspace_id: int, conversation_id: int) -> dict:
    conversation = _get_conversation(db, workspace_id, conversation_id)
    contact = conversation.contact
    return {
        "id": conversation.id,
        "contact_id": contact.id,
        "status": conversation.status.value,
        "last_read_at": conversation.last_read_at,
        "automation_paused_until": conversation.automation_paused_until,
        "created_at": conversation.created_at,
        "updated_at": conversation.updated_at,
        "contact_name": contact.name,
        "contact_email": contact.email,
        "contact_phone": contact.phone,
    }


def mark_conversation_read(db: Session, workspace_id: int, conversation_id: int) -> None:
    conversation = _get_conversation(db, workspace_id, conversation_id)
    conversation.last_read_at = utcnow()
    db.commit()


def get_messages(db: Session, workspace_id: int, conversation_id: int) -> list[Message]:
    _get_conversation(db, workspace_id, conversation_id)
    return db.query(Message).filter(
        Message.conversation_id == conversation_id
    ).order_by(Message.created_at.asc(), Message.id.asc()).all()


def send_reply(
    db: Session,
    workspace_id: int,
    conversation_id: int,
    channel: Union[MessageChannel, str],
    body: str,
    subject: Optional[str] = None,
    notifier: Notifier = deliver,
) -> Message:
    """Store an outbound message, deliver it, and pause automation for the conversation."""
    try:
        channel = MessageChannel(channel)
    except ValueError:
        raise InvalidInput("Invalid channel")

    conversation = _get_conversation(db, workspace_id, conversation_id)
    contact = conversation.contact
    if channel == MessageChannel.EMAIL and not contact.email:
        raise InvalidInput("Contact has no email")
    if channel == MessageChannel.SMS and not contact.phone:
        raise InvalidInput("Contact has no phone")

    message = Message(
        workspace_id=workspace_id,
        conversation_id=conversation_id,
        direction=MessageDirection.OUT,
        channel=channel,
        subject=subject,
        body=body,
        is_automated=False,
    )
    db.add(message)
    db.commit()
    db.refresh(message)

    try:
        if channel == MessageChannel.EMAIL:
            result = notifier(db, workspace_id, IntegrationType.EMAIL, contact.email, body, subject=subject or "Message")
        else:
            result = notifier(db, workspace_id, IntegrationType.SMS, contact.phone, body)
    except Exception as e:
        # The stored reply stands; delivery errors only mark it undelivered
        db.rollback()
        result = DeliveryResult(success=False, error=str(e))

    if result.success and result.external_id:
        message.external_id = result.external_id
    elif not result.success:
        logger.warning(f"Reply {message.id} in conversation {conversation_id} not delivered: {result.error}")

    now = utcnow()
    conversation.updated_at = now
    conversation.automation_paused_until = now + AUTOMATION_PAUSE
    db.commit()
    db.refresh(message)
    return message
