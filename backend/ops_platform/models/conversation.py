from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship
import enum
from ops_platform.database import Base, utcnow, value_enum


class MessageChannel(str, enum.Enum):
    EMAIL = "email"
    SMS = "sms"


class MessageDirection(str, enum.Enum):
    IN = "in"
    OUT = "out"


class ConversationStatus(str, enum.Enum):
    OPEN = "open"
    CLOSED = "closed"


class Conversation(Base):
    __tablename__ = "conversations"

    id = Column(Integer, primary_key=True, index=True)
    status = Column(value_enum(ConversationStatus), nullable=False, default=ConversationStatus.OPEN)
    last_read_at = Column(DateTime, nullable=True)
    automation_paused_until = Column(DateTime, nullable=True)

    contact_id = Column(Integer, ForeignKey("contacts.id", ondelete="CASCADE"), nullable=False)
    workspace_id = Column(Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    contact = relationship("Contact", back_populates="conversations")
    workspace = relationship("Workspace", back_populates="conversations")
    messages = relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="Message.created_at",
    )

    __table_args__ = (
        UniqueConstraint("workspace_id", "contact_id", name="uq_conversation_workspace_contact"),
    )


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    direction = Column(value_enum(MessageDirection), nullable=False)
    channel = Column(value_enum(MessageChannel), nullable=False)
    subject = Column(String(255))
    body = Column(Text, nullable=False, default="")
    is_automated = Column(Boolean, default=False)
    external_id = Column(String(255))  # Provider id, patched in after delivery

    workspace_id = Column(Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False)
    conversation_id = Column(Integer, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    conversation = relationship("Conversation", back_populates="messages")
