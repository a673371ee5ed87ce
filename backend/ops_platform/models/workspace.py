from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.orm import relationship
import enum
from ops_platform.database import Base, utcnow, value_enum


class WorkspaceStatus(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"


class Workspace(Base):
    __tablename__ = "workspaces"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    address = Column(String(500))
    timezone = Column(String(64), nullable=False, default="UTC")
    contact_email = Column(String(255))
    status = Column(value_enum(WorkspaceStatus), nullable=False, default=WorkspaceStatus.DRAFT)

    # Communication channels
    email_connected = Column(Boolean, nullable=False, default=False)
    sms_connected = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    users = relationship("WorkspaceUser", back_populates="workspace", cascade="all, delete-orphan")
    contacts = relationship("Contact", back_populates="workspace", cascade="all, delete-orphan")
    booking_types = relationship("BookingType", back_populates="workspace", cascade="all, delete-orphan")
    bookings = relationship("Booking", back_populates="workspace", cascade="all, delete-orphan")
    conversations = relationship("Conversation", back_populates="workspace", cascade="all, delete-orphan")
    integrations = relationship("Integration", back_populates="workspace", cascade="all, delete-orphan")
