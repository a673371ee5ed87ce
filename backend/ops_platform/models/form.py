from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, JSON
from sqlalchemy.orm import relationship
import enum
from ops_platform.database import Base, utcnow, value_enum


class FormStatus(str, enum.Enum):
    PENDING = "pending"
    OVERDUE = "overdue"
    COMPLETED = "completed"


DEFAULT_CONTACT_FORM_FIELDS = [
    {"name": "name", "type": "text", "label": "Full Name"},
    {"name": "email", "type": "email", "label": "Email"},
    {"name": "message", "type": "textarea", "label": "Message"},
]


class ContactForm(Base):
    """Public lead form, one per workspace."""
    __tablename__ = "contact_forms"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, default="Contact")
    fields = Column(JSON, nullable=False, default=list)
    welcome_message_template = Column(Text, nullable=False, default="")

    workspace_id = Column(Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), unique=True, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)


class FormTemplate(Base):
    """Post-booking form. linked_booking_type_id NULL applies to all types."""
    __tablename__ = "form_templates"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    fields = Column(JSON, nullable=False, default=list)  # [{name, type, label}]

    workspace_id = Column(Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True)
    linked_booking_type_id = Column(Integer, ForeignKey("booking_types.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    linked_booking_type = relationship("BookingType")
    submissions = relationship("FormSubmission", back_populates="form_template", cascade="all, delete-orphan")


class FormSubmission(Base):
    __tablename__ = "form_submissions"

    id = Column(Integer, primary_key=True, index=True)
    status = Column(value_enum(FormStatus), nullable=False, default=FormStatus.PENDING)
    data = Column(JSON, nullable=True)
    due_at = Column(DateTime)
    sent_at = Column(DateTime)
    completed_at = Column(DateTime)

    workspace_id = Column(Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False)
    form_template_id = Column(Integer, ForeignKey("form_templates.id", ondelete="CASCADE"), nullable=False)
    contact_id = Column(Integer, ForeignKey("contacts.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    form_template = relationship("FormTemplate", back_populates="submissions")
    booking = relationship("Booking", back_populates="form_submissions")
    contact = relationship("Contact")
