from sqlalchemy import Column, Integer, DateTime, ForeignKey, Text, Index, text
from sqlalchemy.orm import relationship
import enum
from ops_platform.database import Base, utcnow, value_enum

class BookingStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    NO_SHOW = "no_show"
    CANCELLED = "cancelled"

class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    scheduled_at = Column(DateTime, nullable=False)  # UTC
    status = Column(value_enum(BookingStatus), nullable=False, default=BookingStatus.CONFIRMED)
    notes = Column(Text)
    reminder_sent_at = Column(DateTime, nullable=True)

    contact_id = Column(Integer, ForeignKey("contacts.id", ondelete="CASCADE"), nullable=False)
    booking_type_id = Column(Integer, ForeignKey("booking_types.id", ondelete="CASCADE"), nullable=False)
    workspace_id = Column(Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    contact = relationship("Contact", back_populates="bookings")
    booking_type = relationship("BookingType", back_populates="bookings")
    workspace = relationship("Workspace", back_populates="bookings")
    form_submissions = relationship("FormSubmission", back_populates="booking", cascade="all, delete-orphan")

    __table_args__ = (
        # One live booking per exact slot; cancelled rows free the slot again
        Index(
            "uq_bookings_live_slot",
            "workspace_id",
            "booking_type_id",
            "scheduled_at",
            unique=True,
            postgresql_where=text("status <> 'cancelled'"),
            sqlite_where=text("status <> 'cancelled'"),
        ),
    )
