from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Boolean
from sqlalchemy.orm import relationship
from ops_platform.database import Base, utcnow


class BookingType(Base):
    __tablename__ = "booking_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    location = Column(Text)
    is_online = Column(Boolean, nullable=False, default=False)

    workspace_id = Column(Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    workspace = relationship("Workspace", back_populates="booking_types")
    bookings = relationship("Booking", back_populates="booking_type")
