from sqlalchemy import Column, Integer, String, ForeignKey, Index
from ops_platform.database import Base


class AvailabilityWindow(Base):
    """Weekly recurring window, wall-clock times in the workspace timezone.

    booking_type_id NULL means the window applies to every booking type.
    """
    __tablename__ = "availability"

    id = Column(Integer, primary_key=True, index=True)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday .. 6 = Saturday
    start_time = Column(String(5), nullable=False)  # "HH:MM"
    end_time = Column(String(5), nullable=False)

    workspace_id = Column(Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False)
    booking_type_id = Column(Integer, ForeignKey("booking_types.id", ondelete="CASCADE"), nullable=True)

    __table_args__ = (
        Index("ix_availability_workspace_day", "workspace_id", "day_of_week"),
    )
