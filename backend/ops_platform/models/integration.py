from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, Boolean, Text, UniqueConstraint
from sqlalchemy.orm import relationship
import enum
from ops_platform.database import Base, utcnow, value_enum

class IntegrationType(str, enum.Enum):
    EMAIL = "email"
    SMS = "sms"

class Integration(Base):
    __tablename__ = "integrations"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(value_enum(IntegrationType), nullable=False)
    provider = Column(String(100))  # "brevo", "twilio", "mock"
    config = Column(JSON)  # Provider credentials, opaque to the core
    is_active = Column(Boolean, default=True)
    last_error = Column(Text)

    workspace_id = Column(Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    workspace = relationship("Workspace", back_populates="integrations")

    __table_args__ = (
        UniqueConstraint("workspace_id", "type", name="uq_integration_workspace_type"),
    )


class IntegrationLog(Base):
    """One row per delivery attempt, successful or not."""
    __tablename__ = "integration_logs"

    id = Column(Integer, primary_key=True, index=True)
    integration_type = Column(String(20), nullable=False)
    event = Column(String(50), nullable=False)
    success = Column(Boolean, nullable=False)
    error_message = Column(Text)
    # "metadata" is reserved on declarative classes
    details = Column("metadata", JSON)

    workspace_id = Column(Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow)
