from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
import enum
from ops_platform.database import Base, utcnow, value_enum


class UserRole(str, enum.Enum):
    OWNER = "owner"
    STAFF = "staff"


class WorkspaceUser(Base):
    __tablename__ = "workspace_users"

    id = Column(Integer, primary_key=True, index=True)
    # Login has no workspace selector, so email is unique across all tenants
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(255))
    role = Column(value_enum(UserRole), nullable=False, default=UserRole.STAFF)
    is_active = Column(Boolean, default=True)

    workspace_id = Column(Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False)
    joined_at = Column(DateTime, default=utcnow)

    # Relationships
    workspace = relationship("Workspace", back_populates="users")
