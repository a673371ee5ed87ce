import logging
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ops_platform.config import settings
from ops_platform.errors import InvalidInput, NotFound, Unauthorized
from ops_platform.models.integration import Integration, IntegrationType
from ops_platform.models.user import UserRole, WorkspaceUser
from ops_platform.models.workspace import Workspace, WorkspaceStatus
from ops_platform.services.workspace_service import validate_timezone
from ops_platform.utils.security import create_access_token, get_password_hash, verify_password

logger = logging.getLogger(__name__)


def _token_for(user: WorkspaceUser) -> str:
    return create_access_token(
        data={"sub": str(user.id), "workspace_id": user.workspace_id, "role": user.role.value},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def _session_payload(user: WorkspaceUser, workspace: Workspace) -> dict:
    return {
        "access_token": _token_for(user),
        "token_type": "bearer",
        "user": {
            "id": user.id,
            "email": user.email,
            "full_name": user.full_name,
            "role": user.role.value,
            "workspace_id": user.workspace_id,
        },
        "workspace": {
            "id": workspace.id,
            "name": workspace.name,
            "status": workspace.status.value,
        },
    }


def _auto_integrations(workspace: Workspace) -> list[Integration]:
    """Server-wide provider credentials connect new workspaces out of the box."""
    integrations = []
    if settings.BREVO_API_KEY:
        integrations.append(Integration(
            type=IntegrationType.EMAIL,
            provider="brevo",
            config={
                "api_key": settings.BREVO_API_KEY,
                "from_email": settings.DEFAULT_FROM_EMAIL,
                "from_name": workspace.name,
            },
            is_active=True,
        ))
        workspace.email_connected = True

    if settings.TWILIO_ACCOUNT_SID and settings.TWILIO_AUTH_TOKEN and settings.TWILIO_PHONE_NUMBER:
        integrations.append(Integration(
            type=IntegrationType.SMS,
            provider="twilio",
            config={
                "account_sid": settings.TWILIO_ACCOUNT_SID,
                "auth_token": settings.TWILIO_AUTH_TOKEN,
                "phone": settings.TWILIO_PHONE_NUMBER,
            },
            is_active=True,
        ))
        workspace.sms_connected = True
    return integrations


def register_owner(
    db: Session,
    email: str,
    password: str,
    workspace_name: str,
    full_name: Optional[str] = None,
    address: Optional[str] = None,
    timezone: Optional[str] = None,
) -> dict:
    """Sign up: a draft workspace and its owner are created together."""
    if db.query(WorkspaceUser.id).filter(WorkspaceUser.email == email).first():
        raise InvalidInput("Email already registered")
    if not workspace_name or not workspace_name.strip():
        raise InvalidInput("Workspace name is required")

    workspace = Workspace(
        name=workspace_name.strip(),
        address=address,
        timezone=validate_timezone(timezone or "UTC"),
        status=WorkspaceStatus.DRAFT,
    )
    workspace.integrations = _auto_integrations(workspace)
    db.add(workspace)
    db.flush()

    user = WorkspaceUser(
        workspace_id=workspace.id,
        email=email,
        hashed_password=get_password_hash(password),
        full_name=full_name,
        role=UserRole.OWNER,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    db.refresh(workspace)

    logger.info(f"Registered owner {user.id} for new workspace {workspace.id}")
    return _session_payload(user, workspace)


def login(db: Session, email: str, password: str) -> dict:
    user = db.query(WorkspaceUser).filter(WorkspaceUser.email == email).first()
    if not user or not verify_password(password, user.hashed_password):
        raise Unauthorized("Invalid email or password")
    if not user.is_active:
        raise Unauthorized("User account is inactive")

    return _session_payload(user, user.workspace)


def get_me(db: Session, user_id: int) -> dict:
    user = db.query(WorkspaceUser).filter(WorkspaceUser.id == user_id).first()
    if not user:
        raise NotFound("User not found")

    workspace = user.workspace
    return {
        "user": {
            "id": user.id,
            "email": user.email,
            "full_name": user.full_name,
            "role": user.role.value,
            "workspace_id": user.workspace_id,
        },
        "workspace": {
            "id": workspace.id,
            "name": workspace.name,
            "status": workspace.status.value,
            "timezone": workspace.timezone,
        },
    }
