from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ops_platform.database import get_db
from ops_platform.errors import Forbidden, NotFound, Unauthorized
from ops_platform.models.user import UserRole, WorkspaceUser
from ops_platform.utils.security import decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> WorkspaceUser:
    """Resolve the bearer token to an active workspace user."""
    if credentials is None:
        raise Unauthorized("Missing or invalid authorization")

    payload = decode_access_token(credentials.credentials)
    if not payload or "sub" not in payload:
        raise Unauthorized("Invalid or expired token")

    user = db.query(WorkspaceUser).filter(WorkspaceUser.id == int(payload["sub"])).first()
    if not user or not user.is_active:
        raise Unauthorized("Invalid or expired token")
    return user


def get_workspace_member(
    workspace_id: int,
    user: WorkspaceUser = Depends(get_current_user),
) -> WorkspaceUser:
    # Another tenant's workspace looks exactly like a missing one
    if user.workspace_id != workspace_id:
        raise NotFound("Workspace not found")
    return user


def require_owner(member: WorkspaceUser = Depends(get_workspace_member)) -> WorkspaceUser:
    if member.role != UserRole.OWNER:
        raise Forbidden("Insufficient permissions")
    return member
