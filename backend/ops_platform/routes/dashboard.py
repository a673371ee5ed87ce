from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ops_platform.database import get_db
from ops_platform.dependencies import get_workspace_member
from ops_platform.models.user import WorkspaceUser
from ops_platform.services import dashboard_service

router = APIRouter()


@router.get("/{workspace_id}")
def get_dashboard(workspace_id: int, member: WorkspaceUser = Depends(get_workspace_member), db: Session = Depends(get_db)):
    return dashboard_service.get_dashboard(db, workspace_id)


@router.get("/{workspace_id}/nav-counts")
def get_nav_counts(workspace_id: int, member: WorkspaceUser = Depends(get_workspace_member), db: Session = Depends(get_db)):
    """Sidebar badges: unread conversations and confirmed bookings"""
    return dashboard_service.get_nav_counts(db, workspace_id)
