from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from ops_platform.database import get_db
from ops_platform.dependencies import get_workspace_member
from ops_platform.models.user import WorkspaceUser
from ops_platform.schemas.contact import ContactResponse
from ops_platform.services import contacts

router = APIRouter()


@router.get("/{workspace_id}", response_model=List[ContactResponse])
def get_contacts(workspace_id: int, member: WorkspaceUser = Depends(get_workspace_member), db: Session = Depends(get_db)):
    return contacts.list_contacts(db, workspace_id)


@router.get("/{workspace_id}/{contact_id}", response_model=ContactResponse)
def get_contact(
    workspace_id: int,
    contact_id: int,
    member: WorkspaceUser = Depends(get_workspace_member),
    db: Session = Depends(get_db)
):
    return contacts.get_contact(db, workspace_id, contact_id)
