from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import List, Optional
from ops_platform.database import get_db
from ops_platform.dependencies import get_workspace_member, require_owner
from ops_platform.models.form import FormStatus
from ops_platform.models.user import WorkspaceUser
from ops_platform.services import forms_service

router = APIRouter()


class FormTemplateCreate(BaseModel):
    name: str
    description: Optional[str] = None
    fields: List[dict] = []
    # None sends the form after every booking type
    linked_booking_type_id: Optional[int] = None


@router.get("/{workspace_id}/templates")
def get_templates(workspace_id: int, member: WorkspaceUser = Depends(get_workspace_member), db: Session = Depends(get_db)):
    return forms_service.list_form_templates(db, workspace_id)


@router.post("/{workspace_id}/templates", status_code=status.HTTP_201_CREATED)
def create_template(
    workspace_id: int,
    data: FormTemplateCreate,
    owner: WorkspaceUser = Depends(require_owner),
    db: Session = Depends(get_db)
):
    template = forms_service.create_form_template(
        db,
        workspace_id,
        name=data.name,
        description=data.description,
        fields=data.fields,
        linked_booking_type_id=data.linked_booking_type_id,
    )
    return {
        "id": template.id,
        "name": template.name,
        "description": template.description,
        "fields": template.fields,
        "linked_booking_type_id": template.linked_booking_type_id,
        "created_at": template.created_at,
    }


@router.get("/{workspace_id}/submissions")
def get_submissions(
    workspace_id: int,
    status: Optional[FormStatus] = None,
    member: WorkspaceUser = Depends(get_workspace_member),
    db: Session = Depends(get_db)
):
    return forms_service.list_form_submissions(db, workspace_id, status=status)


@router.get("/{workspace_id}/submissions/{submission_id}")
def get_submission(
    workspace_id: int,
    submission_id: int,
    member: WorkspaceUser = Depends(get_workspace_member),
    db: Session = Depends(get_db)
):
    return forms_service.get_form_submission(db, workspace_id, submission_id)
