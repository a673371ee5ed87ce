from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import List, Optional
from ops_platform.database import get_db
from ops_platform.dependencies import get_workspace_member, require_owner
from ops_platform.models.user import WorkspaceUser
from ops_platform.schemas.workspace import OnboardingStatus, StaffMember, WorkspaceResponse
from ops_platform.services import onboarding, workspace_service

router = APIRouter()


class WorkspaceUpdate(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    timezone: Optional[str] = None
    contact_email: Optional[str] = None


class EmailIntegrationSetup(BaseModel):
    provider: str = "brevo"
    api_key: Optional[str] = None  # "auto" uses the server's Brevo key
    from_email: Optional[str] = None


class SmsIntegrationSetup(BaseModel):
    provider: str = "twilio"
    account_sid: Optional[str] = None  # "auto" uses the server's Twilio account
    auth_token: Optional[str] = None
    phone_number: Optional[str] = None


class ContactFormSetup(BaseModel):
    name: Optional[str] = None
    fields: Optional[List[dict]] = None
    welcome_message_template: Optional[str] = None


class StaffCreate(BaseModel):
    email: str
    password: str
    full_name: Optional[str] = None


def _contact_form_payload(form) -> dict:
    return {
        "id": form.id,
        "workspace_id": form.workspace_id,
        "name": form.name,
        "fields": form.fields or [],
        "welcome_message_template": form.welcome_message_template,
        "updated_at": form.updated_at,
    }


@router.get("/{workspace_id}", response_model=WorkspaceResponse)
def get_workspace(workspace_id: int, member: WorkspaceUser = Depends(get_workspace_member), db: Session = Depends(get_db)):
    return workspace_service.get_workspace(db, workspace_id)


@router.patch("/{workspace_id}", response_model=WorkspaceResponse)
def update_workspace(
    workspace_id: int,
    data: WorkspaceUpdate,
    owner: WorkspaceUser = Depends(require_owner),
    db: Session = Depends(get_db)
):
    return workspace_service.update_workspace(db, workspace_id, **data.model_dump(exclude_unset=True))


@router.get("/{workspace_id}/onboarding", response_model=OnboardingStatus, response_model_by_alias=True)
def get_onboarding(workspace_id: int, member: WorkspaceUser = Depends(get_workspace_member), db: Session = Depends(get_db)):
    """Checklist state and whether the workspace can go live"""
    return onboarding.get_onboarding_status(db, workspace_id)


@router.post("/{workspace_id}/integrations/email", response_model=WorkspaceResponse)
def connect_email(
    workspace_id: int,
    data: EmailIntegrationSetup,
    owner: WorkspaceUser = Depends(require_owner),
    db: Session = Depends(get_db)
):
    return workspace_service.set_email_integration(
        db, workspace_id, data.provider, api_key=data.api_key, from_email=data.from_email
    )


@router.post("/{workspace_id}/integrations/sms", response_model=WorkspaceResponse)
def connect_sms(
    workspace_id: int,
    data: SmsIntegrationSetup,
    owner: WorkspaceUser = Depends(require_owner),
    db: Session = Depends(get_db)
):
    return workspace_service.set_sms_integration(
        db,
        workspace_id,
        data.provider,
        account_sid=data.account_sid,
        auth_token=data.auth_token,
        phone_number=data.phone_number,
    )


@router.get("/{workspace_id}/contact-form")
def get_contact_form(workspace_id: int, member: WorkspaceUser = Depends(get_workspace_member), db: Session = Depends(get_db)):
    form = workspace_service.get_contact_form(db, workspace_id)
    return _contact_form_payload(form) if form else None


@router.put("/{workspace_id}/contact-form")
def save_contact_form(
    workspace_id: int,
    data: ContactFormSetup,
    owner: WorkspaceUser = Depends(require_owner),
    db: Session = Depends(get_db)
):
    form = workspace_service.upsert_contact_form(
        db,
        workspace_id,
        name=data.name,
        fields=data.fields,
        welcome_message_template=data.welcome_message_template,
    )
    return _contact_form_payload(form)


@router.post("/{workspace_id}/activate", response_model=WorkspaceResponse)
def activate(workspace_id: int, owner: WorkspaceUser = Depends(require_owner), db: Session = Depends(get_db)):
    return onboarding.activate_workspace(db, workspace_id)


@router.get("/{workspace_id}/staff", response_model=List[StaffMember])
def get_staff(workspace_id: int, member: WorkspaceUser = Depends(get_workspace_member), db: Session = Depends(get_db)):
    return workspace_service.list_staff(db, workspace_id)


@router.post("/{workspace_id}/staff", response_model=StaffMember, status_code=status.HTTP_201_CREATED)
def add_staff(
    workspace_id: int,
    data: StaffCreate,
    owner: WorkspaceUser = Depends(require_owner),
    db: Session = Depends(get_db)
):
    return workspace_service.add_staff(db, workspace_id, data.email, data.password, full_name=data.full_name)
