from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime

from ops_platform.models.user import UserRole
from ops_platform.models.workspace import WorkspaceStatus


class WorkspaceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    address: Optional[str] = None
    timezone: str
    contact_email: Optional[str] = None
    status: WorkspaceStatus
    email_connected: bool
    sms_connected: bool
    created_at: datetime


class OnboardingSteps(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    workspace: bool = True
    email_or_sms: bool
    contact_form: bool
    booking_types: bool
    post_booking_forms: bool
    inventory: bool
    staff: bool
    active: bool
    # Not a checklist item in the UI but part of the activation gate
    has_availability: bool


class OnboardingStatus(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    workspace: WorkspaceResponse
    steps: OnboardingSteps
    can_activate: bool


class StaffMember(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    role: UserRole
    full_name: Optional[str] = None
    joined_at: Optional[datetime] = None
