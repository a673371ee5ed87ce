"""Onboarding checklist and the draft -> active gate.

Nothing is cached: every call recounts the workspace's rows, so the status
always reflects the current configuration. Only three checks gate
activation; the others are shown in the checklist but never block it.
"""

import logging

from sqlalchemy.orm import Session

from ops_platform.errors import InvalidState, NotFound
from ops_platform.models.availability import AvailabilityWindow
from ops_platform.models.booking_type import BookingType
from ops_platform.models.form import ContactForm, FormTemplate
from ops_platform.models.inventory import InventoryItem
from ops_platform.models.user import UserRole, WorkspaceUser
from ops_platform.models.workspace import Workspace, WorkspaceStatus
from ops_platform.schemas.workspace import OnboardingStatus, OnboardingSteps, WorkspaceResponse

logger = logging.getLogger(__name__)

ACTIVATION_GATE_MESSAGE = (
    "Cannot activate: connect at least one communication channel, "
    "add a booking type, and set availability."
)


def _exists(db: Session, model, workspace_id: int, *criteria) -> bool:
    return db.query(model.id).filter(model.workspace_id == workspace_id, *criteria).first() is not None


def _get_workspace(db: Session, workspace_id: int) -> Workspace:
    workspace = db.query(Workspace).filter(Workspace.id == workspace_id).first()
    if not workspace:
        raise NotFound("Workspace not found")
    return workspace


def get_onboarding_status(db: Session, workspace_id: int) -> OnboardingStatus:
    workspace = _get_workspace(db, workspace_id)

    steps = OnboardingSteps(
        workspace=True,
        email_or_sms=bool(workspace.email_connected or workspace.sms_connected),
        contact_form=_exists(db, ContactForm, workspace_id),
        booking_types=_exists(db, BookingType, workspace_id),
        post_booking_forms=_exists(db, FormTemplate, workspace_id),
        inventory=_exists(db, InventoryItem, workspace_id),
        staff=_exists(db, WorkspaceUser, workspace_id, WorkspaceUser.role == UserRole.STAFF),
        active=workspace.status == WorkspaceStatus.ACTIVE,
        has_availability=_exists(db, AvailabilityWindow, workspace_id),
    )
    can_activate = steps.email_or_sms and steps.booking_types and steps.has_availability

    return OnboardingStatus(
        workspace=WorkspaceResponse.model_validate(workspace),
        steps=steps,
        can_activate=can_activate,
    )


def activate_workspace(db: Session, workspace_id: int) -> Workspace:
    """Flip the workspace to active. Re-activating an active workspace is a no-op write."""
    status = get_onboarding_status(db, workspace_id)
    if not status.can_activate:
        raise InvalidState(ACTIVATION_GATE_MESSAGE)

    workspace = _get_workspace(db, workspace_id)
    workspace.status = WorkspaceStatus.ACTIVE
    db.commit()
    db.refresh(workspace)
    logger.info(f"Workspace {workspace_id} activated")
    return workspace
