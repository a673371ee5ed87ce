import logging
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ops_platform.config import settings
from ops_platform.errors import InvalidInput, NotFound
from ops_platform.models.form import DEFAULT_CONTACT_FORM_FIELDS, ContactForm
from ops_platform.models.integration import Integration, IntegrationType
from ops_platform.models.user import UserRole, WorkspaceUser
from ops_platform.models.workspace import Workspace
from ops_platform.utils.security import get_password_hash

logger = logging.getLogger(__name__)

EMAIL_PROVIDERS = ("brevo", "mock")
SMS_PROVIDERS = ("twilio", "mock")

# Use the server-wide credential from settings instead of a per-workspace one
AUTO_CREDENTIAL = "auto"


def validate_timezone(name: str) -> str:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise InvalidInput(f"Unknown timezone: {name}")
    return name


def get_workspace(db: Session, workspace_id: int) -> Workspace:
    workspace = db.query(Workspace).filter(Workspace.id == workspace_id).first()
    if not workspace:
        raise NotFound("Workspace not found")
    return workspace


def resolve_workspace_ref(db: Session, ref: str) -> Workspace:
    """Public pages address a workspace by numeric id or by its exact name."""
    criteria = [Workspace.name == ref]
    if ref.isdigit():
        criteria.append(Workspace.id == int(ref))
    workspace = db.query(Workspace).filter(or_(*criteria)).order_by(Workspace.id).first()
    if not workspace:
        raise NotFound("Workspace not found")
    return workspace


def update_workspace(
    db: Session,
    workspace_id: int,
    name: Optional[str] = None,
    address: Optional[str] = None,
    timezone: Optional[str] = None,
    contact_email: Optional[str] = None,
) -> Workspace:
    """Only the supplied fields change."""
    workspace = get_workspace(db, workspace_id)

    if name is not None:
        if not name.strip():
            raise InvalidInput("Workspace name is required")
        workspace.name = name.strip()
    if address is not None:
        workspace.address = address
    if timezone is not None:
        workspace.timezone = validate_timezone(timezone)
    if contact_email is not None:
        workspace.contact_email = contact_email

    db.commit()
    db.refresh(workspace)
    return workspace


def _upsert_integration(db: Session, workspace_id: int, channel: IntegrationType, provider: str, config: dict) -> None:
    integration = db.query(Integration).filter(
        Integration.workspace_id == workspace_id,
        Integration.type == channel,
    ).first()

    if integration:
        integration.provider = provider
        integration.config = config
        integration.is_active = True
        integration.last_error = None
    else:
        db.add(Integration(
            workspace_id=workspace_id,
            type=channel,
            provider=provider,
            config=config,
            is_active=True,
        ))


def set_email_integration(
    db: Session,
    workspace_id: int,
    provider: str,
    api_key: Optional[str] = None,
    from_email: Optional[str] = None,
) -> Workspace:
    workspace = get_workspace(db, workspace_id)
    if provider not in EMAIL_PROVIDERS:
        raise InvalidInput(f"Unsupported email provider: {provider}")

    if api_key == AUTO_CREDENTIAL:
        api_key = settings.BREVO_API_KEY
    if provider == "brevo" and not api_key:
        raise InvalidInput("An API key is required for Brevo")

    _upsert_integration(db, workspace_id, IntegrationType.EMAIL, provider, {
        "api_key": api_key,
        "from_email": from_email or settings.DEFAULT_FROM_EMAIL,
        "from_name": workspace.name,
    })
    workspace.email_connected = True
    db.commit()
    db.refresh(workspace)

    logger.info(f"Email integration ({provider}) connected for workspace {workspace_id}")
    return workspace


def set_sms_integration(
    db: Session,
    workspace_id: int,
    provider: str,
    account_sid: Optional[str] = None,
    auth_token: Optional[str] = None,
    phone_number: Optional[str] = None,
) -> Workspace:
    workspace = get_workspace(db, workspace_id)
    if provider not in SMS_PROVIDERS:
        raise InvalidInput(f"Unsupported SMS provider: {provider}")

    if account_sid == AUTO_CREDENTIAL:
        account_sid = settings.TWILIO_ACCOUNT_SID
        auth_token = settings.TWILIO_AUTH_TOKEN
        phone_number = phone_number or settings.TWILIO_PHONE_NUMBER
    if provider == "twilio" and not (account_sid and auth_token and phone_number):
        raise InvalidInput("Account SID, auth token and phone number are required for Twilio")

    _upsert_integration(db, workspace_id, IntegrationType.SMS, provider, {
        "account_sid": account_sid,
        "auth_token": auth_token,
        "phone": phone_number,
    })
    workspace.sms_connected = True
    db.commit()
    db.refresh(workspace)

    logger.info(f"SMS integration ({provider}) connected for workspace {workspace_id}")
    return workspace


def upsert_contact_form(
    db: Session,
    workspace_id: int,
    name: Optional[str] = None,
    fields: Optional[list] = None,
    welcome_message_template: Optional[str] = None,
) -> ContactForm:
    """Create or fully replace the workspace's contact form; omitted values reset to defaults."""
    get_workspace(db, workspace_id)

    form = db.query(ContactForm).filter(ContactForm.workspace_id == workspace_id).first()
    if not form:
        form = ContactForm(workspace_id=workspace_id)
        db.add(form)

    form.name = name or "Contact"
    form.fields = fields if fields is not None else list(DEFAULT_CONTACT_FORM_FIELDS)
    form.welcome_message_template = welcome_message_template or ""
    db.commit()
    db.refresh(form)
    return form


def get_contact_form(db: Session, workspace_id: int) -> Optional[ContactForm]:
    return db.query(ContactForm).filter(ContactForm.workspace_id == workspace_id).first()


def list_staff(db: Session, workspace_id: int) -> list[WorkspaceUser]:
    return db.query(WorkspaceUser).filter(
        WorkspaceUser.workspace_id == workspace_id,
        WorkspaceUser.role == UserRole.STAFF,
    ).order_by(WorkspaceUser.joined_at.desc(), WorkspaceUser.id.desc()).all()


def add_staff(
    db: Session,
    workspace_id: int,
    email: str,
    password: str,
    full_name: Optional[str] = None,
) -> WorkspaceUser:
    get_workspace(db, workspace_id)
    # Email is the login key across every workspace
    if db.query(WorkspaceUser.id).filter(WorkspaceUser.email == email).first():
        raise InvalidInput("A user with this email already exists")

    staff = WorkspaceUser(
        workspace_id=workspace_id,
        email=email,
        hashed_password=get_password_hash(password),
        full_name=full_name,
        role=UserRole.STAFF,
    )
    db.add(staff)
    db.commit()
    db.refresh(staff)

    logger.info(f"Staff user {staff.id} added to workspace {workspace_id}")
    return staff
