"""Notification capability: deliver a message to an address on a channel.

Every attempt is logged to ``integration_logs`` and failures are recorded on
the integration's ``last_error``. ``deliver`` never raises for provider
problems; it reports them in the returned ``DeliveryResult``.
"""

import logging
import uuid
from typing import Callable, Optional

from pydantic import BaseModel
from sqlalchemy.orm import Session

from ops_platform.models.integration import Integration, IntegrationLog, IntegrationType
from ops_platform.services.email_service import send_email
from ops_platform.services.sms_service import SMS_MAX_LENGTH, send_sms

logger = logging.getLogger(__name__)


class DeliveryResult(BaseModel):
    success: bool
    external_id: Optional[str] = None
    error: Optional[str] = None


Notifier = Callable[..., DeliveryResult]


def _send_via_provider(integration: Integration, channel: IntegrationType, to: str, body: str, subject: Optional[str]) -> dict:
    provider = integration.provider
    config = integration.config or {}

    if provider == "mock":
        logger.info(f"[MOCK {channel.value.upper()}] to={to} subject={subject!r}")
        return {"success": True, "external_id": f"mock-{uuid.uuid4().hex[:12]}"}

    if channel == IntegrationType.EMAIL and provider == "brevo":
        result = send_email(config, to_email=to, subject=subject or "Message", html_content=body)
        return {"success": result["success"], "external_id": result.get("message_id"), "error": result.get("error")}

    if channel == IntegrationType.SMS and provider == "twilio":
        result = send_sms(config, to_phone=to, message=body[:SMS_MAX_LENGTH])
        return {"success": result["success"], "external_id": result.get("sid"), "error": result.get("error")}

    return {"success": False, "error": f"Unknown {channel.value} provider: {provider}"}


def _log_attempt(db: Session, workspace_id: int, channel: IntegrationType, result: DeliveryResult,
                 integration: Optional[Integration] = None) -> None:
    db.add(IntegrationLog(
        workspace_id=workspace_id,
        integration_type=channel.value,
        event="send",
        success=result.success,
        error_message=result.error,
        details={"external_id": result.external_id} if result.external_id else {},
    ))
    if integration is not None:
        integration.last_error = None if result.success else result.error
    db.commit()


def deliver(db: Session, workspace_id: int, channel: IntegrationType, to: str, body: str,
            subject: Optional[str] = None) -> DeliveryResult:
    """Attempt delivery through the workspace's active integration for ``channel``."""
    integration = db.query(Integration).filter(
        Integration.workspace_id == workspace_id,
        Integration.type == channel,
        Integration.is_active == True,  # noqa: E712
    ).first()

    if not integration:
        result = DeliveryResult(success=False, error=f"No {channel.value} integration configured")
        _log_attempt(db, workspace_id, channel, result)
        return result

    try:
        outcome = _send_via_provider(integration, channel, to, body, subject)
    except Exception as e:
        # Network and SDK errors count as a failed attempt
        logger.warning(f"{channel.value} delivery to {to} raised: {e}")
        outcome = {"success": False, "error": str(e)}

    result = DeliveryResult(**outcome)
    _log_attempt(db, workspace_id, channel, result, integration)
    return result


def send_best_effort(notifier: Notifier, db: Session, workspace_id: int, channel: IntegrationType,
                     to: str, body: str, subject: Optional[str] = None) -> bool:
    """Optional side effect: the outcome is logged, never raised. Returns whether it was delivered."""
    try:
        result = notifier(db, workspace_id, channel, to, body, subject=subject)
    except Exception as e:
        db.rollback()
        logger.warning(f"Best-effort {channel.value} to {to} failed: {e}")
        return False

    if result.success:
        logger.info(f"Best-effort {channel.value} delivered to {to}")
    else:
        logger.warning(f"Best-effort {channel.value} to {to} not delivered: {result.error}")
    return result.success
