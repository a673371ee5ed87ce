import logging
from typing import Optional

import sib_api_v3_sdk
from sib_api_v3_sdk.rest import ApiException

from ops_platform.config import settings

logger = logging.getLogger(__name__)


def send_email(config: dict, to_email: str, subject: str, html_content: str, from_email: Optional[str] = None) -> dict:
    """Send one transactional email through Brevo (SendInBlue).

    ``config`` is the workspace's email Integration config:
    ``api_key``, ``from_email``, ``from_name``.
    """
    api_key = config.get("api_key") or settings.BREVO_API_KEY
    if not api_key:
        return {"success": False, "error": "Brevo API key not configured"}

    configuration = sib_api_v3_sdk.Configuration()
    configuration.api_key["api-key"] = api_key

    api_instance = sib_api_v3_sdk.TransactionalEmailsApi(sib_api_v3_sdk.ApiClient(configuration))

    if not from_email:
        from_email = config.get("from_email", settings.DEFAULT_FROM_EMAIL)
    from_name = config.get("from_name", "Appointments")

    try:
        send_smtp_email = sib_api_v3_sdk.SendSmtpEmail(
            to=[{"email": to_email}],
            sender={"name": from_name, "email": from_email},
            subject=subject,
            html_content=html_content,
        )

        response = api_instance.send_transac_email(send_smtp_email)

        logger.info(f"Email sent via Brevo to {to_email}")

        return {
            "success": True,
            "message_id": response.message_id,
        }
    except ApiException as e:
        logger.warning(f"Brevo rejected email to {to_email}: {e.reason}")
        return {
            "success": False,
            "error": str(e.reason or e),
        }
