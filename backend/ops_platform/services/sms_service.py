import logging

from twilio.base.exceptions import TwilioException
from twilio.rest import Client

logger = logging.getLogger(__name__)

# Single-segment SMS
SMS_MAX_LENGTH = 160


def send_sms(config: dict, to_phone: str, message: str) -> dict:
    """Send an SMS through Twilio using the workspace's SMS Integration config.

    Expected keys: ``account_sid``, ``auth_token``, ``phone``.
    """
    account_sid = config.get("account_sid")
    auth_token = config.get("auth_token")
    from_phone = config.get("phone")

    if not account_sid or not auth_token:
        return {"success": False, "error": "Twilio credentials not configured"}

    try:
        client = Client(account_sid, auth_token)

        sms = client.messages.create(
            body=message,
            from_=from_phone,
            to=to_phone
        )

        logger.info(f"SMS sent via Twilio to {to_phone}")

        return {
            "success": True,
            "sid": sms.sid,
        }
    except TwilioException as e:
        logger.warning(f"Twilio rejected SMS to {to_phone}: {e}")
        return {
            "success": False,
            "error": str(e)
        }
