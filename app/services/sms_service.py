"""
SMS notifications via the Twilio Messages REST API.

Best effort only: an unconfigured gateway is a normal operating mode, and a
failed send is logged and reported as False, never raised.
"""

import httpx
from app.config import settings
from app.utils.logger import get_logger
from app.utils.phone import mask_phone_number

logger = get_logger(__name__)


def _messages_url() -> str:
    return f"{settings.TWILIO_API_URL.rstrip('/')}/Accounts/{settings.TWILIO_ACCOUNT_SID}/Messages.json"


async def send_sms(phone_number: str, message: str) -> bool:
    """Send one text message. Returns True when the gateway accepted it."""
    if not settings.SMS_ENABLED:
        logger.info("Twilio not configured, skipping SMS")
        return False

    try:
        async with httpx.AsyncClient(
            auth=(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN),
            timeout=settings.SMS_TIMEOUT_SECONDS,
        ) as client:
            resp = await client.post(_messages_url(), data={
                "To": phone_number,
                "From": settings.TWILIO_PHONE_NUMBER,
                "Body": message,
            })
        if resp.status_code >= 300:
            logger.warning(f"SMS to {mask_phone_number(phone_number)} rejected: HTTP {resp.status_code} {resp.text[:200]}")
            return False
        logger.info(f"SMS sent successfully to {mask_phone_number(phone_number)}")
        return True
    except httpx.HTTPError as e:
        logger.error(f"Error sending SMS to {mask_phone_number(phone_number)}: {e}")
        return False
