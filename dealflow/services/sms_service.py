"""SMS and WhatsApp delivery via the Twilio Messages API."""

from __future__ import annotations

import logging

import httpx

from dealflow.core.config import settings
from dealflow.db.enums import MessageChannel
from dealflow.services import http_client

logger = logging.getLogger(__name__)


def _sender_number(channel: MessageChannel) -> str:
    if channel == MessageChannel.WHATSAPP:
        return settings.TWILIO_WHATSAPP_NUMBER or settings.TWILIO_PHONE_NUMBER
    return settings.TWILIO_PHONE_NUMBER


def _address(number: str, channel: MessageChannel) -> str:
    if channel == MessageChannel.WHATSAPP and not number.startswith("whatsapp:"):
        return f"whatsapp:{number}"
    return number


def send_sms(
    *,
    to_number: str,
    body: str,
    channel: MessageChannel = MessageChannel.SMS,
) -> dict:
    """
    Send one text message.

    Returns {"success": bool, "message_id": str | None, "error": str | None}.
    Never raises for transport or provider errors.
    """
    from_number = _sender_number(channel)
    if not settings.sms_configured or not from_number:
        logger.info("[DRY RUN] %s to %s skipped (Twilio not configured)", channel.value, to_number)
        return {"success": False, "message_id": None, "error": "SMS sender not configured"}

    url = (
        f"{settings.TWILIO_API_BASE_URL}/Accounts/"
        f"{settings.TWILIO_ACCOUNT_SID}/Messages.json"
    )
    form = {
        "To": _address(to_number, channel),
        "From": _address(from_number, channel),
        "Body": body,
    }

    try:
        with http_client.build_client() as client:
            response = client.post(
                url,
                data=form,
                auth=(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN),
            )
    except httpx.HTTPError as exc:
        logger.warning("Twilio request failed for %s: %s", to_number, exc)
        return {"success": False, "message_id": None, "error": f"Twilio request failed: {exc}"}

    if 200 <= response.status_code < 300:
        message_id = None
        try:
            message_id = response.json().get("sid")
        except ValueError:
            pass
        return {"success": True, "message_id": message_id, "error": None}

    detail = http_client.error_detail(response)
    error = f"Twilio API error: {response.status_code}"
    if detail:
        error = f"{error} ({detail})"
    logger.warning("%s to %s failed: %s", channel.value, to_number, error)
    return {"success": False, "message_id": None, "error": error}
