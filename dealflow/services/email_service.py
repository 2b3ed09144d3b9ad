"""Transactional email via the Resend API.

Single attempt per message; callers treat a failed result as log-and-continue.
"""

from __future__ import annotations

import logging

import httpx

from dealflow.core.config import settings
from dealflow.services import http_client

logger = logging.getLogger(__name__)


def email_configured() -> bool:
    return bool(settings.RESEND_API_KEY)


def send_email(*, to_email: str, subject: str, html: str) -> dict:
    """
    Send one email.

    Returns {"success": bool, "message_id": str | None, "error": str | None}.
    Never raises for transport or provider errors.
    """
    if not email_configured():
        logger.info("[DRY RUN] Email to %s skipped (RESEND_API_KEY not set): %s", to_email, subject)
        return {"success": False, "message_id": None, "error": "Email sender not configured"}

    payload = {
        "from": settings.EMAIL_FROM,
        "to": [to_email],
        "subject": subject,
        "html": html,
    }
    headers = {
        "Authorization": f"Bearer {settings.RESEND_API_KEY}",
        "Content-Type": "application/json",
    }

    try:
        with http_client.build_client() as client:
            response = client.post(settings.RESEND_API_URL, headers=headers, json=payload)
    except httpx.HTTPError as exc:
        logger.warning("Resend request failed for %s: %s", to_email, exc)
        return {"success": False, "message_id": None, "error": f"Resend request failed: {exc}"}

    if 200 <= response.status_code < 300:
        message_id = None
        try:
            message_id = response.json().get("id")
        except ValueError:
            pass
        return {"success": True, "message_id": message_id, "error": None}

    detail = http_client.error_detail(response)
    error = f"Resend API error: {response.status_code}"
    if detail:
        error = f"{error} ({detail})"
    logger.warning("Email to %s failed: %s", to_email, error)
    return {"success": False, "message_id": None, "error": error}
