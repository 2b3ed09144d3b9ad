"""
Internal endpoints for scheduled/cron operations.

Protected by X-Internal-Secret header.
Call from an external cron; runs may overlap safely.
"""

import logging

from fastapi import APIRouter, Header, HTTPException
from pydantic import BaseModel

from dealflow.core.config import settings
from dealflow.db.session import SessionLocal
from dealflow.services import callback_reminder_service, idle_deal_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/internal/scheduled", tags=["internal"])


def verify_internal_secret(x_internal_secret: str = Header(...)):
    """Verify the internal secret header."""
    expected = settings.INTERNAL_SECRET
    if not expected:
        raise HTTPException(status_code=501, detail="INTERNAL_SECRET not configured")
    if x_internal_secret != expected:
        raise HTTPException(status_code=403, detail="Invalid internal secret")


class IdleDealScanResponse(BaseModel):
    idle_deals_found: int
    notifications_created: int
    tasks_created: int
    errors: list[dict] = []


class CallbackReminderResponse(BaseModel):
    processed: int
    errors: list[dict] = []


@router.post("/idle-deals", response_model=IdleDealScanResponse)
def scan_idle_deals(x_internal_secret: str = Header(...)):
    """
    Daily sweep for deals stuck in an active status.

    Each idle deal gets client/broker warnings and a review task, at most
    once per threshold window.
    """
    verify_internal_secret(x_internal_secret)

    with SessionLocal() as db:
        stats = idle_deal_service.process_idle_deals(db)

    logger.info(
        "Idle deal scan: found=%s notifications=%s tasks=%s errors=%s",
        stats["idle_deals_found"],
        stats["notifications_created"],
        stats["tasks_created"],
        len(stats["errors"]),
    )
    return IdleDealScanResponse(**stats)


@router.post("/callback-reminders", response_model=CallbackReminderResponse)
def send_callback_reminders(x_internal_secret: str = Header(...)):
    """
    Frequent sweep (every few minutes) for staged callback reminders.
    """
    verify_internal_secret(x_internal_secret)

    with SessionLocal() as db:
        stats = callback_reminder_service.process_callback_reminders(db)

    logger.info(
        "Callback reminders: processed=%s errors=%s", stats["processed"], len(stats["errors"])
    )
    return CallbackReminderResponse(**stats)
