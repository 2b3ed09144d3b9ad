"""Multi-channel notification dispatch.

Every dispatch creates the in-app record. Email and SMS are added when the
recipient's preferences enable the channel (and the category, if one is
given). Outbound channel failures are logged and never raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.orm import Session

from dealflow.core.structured_logging import build_log_context
from dealflow.db.enums import (
    CommunicationDirection,
    CommunicationType,
    MessageChannel,
    NotificationCategory,
    NotificationType,
)
from dealflow.db.models import CommunicationLog, Notification, Profile
from dealflow.services import email_service, notification_service, sms_service

logger = logging.getLogger(__name__)


@dataclass
class EmailContent:
    subject: str
    html: str


@dataclass
class DispatchResult:
    notification: Notification | None
    email_sent: bool = False
    sms_sent: bool = False


def dispatch(
    db: Session,
    *,
    user_id: UUID,
    title: str,
    message: str,
    notification_type: NotificationType = NotificationType.INFO,
    deal_id: UUID | None = None,
    category: NotificationCategory | None = None,
    email: EmailContent | None = None,
    sms_body: str | None = None,
    sms_channel: MessageChannel = MessageChannel.SMS,
) -> DispatchResult:
    """
    Notify one user.

    The in-app notification is flushed, not committed. A failure creating it
    propagates; email and SMS failures do not.
    """
    notification = notification_service.create_notification(
        db,
        user_id=user_id,
        title=title,
        message=message,
        type=notification_type,
        deal_id=deal_id,
    )
    result = DispatchResult(notification=notification)

    if email is None and sms_body is None:
        return result

    prefs = notification_service.get_preferences(db, user_id)
    if category is not None and not prefs.get(category.value, True):
        return result

    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if not profile:
        logger.warning(
            "Dispatch recipient %s has no profile; in-app only",
            user_id,
            extra=build_log_context(user_id=user_id, deal_id=deal_id),
        )
        return result

    if email is not None and prefs["email_enabled"] and profile.email:
        result.email_sent = _send_email(profile, email, deal_id)

    if sms_body is not None and prefs["sms_enabled"] and profile.phone_number:
        result.sms_sent = _send_sms(db, profile, sms_body, sms_channel, deal_id)

    return result


def _send_email(profile: Profile, email: EmailContent, deal_id: UUID | None) -> bool:
    try:
        outcome = email_service.send_email(
            to_email=profile.email, subject=email.subject, html=email.html
        )
    except Exception:
        logger.exception(
            "Email dispatch raised",
            extra=build_log_context(user_id=profile.id, deal_id=deal_id),
        )
        return False
    if not outcome.get("success"):
        logger.warning(
            f"Email to user {profile.id} not sent: {outcome.get('error')}",
            extra=build_log_context(user_id=profile.id, deal_id=deal_id),
        )
        return False
    return True


def _send_sms(
    db: Session,
    profile: Profile,
    body: str,
    channel: MessageChannel,
    deal_id: UUID | None,
) -> bool:
    try:
        outcome = sms_service.send_sms(to_number=profile.phone_number, body=body, channel=channel)
    except Exception:
        logger.exception(
            "SMS dispatch raised",
            extra=build_log_context(user_id=profile.id, deal_id=deal_id),
        )
        return False
    if not outcome.get("success"):
        logger.warning(
            f"{channel.value} to user {profile.id} not sent: {outcome.get('error')}",
            extra=build_log_context(user_id=profile.id, deal_id=deal_id),
        )
        return False

    if deal_id:
        db.add(
            CommunicationLog(
                deal_id=deal_id,
                user_id=profile.id,
                communication_type=(
                    CommunicationType.WHATSAPP.value
                    if channel == MessageChannel.WHATSAPP
                    else CommunicationType.SMS.value
                ),
                direction=CommunicationDirection.OUTBOUND.value,
                content=body,
                status="sent",
                phone_number=profile.phone_number,
            )
        )
        db.flush()
    return True
