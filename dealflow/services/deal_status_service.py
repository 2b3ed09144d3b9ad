"""Deal status transitions and their side effects.

Order per call: status write and activity row (one transaction), then the
direct client notification, then status_change rules. Only the first step is
fatal; everything after it is logged and swallowed.
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dealflow.core.structured_logging import build_log_context
from dealflow.db.enums import (
    DealStatus,
    NotificationCategory,
    NotificationType,
    WorkflowExecutionStatus,
    WorkflowTriggerType,
)
from dealflow.db.models import Deal
from dealflow.services import activity_service, deal_service, notification_dispatcher
from dealflow.services.notification_dispatcher import EmailContent
from dealflow.services.workflow_engine import engine
from dealflow.services.workflow_engine_core import count_completed_actions
from dealflow.utils.datetime_utils import utc_now
from dealflow.utils.text import humanize_status

logger = logging.getLogger(__name__)


class DealNotFoundError(LookupError):
    pass


class DealStatusUpdateError(RuntimeError):
    """The primary status write failed; no side effects were performed."""


@dataclass
class StatusChangeResult:
    deal: Deal
    actions_executed: int
    rules_matched: int
    rules_failed: int


def _status_value(status: DealStatus | str) -> str:
    return status.value if isinstance(status, DealStatus) else str(status)


def change_deal_status(
    db: Session,
    deal_id: UUID,
    old_status: DealStatus | str,
    new_status: DealStatus | str,
    user_id: UUID | None = None,
) -> StatusChangeResult:
    """
    Apply a status change and run everything linked to it.

    Not idempotent: every call writes an activity row, notifies the client and
    evaluates rules, even when old_status == new_status.

    Raises:
        DealNotFoundError: No deal with this id
        DealStatusUpdateError: The status write could not be committed
    """
    old_value = _status_value(old_status)
    new_value = _status_value(new_status)
    log_extra = build_log_context(user_id=user_id, deal_id=deal_id)

    deal = deal_service.get_deal(db, deal_id)
    if not deal:
        raise DealNotFoundError(f"Deal {deal_id} not found")

    try:
        deal.status = new_value
        deal.updated_at = utc_now()
        activity_service.log_status_changed(
            db, deal_id=deal.id, old_status=old_value, new_status=new_value, user_id=user_id
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to persist status change", extra=log_extra)
        raise DealStatusUpdateError(f"Failed to update status for deal {deal_id}") from exc

    logger.info(f"Deal {deal.id} status {old_value} -> {new_value}", extra=log_extra)

    _notify_client(db, deal, old_value, new_value)

    executions = _run_status_rules(db, deal, old_value, new_value, user_id)
    failed = sum(1 for e in executions if e.status != WorkflowExecutionStatus.SUCCESS.value)

    return StatusChangeResult(
        deal=deal,
        actions_executed=count_completed_actions(executions),
        rules_matched=len(executions),
        rules_failed=failed,
    )


def _status_email(deal: Deal, old_value: str, new_value: str) -> EmailContent:
    name = html.escape(deal.name)
    return EmailContent(
        subject=f"Deal Status Update: {deal.name}",
        html=(
            "<h2>Deal Status Update</h2>"
            f"<p>Your deal <strong>{name}</strong> has been updated.</p>"
            f"<p>Status: {html.escape(humanize_status(old_value))} &rarr; "
            f"<strong>{html.escape(humanize_status(new_value))}</strong></p>"
        ),
    )


def _notify_client(db: Session, deal: Deal, old_value: str, new_value: str) -> None:
    """Direct notification to the deal's client, independent of rules."""
    try:
        notification_dispatcher.dispatch(
            db,
            user_id=deal.client_id,
            title="Deal Status Updated",
            message=f'Your deal "{deal.name}" has moved to {humanize_status(new_value)}',
            notification_type=NotificationType.INFO,
            deal_id=deal.id,
            category=NotificationCategory.DEAL_STATUS_UPDATES,
            email=_status_email(deal, old_value, new_value),
        )
        db.commit()
    except Exception:
        db.rollback()
        logger.exception(
            "Status change notification failed",
            extra=build_log_context(user_id=deal.client_id, deal_id=deal.id),
        )


def _run_status_rules(
    db: Session,
    deal: Deal,
    old_value: str,
    new_value: str,
    user_id: UUID | None,
) -> list:
    try:
        return engine.trigger(
            db=db,
            trigger_type=WorkflowTriggerType.STATUS_CHANGE,
            deal_id=deal.id,
            event_data={
                "old_status": old_value,
                "new_status": new_value,
                "triggered_by_user_id": str(user_id) if user_id else None,
            },
        )
    except Exception:
        db.rollback()
        logger.exception(
            "Status change rule evaluation failed",
            extra=build_log_context(user_id=user_id, deal_id=deal.id),
        )
        return []
