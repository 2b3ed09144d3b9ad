"""Service layer for idle deal detection.

A deal is idle when it sits in an active status with no update for the
configured threshold. Repeat alerts are suppressed by looking back for a
warning notification on the deal, not by a stored flag, so overlapping or
repeated scans are safe.
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from dealflow.core.config import settings
from dealflow.core.structured_logging import build_log_context
from dealflow.db.enums import NotificationType, TaskPriority
from dealflow.db.models import Deal
from dealflow.services import deal_service, notification_service, task_service
from dealflow.utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)

IDLE_TASK_TITLE = "Review Idle Deal"


def find_idle_deals(session: Session, now: datetime) -> list[Deal]:
    cutoff = now - timedelta(days=settings.IDLE_DEAL_THRESHOLD_DAYS)
    return (
        session.query(Deal)
        .filter(
            Deal.status.in_(settings.idle_deal_statuses),
            Deal.updated_at < cutoff,
        )
        .order_by(Deal.updated_at, Deal.id)
        .all()
    )


def _best_effort(session: Session, deal: Deal, what: str, fn) -> bool:
    """Run one write in its own savepoint; log and continue on failure."""
    try:
        with session.begin_nested():
            fn()
        return True
    except Exception:
        logger.exception(
            f"Idle deal {what} failed for deal {deal.id}",
            extra=build_log_context(deal_id=deal.id, job="idle_deals"),
        )
        return False


def check_idle_deal(session: Session, deal: Deal, now: datetime) -> dict:
    """
    Alert on one idle deal unless it was already alerted within the threshold.

    Returns stats: {skipped, notifications_created, task_created}
    """
    days = settings.IDLE_DEAL_THRESHOLD_DAYS
    since = now - timedelta(days=days)

    if notification_service.has_recent_notification(
        session, deal_id=deal.id, type=NotificationType.WARNING, since=since
    ):
        return {"skipped": True, "notifications_created": 0, "task_created": False}

    client = deal_service.get_client(session, deal)
    broker_id = client.assigned_broker_id if client else None
    if client and client.first_name and client.last_name:
        client_name = f"{client.first_name} {client.last_name}"
    else:
        client_name = "Client"

    notifications_created = 0

    if _best_effort(
        session,
        deal,
        "client notification",
        lambda: notification_service.create_notification(
            session,
            user_id=deal.client_id,
            title="Idle Deal Alert",
            message=(
                f'Your deal "{deal.name}" has been inactive for {days} days. '
                "Please review and take action."
            ),
            type=NotificationType.WARNING,
            deal_id=deal.id,
        ),
    ):
        notifications_created += 1

    if broker_id and _best_effort(
        session,
        deal,
        "broker notification",
        lambda: notification_service.create_notification(
            session,
            user_id=broker_id,
            title="Client Deal Idle",
            message=f'{client_name}\'s deal "{deal.name}" has been inactive for {days} days.',
            type=NotificationType.WARNING,
            deal_id=deal.id,
        ),
    ):
        notifications_created += 1

    task_created = _best_effort(
        session,
        deal,
        "task",
        lambda: task_service.create_task(
            session,
            deal_id=deal.id,
            title=IDLE_TASK_TITLE,
            description=(
                f"This deal has been inactive for {days} days. Please review and take action."
            ),
            assigned_to=broker_id or deal.client_id,
            priority=TaskPriority.HIGH,
            due_date=now + timedelta(days=settings.IDLE_DEAL_TASK_DUE_DAYS),
        ),
    )

    session.commit()
    return {
        "skipped": False,
        "notifications_created": notifications_created,
        "task_created": task_created,
    }


def process_idle_deals(session: Session, now: datetime | None = None) -> dict:
    """
    Scan every idle deal; one deal's failure never stops the batch.

    Entry point for the scheduled idle scan.

    Returns summary stats.
    """
    now = now or utc_now()
    deals = find_idle_deals(session, now)

    notifications_created = 0
    tasks_created = 0
    errors = []

    for deal in deals:
        deal_id = deal.id
        try:
            stats = check_idle_deal(session, deal, now)
            notifications_created += stats["notifications_created"]
            tasks_created += int(stats["task_created"])
        except Exception as e:
            session.rollback()
            logger.exception(
                f"Idle deal check failed for deal {deal_id}",
                extra=build_log_context(deal_id=deal_id, job="idle_deals"),
            )
            errors.append({"deal_id": str(deal_id), "error": str(e)})

    return {
        "idle_deals_found": len(deals),
        "notifications_created": notifications_created,
        "tasks_created": tasks_created,
        "errors": errors,
    }
