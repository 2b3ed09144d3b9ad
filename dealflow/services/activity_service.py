"""Activity logging service - deal activity entries that feed the timeline."""

from uuid import UUID

from sqlalchemy.orm import Session

from dealflow.db.enums import ActivityAction, TimelineEventType
from dealflow.db.models import DealActivityLog


# Timeline tag stored with each row so readers never parse the action name
ACTION_EVENT_TYPES: dict[ActivityAction, TimelineEventType] = {
    ActivityAction.STATUS_CHANGED: TimelineEventType.STATUS_CHANGE,
    ActivityAction.DOCUMENT_UPLOADED: TimelineEventType.DOCUMENT,
    ActivityAction.DOCUMENT_APPROVED: TimelineEventType.DOCUMENT,
    ActivityAction.DOCUMENT_REJECTED: TimelineEventType.DOCUMENT,
    ActivityAction.MESSAGE_SENT: TimelineEventType.NOTE,
    ActivityAction.TASK_CREATED: TimelineEventType.NOTE,
    ActivityAction.TASK_COMPLETED: TimelineEventType.NOTE,
    ActivityAction.BROKER_ASSIGNED: TimelineEventType.NOTE,
    ActivityAction.FIELD_UPDATED: TimelineEventType.NOTE,
    ActivityAction.CALLBACK_SCHEDULED: TimelineEventType.CALL,
}


def log_activity(
    db: Session,
    deal_id: UUID,
    action: ActivityAction,
    user_id: UUID | None = None,
    details: dict | None = None,
) -> DealActivityLog:
    """
    Log a deal activity.

    Args:
        db: Database session
        deal_id: The deal this activity is for
        action: What happened (from ActivityAction enum)
        user_id: User who performed the action (None for system)
        details: Action-specific details as JSON

    Returns:
        The created activity log entry
    """
    activity = DealActivityLog(
        deal_id=deal_id,
        user_id=user_id,
        action=action.value,
        event_type=ACTION_EVENT_TYPES[action].value,
        details=details,
    )
    db.add(activity)
    db.flush()  # Don't commit - let caller control transaction
    return activity


def log_status_changed(
    db: Session,
    deal_id: UUID,
    old_status: str,
    new_status: str,
    user_id: UUID | None,
) -> DealActivityLog:
    return log_activity(
        db=db,
        deal_id=deal_id,
        action=ActivityAction.STATUS_CHANGED,
        user_id=user_id,
        details={"from": old_status, "to": new_status},
    )


def log_task_created(
    db: Session,
    deal_id: UUID,
    task_id: UUID,
    title: str,
    user_id: UUID | None = None,
) -> DealActivityLog:
    return log_activity(
        db=db,
        deal_id=deal_id,
        action=ActivityAction.TASK_CREATED,
        user_id=user_id,
        details={"task_id": str(task_id), "title": title},
    )


def log_task_completed(
    db: Session,
    deal_id: UUID,
    task_id: UUID,
    title: str,
    user_id: UUID | None,
) -> DealActivityLog:
    return log_activity(
        db=db,
        deal_id=deal_id,
        action=ActivityAction.TASK_COMPLETED,
        user_id=user_id,
        details={"task_id": str(task_id), "title": title},
    )


def log_broker_assigned(
    db: Session,
    deal_id: UUID,
    broker_id: UUID,
    previous_broker_id: UUID | None,
) -> DealActivityLog:
    return log_activity(
        db=db,
        deal_id=deal_id,
        action=ActivityAction.BROKER_ASSIGNED,
        details={
            "broker_id": str(broker_id),
            "previous_broker_id": str(previous_broker_id) if previous_broker_id else None,
        },
    )


def log_field_updated(
    db: Session,
    deal_id: UUID,
    field: str,
    value: object,
) -> DealActivityLog:
    return log_activity(
        db=db,
        deal_id=deal_id,
        action=ActivityAction.FIELD_UPDATED,
        details={"field": field, "value": str(value) if value is not None else None},
    )


def log_callback_scheduled(
    db: Session,
    deal_id: UUID,
    callback_id: UUID,
    title: str,
    scheduled_at: str,
    user_id: UUID,
) -> DealActivityLog:
    return log_activity(
        db=db,
        deal_id=deal_id,
        action=ActivityAction.CALLBACK_SCHEDULED,
        user_id=user_id,
        details={"callback_id": str(callback_id), "title": title, "scheduled_at": scheduled_at},
    )
