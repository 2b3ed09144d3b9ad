"""Callback scheduling service."""

from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session

from dealflow.db.enums import CallbackStatus
from dealflow.db.models import Profile, ScheduledCallback
from dealflow.schemas.callback import CallbackCreate
from dealflow.services import activity_service, deal_service
from dealflow.utils.datetime_utils import ensure_utc, utc_now


def schedule_callback(
    db: Session,
    scheduled_by: UUID,
    data: CallbackCreate,
) -> ScheduledCallback:
    """
    Schedule a callback between the acting user and another user.

    Raises:
        ValueError: Time in the past, unknown counterparty or deal
    """
    scheduled_at = ensure_utc(data.scheduled_at)
    if scheduled_at <= utc_now():
        raise ValueError("Callback must be scheduled in the future")

    if not db.query(Profile.id).filter(Profile.id == data.scheduled_with).first():
        raise ValueError(f"User {data.scheduled_with} not found")
    if data.deal_id and not deal_service.get_deal(db, data.deal_id):
        raise ValueError(f"Deal {data.deal_id} not found")

    callback = ScheduledCallback(
        scheduled_by=scheduled_by,
        scheduled_with=data.scheduled_with,
        scheduled_at=scheduled_at,
        title=data.title,
        notes=data.notes,
        deal_id=data.deal_id,
        status=CallbackStatus.PENDING.value,
    )
    db.add(callback)
    db.flush()

    if data.deal_id:
        activity_service.log_callback_scheduled(
            db,
            deal_id=data.deal_id,
            callback_id=callback.id,
            title=data.title,
            scheduled_at=scheduled_at.isoformat(),
            user_id=scheduled_by,
        )

    db.commit()
    db.refresh(callback)
    return callback


def get_callback(db: Session, callback_id: UUID) -> ScheduledCallback | None:
    return db.query(ScheduledCallback).filter(ScheduledCallback.id == callback_id).first()


def list_upcoming_callbacks(db: Session, user_id: UUID) -> list[ScheduledCallback]:
    """Pending callbacks the user is party to, soonest first."""
    return (
        db.query(ScheduledCallback)
        .filter(
            or_(
                ScheduledCallback.scheduled_by == user_id,
                ScheduledCallback.scheduled_with == user_id,
            ),
            ScheduledCallback.status == CallbackStatus.PENDING.value,
            ScheduledCallback.scheduled_at >= utc_now(),
        )
        .order_by(ScheduledCallback.scheduled_at, ScheduledCallback.id)
        .all()
    )


def update_callback_status(
    db: Session,
    callback: ScheduledCallback,
    status: CallbackStatus,
) -> ScheduledCallback:
    """
    Close out a pending callback. Reminder flags are left as they are.

    Raises:
        ValueError: Callback is not pending or target status is pending
    """
    if callback.status != CallbackStatus.PENDING.value:
        raise ValueError(f"Callback is already {callback.status}")
    if status == CallbackStatus.PENDING:
        raise ValueError("Callback is already pending")

    callback.status = status.value
    if status == CallbackStatus.COMPLETED:
        callback.completed_at = utc_now()
    db.commit()
    db.refresh(callback)
    return callback
