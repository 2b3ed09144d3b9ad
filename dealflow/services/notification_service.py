"""
Notification Service - in-app notifications and per-user preferences.

Writes flush but do not commit; the caller owns the transaction.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import Session

from dealflow.db.enums import NotificationCategory, NotificationType
from dealflow.db.models import Notification, NotificationPreference
from dealflow.utils.datetime_utils import utc_now


PREFERENCE_FIELDS = (
    "email_enabled",
    "sms_enabled",
    *(category.value for category in NotificationCategory),
)

# Used when a user has never saved preferences: no outbound channels, every category on
DEFAULT_PREFERENCES: dict[str, bool] = {
    "email_enabled": False,
    "sms_enabled": False,
    **{category.value: True for category in NotificationCategory},
}


# =============================================================================
# Preferences
# =============================================================================


def _to_dict(row: NotificationPreference) -> dict[str, bool]:
    return {field: bool(getattr(row, field)) for field in PREFERENCE_FIELDS}


def get_preferences(db: Session, user_id: UUID) -> dict[str, bool]:
    """Get notification preferences, falling back to DEFAULT_PREFERENCES."""
    row = (
        db.query(NotificationPreference)
        .filter(NotificationPreference.user_id == user_id)
        .first()
    )
    if row:
        return _to_dict(row)
    return dict(DEFAULT_PREFERENCES)


def update_preferences(db: Session, user_id: UUID, updates: dict) -> dict[str, bool]:
    """Update preferences, creating the row from defaults if missing."""
    row = (
        db.query(NotificationPreference)
        .filter(NotificationPreference.user_id == user_id)
        .first()
    )
    if not row:
        row = NotificationPreference(user_id=user_id, **DEFAULT_PREFERENCES)
        db.add(row)

    for key, value in updates.items():
        if key in PREFERENCE_FIELDS and value is not None:
            setattr(row, key, bool(value))

    db.commit()
    db.refresh(row)
    return _to_dict(row)


def should_notify(db: Session, user_id: UUID, setting_key: str) -> bool:
    """Check a single channel or category flag."""
    return get_preferences(db, user_id).get(setting_key, True)


# =============================================================================
# Notification CRUD
# =============================================================================


def create_notification(
    db: Session,
    *,
    user_id: UUID,
    title: str,
    message: str,
    type: NotificationType = NotificationType.INFO,
    deal_id: UUID | None = None,
    task_id: UUID | None = None,
) -> Notification:
    notification = Notification(
        user_id=user_id,
        title=title,
        message=message,
        type=NotificationType(type).value,
        related_deal_id=deal_id,
        related_task_id=task_id,
    )
    db.add(notification)
    db.flush()
    return notification


def has_recent_notification(
    db: Session,
    *,
    deal_id: UUID,
    type: NotificationType,
    since: datetime,
) -> bool:
    """True if any notification of this type exists for the deal since the cutoff."""
    return (
        db.query(Notification.id)
        .filter(
            Notification.related_deal_id == deal_id,
            Notification.type == type.value,
            Notification.created_at >= since,
        )
        .first()
        is not None
    )


def get_notifications(
    db: Session,
    user_id: UUID,
    unread_only: bool = False,
    limit: int = 50,
    offset: int = 0,
) -> list[Notification]:
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return (
        query.order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )


def get_unread_count(db: Session, user_id: UUID) -> int:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .count()
    )


def mark_read(db: Session, notification_id: UUID, user_id: UUID) -> Notification | None:
    """Mark one notification read. Returns None if it isn't the user's."""
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user_id)
        .first()
    )
    if not notification:
        return None
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = utc_now()
        db.commit()
        db.refresh(notification)
    return notification


def mark_all_read(db: Session, user_id: UUID) -> int:
    count = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .update(
            {Notification.is_read: True, Notification.read_at: utc_now()},
            synchronize_session=False,
        )
    )
    db.commit()
    return count
