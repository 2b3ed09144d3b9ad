"""SQLAlchemy ORM models for notifications and preferences."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from dealflow.db.base import Base
from dealflow.db.enums import NotificationType
from dealflow.utils.datetime_utils import utc_now


class Notification(Base):
    """In-app notification for a user."""

    __tablename__ = "notifications"
    __table_args__ = (
        Index("idx_notif_user_unread", "user_id", "is_read", "created_at"),
        Index("idx_notif_deal_type", "related_deal_id", "type", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(
        String(20), default=NotificationType.INFO.value, nullable=False
    )

    related_deal_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("deals.id", ondelete="CASCADE"), nullable=True
    )
    related_task_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("automated_tasks.id", ondelete="SET NULL"), nullable=True
    )

    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    read_at: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        default=utc_now, server_default=func.now(), nullable=False
    )


class NotificationPreference(Base):
    """
    Per-user channel and category preferences.

    Missing row = channels off, categories on.
    """

    __tablename__ = "notification_preferences"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, unique=True
    )

    # Channels
    email_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    sms_enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Categories
    deal_status_updates: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    document_requests: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    idle_deal_alerts: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    task_notifications: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    workflow_notifications: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(
        default=utc_now, onupdate=utc_now, server_default=func.now(), nullable=False
    )
