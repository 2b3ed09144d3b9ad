"""Pydantic schemas for notifications and preferences."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class NotificationRead(BaseModel):
    id: UUID
    title: str
    message: str
    type: str
    related_deal_id: UUID | None
    related_task_id: UUID | None
    is_read: bool
    read_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}


class NotificationListResponse(BaseModel):
    items: list[NotificationRead]
    unread_count: int


class NotificationPreferencesRead(BaseModel):
    email_enabled: bool
    sms_enabled: bool
    deal_status_updates: bool
    document_requests: bool
    idle_deal_alerts: bool
    task_notifications: bool
    workflow_notifications: bool


class NotificationPreferencesUpdate(BaseModel):
    email_enabled: bool | None = None
    sms_enabled: bool | None = None
    deal_status_updates: bool | None = None
    document_requests: bool | None = None
    idle_deal_alerts: bool | None = None
    task_notifications: bool | None = None
    workflow_notifications: bool | None = None


class MarkAllReadResponse(BaseModel):
    marked: int
