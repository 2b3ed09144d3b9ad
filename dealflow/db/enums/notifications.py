"""Notification enums."""

from enum import Enum


class NotificationType(str, Enum):
    """Category tag shown on an in-app notification."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class NotificationCategory(str, Enum):
    """Opt-in categories; values match NotificationPreference columns."""

    DEAL_STATUS_UPDATES = "deal_status_updates"
    DOCUMENT_REQUESTS = "document_requests"
    IDLE_DEAL_ALERTS = "idle_deal_alerts"
    TASK_NOTIFICATIONS = "task_notifications"
    WORKFLOW_NOTIFICATIONS = "workflow_notifications"


class MessageChannel(str, Enum):
    SMS = "sms"
    WHATSAPP = "whatsapp"
