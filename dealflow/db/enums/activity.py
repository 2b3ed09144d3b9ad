"""Activity log and timeline enums."""

from enum import Enum


class ActivityAction(str, Enum):
    """Action recorded on a deal activity log row."""

    STATUS_CHANGED = "status_changed"
    DOCUMENT_UPLOADED = "document_uploaded"
    DOCUMENT_APPROVED = "document_approved"
    DOCUMENT_REJECTED = "document_rejected"
    MESSAGE_SENT = "message_sent"
    TASK_CREATED = "task_created"
    TASK_COMPLETED = "task_completed"
    BROKER_ASSIGNED = "broker_assigned"
    FIELD_UPDATED = "field_updated"
    CALLBACK_SCHEDULED = "callback_scheduled"


class TimelineEventType(str, Enum):
    CALL = "call"
    EMAIL = "email"
    SMS = "sms"
    NOTE = "note"
    DOCUMENT = "document"
    STATUS_CHANGE = "status_change"


class CommunicationType(str, Enum):
    CALL = "call"
    EMAIL = "email"
    SMS = "sms"
    WHATSAPP = "whatsapp"
    NOTE = "note"


class CommunicationDirection(str, Enum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"
