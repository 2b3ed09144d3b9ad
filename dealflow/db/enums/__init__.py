"""Enum definitions for application constants."""

from dealflow.db.enums.activity import (
    ActivityAction,
    CommunicationDirection,
    CommunicationType,
    TimelineEventType,
)
from dealflow.db.enums.auth import Role
from dealflow.db.enums.callbacks import CallbackStatus, ReminderStage
from dealflow.db.enums.deals import DealStatus, LoanType
from dealflow.db.enums.notifications import (
    MessageChannel,
    NotificationCategory,
    NotificationType,
)
from dealflow.db.enums.tasks import TaskPriority, TaskStatus
from dealflow.db.enums.workflows import (
    WorkflowActionType,
    WorkflowExecutionStatus,
    WorkflowTriggerType,
)

__all__ = [
    "ActivityAction",
    "CallbackStatus",
    "CommunicationDirection",
    "CommunicationType",
    "DealStatus",
    "LoanType",
    "MessageChannel",
    "NotificationCategory",
    "NotificationType",
    "ReminderStage",
    "Role",
    "TaskPriority",
    "TaskStatus",
    "TimelineEventType",
    "WorkflowActionType",
    "WorkflowExecutionStatus",
    "WorkflowTriggerType",
]
