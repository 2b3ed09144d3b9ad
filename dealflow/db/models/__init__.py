"""SQLAlchemy ORM models."""

from dealflow.db.models.callbacks import ScheduledCallback
from dealflow.db.models.deals import CommunicationLog, Deal, DealActivityLog
from dealflow.db.models.notifications import Notification, NotificationPreference
from dealflow.db.models.profiles import Profile
from dealflow.db.models.tasks import AutomatedTask
from dealflow.db.models.workflows import WorkflowExecution, WorkflowRule

__all__ = [
    "AutomatedTask",
    "CommunicationLog",
    "Deal",
    "DealActivityLog",
    "Notification",
    "NotificationPreference",
    "Profile",
    "ScheduledCallback",
    "WorkflowExecution",
    "WorkflowRule",
]
