"""Scheduled callback enums."""

from enum import Enum


class CallbackStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ReminderStage(str, Enum):
    """Staged reminders; value is the suffix of the reminder_*_sent flag."""

    H24 = "24h"
    H1 = "1h"
    M10 = "10m"
