"""Workflow-related enums."""

from enum import Enum


class WorkflowTriggerType(str, Enum):
    """Events that can trigger a workflow rule."""

    STATUS_CHANGE = "status_change"


class WorkflowActionType(str, Enum):
    """Actions a workflow rule can execute."""

    CREATE_TASK = "create_task"
    SEND_NOTIFICATION = "send_notification"
    UPDATE_FIELD = "update_field"
    ASSIGN_BROKER = "assign_broker"


class WorkflowExecutionStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
