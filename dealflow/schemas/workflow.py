"""Pydantic schemas for workflow rules and executions."""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
    model_validator,
)

from dealflow.db.enums import (
    DealStatus,
    LoanType,
    NotificationType,
    TaskPriority,
    WorkflowTriggerType,
)


# =============================================================================
# Field Registry (Whitelist for updates)
# =============================================================================

ALLOWED_UPDATE_FIELDS = {
    "name",
    "amount",
    "loan_type",
}


def coerce_update_value(field: str, value: object) -> object:
    """Convert a literal from rule config to the column's Python type."""
    if field == "amount":
        if value is None:
            return None
        try:
            return Decimal(str(value))
        except InvalidOperation:
            raise ValueError(f"Invalid amount: {value!r}")
    if field == "loan_type":
        return LoanType(value).value
    if field == "name":
        if not isinstance(value, str) or not value.strip():
            raise ValueError("name must be a non-empty string")
        return value.strip()
    raise ValueError(f"Field '{field}' is not allowed for update")


# =============================================================================
# Trigger Conditions
# =============================================================================


class StatusChangeConditions(BaseModel):
    """Match predicate for status_change rules. A missing key matches any status."""

    model_config = ConfigDict(extra="forbid")

    from_status: DealStatus | None = None
    to_status: DealStatus | None = None


# =============================================================================
# Action Schemas
# =============================================================================


class CreateTaskParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    assigned_to: UUID | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    # Rules saved by earlier clients store the offset as "due_date".
    due_in_days: int | None = Field(
        default=None,
        ge=0,
        le=365,
        validation_alias=AliasChoices("due_in_days", "due_date"),
    )


class SendNotificationParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1, max_length=200)
    message: str = "Your deal has been updated"
    notification_type: NotificationType = NotificationType.INFO
    notify_client: bool = False
    notify_broker: bool = False


class UpdateFieldParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    field: str
    value: object

    @field_validator("field")
    @classmethod
    def validate_field(cls, v: str) -> str:
        if v not in ALLOWED_UPDATE_FIELDS:
            raise ValueError(
                f"Field '{v}' is not allowed for update. Allowed: {sorted(ALLOWED_UPDATE_FIELDS)}"
            )
        return v

    @model_validator(mode="after")
    def validate_value(self) -> "UpdateFieldParams":
        coerce_update_value(self.field, self.value)
        return self


class AssignBrokerParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    broker_id: UUID


class CreateTaskAction(BaseModel):
    type: Literal["create_task"] = "create_task"
    params: CreateTaskParams


class SendNotificationAction(BaseModel):
    type: Literal["send_notification"] = "send_notification"
    params: SendNotificationParams


class UpdateFieldAction(BaseModel):
    type: Literal["update_field"] = "update_field"
    params: UpdateFieldParams


class AssignBrokerAction(BaseModel):
    type: Literal["assign_broker"] = "assign_broker"
    params: AssignBrokerParams


WorkflowAction = Annotated[
    Union[CreateTaskAction, SendNotificationAction, UpdateFieldAction, AssignBrokerAction],
    Field(discriminator="type"),
]

workflow_action_adapter: TypeAdapter[WorkflowAction] = TypeAdapter(WorkflowAction)


# =============================================================================
# Rule CRUD Schemas
# =============================================================================


class WorkflowRuleCreate(BaseModel):
    """Schema for creating a workflow rule."""

    name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    trigger_type: WorkflowTriggerType = WorkflowTriggerType.STATUS_CHANGE
    trigger_conditions: StatusChangeConditions = Field(default_factory=StatusChangeConditions)
    actions: list[WorkflowAction] = Field(min_length=1)
    is_active: bool = True


class WorkflowRuleUpdate(BaseModel):
    """Schema for updating a workflow rule."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    trigger_conditions: StatusChangeConditions | None = None
    actions: list[WorkflowAction] | None = Field(default=None, min_length=1)
    is_active: bool | None = None


class WorkflowRuleRead(BaseModel):
    id: UUID
    name: str
    description: str | None
    trigger_type: str
    trigger_conditions: dict
    actions: list[dict]
    is_active: bool
    created_by: UUID | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# =============================================================================
# Execution Schemas
# =============================================================================


class ExecutionRead(BaseModel):
    id: UUID
    workflow_rule_id: UUID | None
    deal_id: UUID | None
    trigger_data: dict
    actions_executed: list[dict]
    status: str
    error_message: str | None
    duration_ms: int | None
    executed_at: datetime

    model_config = {"from_attributes": True}


class ExecutionListResponse(BaseModel):
    items: list[ExecutionRead]
    total: int
