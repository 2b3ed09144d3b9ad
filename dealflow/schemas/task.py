"""Pydantic schemas for automated tasks."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from dealflow.db.enums import TaskStatus


class TaskRead(BaseModel):
    id: UUID
    deal_id: UUID | None
    title: str
    description: str | None
    assigned_to: UUID | None
    priority: str
    status: str
    due_date: datetime | None
    completed_at: datetime | None
    workflow_rule_id: UUID | None
    created_at: datetime

    model_config = {"from_attributes": True}


class TaskStatusUpdate(BaseModel):
    status: TaskStatus
