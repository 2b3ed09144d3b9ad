"""Pydantic schemas for scheduled callbacks."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field


class CallbackCreate(BaseModel):
    scheduled_with: UUID
    scheduled_at: datetime
    title: str = Field(min_length=1, max_length=255)
    notes: str | None = None
    deal_id: UUID | None = None


class CallbackRead(BaseModel):
    id: UUID
    scheduled_by: UUID
    scheduled_with: UUID
    scheduled_at: datetime
    title: str
    notes: str | None
    deal_id: UUID | None
    status: str
    completed_at: datetime | None
    reminder_24h_sent: bool
    reminder_1h_sent: bool
    reminder_10m_sent: bool

    model_config = {"from_attributes": True}


class CallbackStatusUpdate(BaseModel):
    status: Literal["completed", "cancelled"]
