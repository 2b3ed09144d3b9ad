"""Pydantic schemas for the deal timeline."""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field

from dealflow.db.enums import TimelineEventType


class TimelineEvent(BaseModel):
    """One normalized entry in a deal's timeline. Derived, never stored."""

    id: UUID
    source: Literal["communication", "activity"]
    type: TimelineEventType
    content: str
    actor_id: UUID | None = None
    actor_name: str
    created_at: datetime
    metadata: dict[str, Any] = Field(default_factory=dict)
