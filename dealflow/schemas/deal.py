"""Pydantic schemas for deal status changes."""

from uuid import UUID

from pydantic import BaseModel

from dealflow.db.enums import DealStatus


class StatusChangeRequest(BaseModel):
    old_status: DealStatus
    new_status: DealStatus
    user_id: UUID | None = None


class StatusChangeResponse(BaseModel):
    """Outcome of the status write; workflow internals are not exposed."""

    success: bool
    executed_actions: int
    message: str
