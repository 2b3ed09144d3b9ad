"""SQLAlchemy ORM models for workflow rules and their audit trail."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from dealflow.db.base import Base
from dealflow.db.enums import WorkflowTriggerType
from dealflow.db.types import JsonType
from dealflow.utils.datetime_utils import utc_now


class WorkflowRule(Base):
    """
    Declarative automation rule.

    Fires on a trigger event when ``trigger_conditions`` match and runs
    ``actions`` (a list of ``{"type": ..., "params": {...}}``) in order.
    """

    __tablename__ = "workflow_rules"
    __table_args__ = (Index("idx_wf_rules_trigger_active", "trigger_type", "is_active"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    trigger_type: Mapped[str] = mapped_column(
        String(50), default=WorkflowTriggerType.STATUS_CHANGE.value, nullable=False
    )
    trigger_conditions: Mapped[dict] = mapped_column(JsonType, default=dict, nullable=False)
    actions: Mapped[list] = mapped_column(JsonType, default=list, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        default=utc_now, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utc_now, server_default=func.now(), nullable=False
    )


class WorkflowExecution(Base):
    """One rule firing for one deal. Append-only."""

    __tablename__ = "workflow_executions"
    __table_args__ = (
        Index("idx_wf_exec_rule", "workflow_rule_id", "executed_at"),
        Index("idx_wf_exec_deal", "deal_id", "executed_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # Kept when the rule is deleted; executions are the audit trail
    workflow_rule_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("workflow_rules.id", ondelete="SET NULL"), nullable=True
    )
    deal_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("deals.id", ondelete="CASCADE"), nullable=True
    )

    trigger_data: Mapped[dict] = mapped_column(JsonType, default=dict, nullable=False)
    actions_executed: Mapped[list] = mapped_column(JsonType, default=list, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    duration_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)

    executed_at: Mapped[datetime] = mapped_column(
        default=utc_now, server_default=func.now(), nullable=False
    )
