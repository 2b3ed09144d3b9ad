"""Workflow rule service - CRUD, save-time validation and execution history."""

from uuid import UUID

from sqlalchemy.orm import Session

from dealflow.db.enums import Role
from dealflow.db.models import Profile, WorkflowExecution, WorkflowRule
from dealflow.schemas.workflow import (
    AssignBrokerAction,
    CreateTaskAction,
    StatusChangeConditions,
    WorkflowAction,
    WorkflowRuleCreate,
    WorkflowRuleUpdate,
)
from dealflow.utils.datetime_utils import utc_now


BROKER_ROLES = {Role.BROKER.value, Role.TEAM_MEMBER.value, Role.ADMIN.value, Role.SUPER_ADMIN.value}


def create_rule(
    db: Session,
    user_id: UUID | None,
    data: WorkflowRuleCreate,
) -> WorkflowRule:
    """Create a new rule with validation."""
    for action in data.actions:
        _validate_action_references(db, action)

    rule = WorkflowRule(
        name=data.name,
        description=data.description,
        trigger_type=data.trigger_type.value,
        trigger_conditions=_dump_conditions(data.trigger_conditions),
        actions=[action.model_dump(mode="json") for action in data.actions],
        is_active=data.is_active,
        created_by=user_id,
    )
    db.add(rule)
    db.commit()
    db.refresh(rule)
    return rule


def update_rule(
    db: Session,
    rule: WorkflowRule,
    data: WorkflowRuleUpdate,
) -> WorkflowRule:
    """Update a rule; only fields present in the payload change."""
    fields = data.model_fields_set

    if "name" in fields and data.name is not None:
        rule.name = data.name
    if "description" in fields:
        rule.description = data.description
    if "trigger_conditions" in fields:
        rule.trigger_conditions = _dump_conditions(
            data.trigger_conditions or StatusChangeConditions()
        )
    if "actions" in fields and data.actions is not None:
        for action in data.actions:
            _validate_action_references(db, action)
        rule.actions = [action.model_dump(mode="json") for action in data.actions]
    if "is_active" in fields and data.is_active is not None:
        rule.is_active = data.is_active

    rule.updated_at = utc_now()
    db.commit()
    db.refresh(rule)
    return rule


def delete_rule(db: Session, rule: WorkflowRule) -> None:
    db.delete(rule)
    db.commit()


def get_rule(db: Session, rule_id: UUID) -> WorkflowRule | None:
    return db.query(WorkflowRule).filter(WorkflowRule.id == rule_id).first()


def list_rules(
    db: Session,
    trigger_type: str | None = None,
    active_only: bool = False,
) -> list[WorkflowRule]:
    query = db.query(WorkflowRule)
    if trigger_type:
        query = query.filter(WorkflowRule.trigger_type == trigger_type)
    if active_only:
        query = query.filter(WorkflowRule.is_active.is_(True))
    return query.order_by(WorkflowRule.created_at.desc(), WorkflowRule.id).all()


def toggle_rule(db: Session, rule: WorkflowRule) -> WorkflowRule:
    rule.is_active = not rule.is_active
    rule.updated_at = utc_now()
    db.commit()
    db.refresh(rule)
    return rule


def list_executions(
    db: Session,
    rule_id: UUID | None = None,
    deal_id: UUID | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[WorkflowExecution], int]:
    """Executions newest first, with total count."""
    query = db.query(WorkflowExecution)
    if rule_id:
        query = query.filter(WorkflowExecution.workflow_rule_id == rule_id)
    if deal_id:
        query = query.filter(WorkflowExecution.deal_id == deal_id)

    total = query.count()
    items = (
        query.order_by(WorkflowExecution.executed_at.desc(), WorkflowExecution.id)
        .offset(offset)
        .limit(limit)
        .all()
    )
    return items, total


def _dump_conditions(conditions: StatusChangeConditions) -> dict:
    return conditions.model_dump(mode="json", exclude_none=True)


def _validate_action_references(db: Session, action: WorkflowAction) -> None:
    """
    Check that ids referenced by an action exist.

    Raises:
        ValueError: Referenced profile is missing or not staff
    """
    if isinstance(action, CreateTaskAction) and action.params.assigned_to:
        exists = db.query(Profile.id).filter(Profile.id == action.params.assigned_to).first()
        if not exists:
            raise ValueError(f"Assignee {action.params.assigned_to} not found")

    if isinstance(action, AssignBrokerAction):
        broker = db.query(Profile).filter(Profile.id == action.params.broker_id).first()
        if not broker:
            raise ValueError(f"Broker {action.params.broker_id} not found")
        if broker.role not in BROKER_ROLES:
            raise ValueError(f"Profile {broker.id} cannot be assigned as a broker")
