"""Workflow rule administration endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from dealflow.core.deps import get_db, require_admin
from dealflow.schemas.workflow import (
    ExecutionListResponse,
    ExecutionRead,
    WorkflowRuleCreate,
    WorkflowRuleRead,
    WorkflowRuleUpdate,
)
from dealflow.services import workflow_service

router = APIRouter()


@router.get("", response_model=list[WorkflowRuleRead])
def list_rules(
    trigger_type: str | None = Query(None),
    active_only: bool = Query(False),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(require_admin),
):
    """List workflow rules."""
    return workflow_service.list_rules(db, trigger_type=trigger_type, active_only=active_only)


@router.post("", response_model=WorkflowRuleRead, status_code=201)
def create_rule(
    data: WorkflowRuleCreate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(require_admin),
):
    """Create a new rule. Action payloads are validated here, not at run time."""
    try:
        return workflow_service.create_rule(db, user_id=user_id, data=data)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/{rule_id}", response_model=WorkflowRuleRead)
def get_rule(
    rule_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(require_admin),
):
    rule = workflow_service.get_rule(db, rule_id)
    if not rule:
        raise HTTPException(status_code=404, detail="Workflow rule not found")
    return rule


@router.patch("/{rule_id}", response_model=WorkflowRuleRead)
def update_rule(
    rule_id: UUID,
    data: WorkflowRuleUpdate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(require_admin),
):
    rule = workflow_service.get_rule(db, rule_id)
    if not rule:
        raise HTTPException(status_code=404, detail="Workflow rule not found")
    try:
        return workflow_service.update_rule(db, rule, data)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.delete("/{rule_id}")
def delete_rule(
    rule_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(require_admin),
):
    """Delete a rule. Its execution history is kept."""
    rule = workflow_service.get_rule(db, rule_id)
    if not rule:
        raise HTTPException(status_code=404, detail="Workflow rule not found")
    workflow_service.delete_rule(db, rule)
    return {"message": "Workflow rule deleted"}


@router.post("/{rule_id}/toggle", response_model=WorkflowRuleRead)
def toggle_rule(
    rule_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(require_admin),
):
    rule = workflow_service.get_rule(db, rule_id)
    if not rule:
        raise HTTPException(status_code=404, detail="Workflow rule not found")
    return workflow_service.toggle_rule(db, rule)


@router.get("/{rule_id}/executions", response_model=ExecutionListResponse)
def list_rule_executions(
    rule_id: UUID,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(require_admin),
):
    """Execution history for a rule, newest first."""
    if not workflow_service.get_rule(db, rule_id):
        raise HTTPException(status_code=404, detail="Workflow rule not found")
    items, total = workflow_service.list_executions(
        db, rule_id=rule_id, limit=limit, offset=offset
    )
    return ExecutionListResponse(
        items=[ExecutionRead.model_validate(e) for e in items],
        total=total,
    )
