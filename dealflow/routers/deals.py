"""Deal endpoints: status transitions, timeline, tasks and workflow history."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from dealflow.core.deps import get_db
from dealflow.db.enums import TaskStatus
from dealflow.schemas.deal import StatusChangeRequest, StatusChangeResponse
from dealflow.schemas.task import TaskRead
from dealflow.schemas.timeline import TimelineEvent
from dealflow.schemas.workflow import ExecutionListResponse, ExecutionRead
from dealflow.services import deal_service, task_service, timeline_service, workflow_service
from dealflow.services.deal_status_service import (
    DealNotFoundError,
    DealStatusUpdateError,
    change_deal_status,
)

router = APIRouter()


@router.post("/{deal_id}/status", response_model=StatusChangeResponse)
def update_deal_status(
    deal_id: UUID,
    data: StatusChangeRequest,
    db: Session = Depends(get_db),
):
    """
    Change a deal's status.

    Reports only whether the status write succeeded and how many workflow
    actions ran; rule failures are visible in the execution log.
    """
    try:
        result = change_deal_status(
            db,
            deal_id=deal_id,
            old_status=data.old_status,
            new_status=data.new_status,
            user_id=data.user_id,
        )
    except DealNotFoundError:
        raise HTTPException(status_code=404, detail="Deal not found")
    except DealStatusUpdateError:
        raise HTTPException(status_code=500, detail="Failed to update deal status")

    return StatusChangeResponse(
        success=True,
        executed_actions=result.actions_executed,
        message=f"Processed {result.actions_executed} workflow actions",
    )


@router.get("/{deal_id}/timeline", response_model=list[TimelineEvent])
def get_deal_timeline(
    deal_id: UUID,
    db: Session = Depends(get_db),
):
    """Merged communication and activity feed, newest first."""
    if not deal_service.get_deal(db, deal_id):
        raise HTTPException(status_code=404, detail="Deal not found")
    return timeline_service.build_timeline(db, deal_id)


@router.get("/{deal_id}/tasks", response_model=list[TaskRead])
def list_deal_tasks(
    deal_id: UUID,
    status: TaskStatus | None = Query(None),
    db: Session = Depends(get_db),
):
    if not deal_service.get_deal(db, deal_id):
        raise HTTPException(status_code=404, detail="Deal not found")
    return task_service.list_deal_tasks(db, deal_id, status=status)


@router.get("/{deal_id}/workflow-executions", response_model=ExecutionListResponse)
def list_deal_executions(
    deal_id: UUID,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    items, total = workflow_service.list_executions(
        db, deal_id=deal_id, limit=limit, offset=offset
    )
    return ExecutionListResponse(
        items=[ExecutionRead.model_validate(e) for e in items],
        total=total,
    )
