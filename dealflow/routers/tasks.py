"""Task endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from dealflow.core.deps import get_current_user_id, get_db
from dealflow.schemas.task import TaskRead, TaskStatusUpdate
from dealflow.services import task_service

router = APIRouter()


@router.patch("/{task_id}/status", response_model=TaskRead)
def update_task_status(
    task_id: UUID,
    data: TaskStatusUpdate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
):
    """Move a task along pending -> in_progress -> completed/cancelled."""
    task = task_service.get_task(db, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    try:
        return task_service.update_task_status(db, task, data.status, actor_user_id=user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
