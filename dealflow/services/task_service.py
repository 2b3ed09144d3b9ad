"""Task service - automated task creation and lifecycle."""

from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import Session

from dealflow.db.enums import TaskPriority, TaskStatus
from dealflow.db.models import AutomatedTask
from dealflow.services import activity_service
from dealflow.utils.datetime_utils import utc_now


ALLOWED_TRANSITIONS: dict[TaskStatus, set[TaskStatus]] = {
    TaskStatus.PENDING: {TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED, TaskStatus.CANCELLED},
    TaskStatus.IN_PROGRESS: {TaskStatus.PENDING, TaskStatus.COMPLETED, TaskStatus.CANCELLED},
    TaskStatus.COMPLETED: set(),
    TaskStatus.CANCELLED: set(),
}


def create_task(
    db: Session,
    *,
    deal_id: UUID | None,
    title: str,
    description: str | None = None,
    assigned_to: UUID | None = None,
    priority: TaskPriority = TaskPriority.MEDIUM,
    due_date: datetime | None = None,
    workflow_rule_id: UUID | None = None,
    actor_user_id: UUID | None = None,
) -> AutomatedTask:
    """Create a task and log it on the deal. Flushes only."""
    task = AutomatedTask(
        deal_id=deal_id,
        title=title,
        description=description,
        assigned_to=assigned_to,
        priority=TaskPriority(priority).value,
        status=TaskStatus.PENDING.value,
        due_date=due_date,
        workflow_rule_id=workflow_rule_id,
    )
    db.add(task)
    db.flush()

    if deal_id:
        activity_service.log_task_created(
            db, deal_id=deal_id, task_id=task.id, title=title, user_id=actor_user_id
        )
    return task


def get_task(db: Session, task_id: UUID) -> AutomatedTask | None:
    return db.query(AutomatedTask).filter(AutomatedTask.id == task_id).first()


def list_deal_tasks(
    db: Session,
    deal_id: UUID,
    status: TaskStatus | None = None,
) -> list[AutomatedTask]:
    query = db.query(AutomatedTask).filter(AutomatedTask.deal_id == deal_id)
    if status:
        query = query.filter(AutomatedTask.status == status.value)
    return query.order_by(AutomatedTask.created_at.desc(), AutomatedTask.id).all()


def update_task_status(
    db: Session,
    task: AutomatedTask,
    new_status: TaskStatus,
    actor_user_id: UUID | None = None,
) -> AutomatedTask:
    """
    Move a task along its lifecycle.

    Raises:
        ValueError: If the transition is not allowed
    """
    current = TaskStatus(task.status)
    if new_status == current:
        return task
    if new_status not in ALLOWED_TRANSITIONS[current]:
        raise ValueError(f"Cannot move task from {current.value} to {new_status.value}")

    now = utc_now()
    task.status = new_status.value
    task.updated_at = now
    if new_status == TaskStatus.COMPLETED:
        task.completed_at = now
        if task.deal_id:
            activity_service.log_task_completed(
                db, deal_id=task.deal_id, task_id=task.id, title=task.title, user_id=actor_user_id
            )

    db.commit()
    db.refresh(task)
    return task
