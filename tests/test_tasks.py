import uuid

import pytest

from conftest import auth_headers

from dealflow.db.enums import TaskPriority, TaskStatus
from dealflow.db.models import DealActivityLog
from dealflow.services import task_service


@pytest.fixture
def task(db, deal, broker):
    task = task_service.create_task(
        db,
        deal_id=deal.id,
        title="Chase valuation",
        assigned_to=broker.id,
        priority=TaskPriority.URGENT,
    )
    db.commit()
    return task


def test_create_task_logs_activity(db, task, deal):
    row = db.query(DealActivityLog).filter(DealActivityLog.deal_id == deal.id).one()
    assert row.action == "task_created"
    assert row.details["title"] == "Chase valuation"
    assert task.status == TaskStatus.PENDING.value


def test_completed_task_cannot_reopen(db, task):
    task_service.update_task_status(db, task, TaskStatus.COMPLETED)

    with pytest.raises(ValueError):
        task_service.update_task_status(db, task, TaskStatus.PENDING)


@pytest.mark.asyncio
async def test_complete_task_endpoint(client, db, task, broker):
    response = await client.patch(
        f"/tasks/{task.id}/status", json={"status": "completed"}, headers=auth_headers(broker)
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "completed"
    assert body["completed_at"] is not None
    assert db.query(DealActivityLog).filter(DealActivityLog.action == "task_completed").count() == 1


@pytest.mark.asyncio
async def test_invalid_transition_is_400(client, db, task, broker):
    await client.patch(
        f"/tasks/{task.id}/status", json={"status": "cancelled"}, headers=auth_headers(broker)
    )
    response = await client.patch(
        f"/tasks/{task.id}/status", json={"status": "in_progress"}, headers=auth_headers(broker)
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_list_deal_tasks(client, db, task, deal):
    response = await client.get(f"/deals/{deal.id}/tasks", params={"status": "pending"})

    assert response.status_code == 200
    assert [t["id"] for t in response.json()] == [str(task.id)]


@pytest.mark.asyncio
async def test_unknown_task_404(client, db, broker):
    response = await client.patch(
        f"/tasks/{uuid.uuid4()}/status", json={"status": "completed"}, headers=auth_headers(broker)
    )
    assert response.status_code == 404
