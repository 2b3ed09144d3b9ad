"""Tests for workflow rule administration endpoints."""

import uuid

import pytest

from conftest import auth_headers

from dealflow.db.models import WorkflowExecution, WorkflowRule
from dealflow.services.deal_status_service import change_deal_status


def _rule_payload(**overrides):
    payload = {
        "name": "Submitted follow-up",
        "trigger_conditions": {"to_status": "submitted"},
        "actions": [
            {"type": "create_task", "params": {"title": "Review", "due_in_days": 2}},
            {"type": "send_notification", "params": {"title": "Received"}},
        ],
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_create_rule(client, db, admin):
    response = await client.post("/workflows", json=_rule_payload(), headers=auth_headers(admin))

    assert response.status_code == 201
    body = response.json()
    assert body["trigger_type"] == "status_change"
    assert body["trigger_conditions"] == {"to_status": "submitted"}
    assert body["actions"][0]["params"]["priority"] == "medium"
    assert body["created_by"] == str(admin.id)


@pytest.mark.asyncio
async def test_create_rule_requires_admin(client, db, broker):
    response = await client.post("/workflows", json=_rule_payload(), headers=auth_headers(broker))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_requests_without_user_header_are_rejected(client, db):
    response = await client.get("/workflows")
    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "actions",
    [
        [],
        [{"type": "create_task", "params": {}}],
        [{"type": "update_field", "params": {"field": "status", "value": "completed"}}],
        [{"type": "update_field", "params": {"field": "loan_type", "value": "timeshare"}}],
        [{"type": "archive_deal", "params": {}}],
        [{"type": "create_task", "params": {"title": "T", "due_on": 2}}],
        [{"type": "send_notification", "params": {"title": "T", "notify_admins": True}}],
    ],
)
async def test_invalid_actions_are_rejected_at_save_time(client, db, admin, actions):
    response = await client.post(
        "/workflows", json=_rule_payload(actions=actions), headers=auth_headers(admin)
    )
    assert response.status_code == 422
    assert db.query(WorkflowRule).count() == 0


@pytest.mark.asyncio
async def test_legacy_due_date_param_is_stored_as_day_offset(client, db, admin):
    payload = _rule_payload(
        actions=[{"type": "create_task", "params": {"title": "Review", "due_date": 2}}]
    )

    response = await client.post("/workflows", json=payload, headers=auth_headers(admin))

    assert response.status_code == 201
    params = response.json()["actions"][0]["params"]
    assert params["due_in_days"] == 2
    assert "due_date" not in params


@pytest.mark.asyncio
async def test_unknown_condition_status_rejected(client, db, admin):
    response = await client.post(
        "/workflows",
        json=_rule_payload(trigger_conditions={"to_status": "archived"}),
        headers=auth_headers(admin),
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_assign_broker_must_reference_staff(client, db, admin, client_profile):
    response = await client.post(
        "/workflows",
        json=_rule_payload(
            actions=[{"type": "assign_broker", "params": {"broker_id": str(client_profile.id)}}]
        ),
        headers=auth_headers(admin),
    )
    assert response.status_code == 422
    assert "cannot be assigned" in response.json()["detail"]


@pytest.mark.asyncio
async def test_update_and_toggle_rule(client, db, admin):
    created = (
        await client.post("/workflows", json=_rule_payload(), headers=auth_headers(admin))
    ).json()
    rule_id = created["id"]

    response = await client.patch(
        f"/workflows/{rule_id}",
        json={"name": "Renamed", "trigger_conditions": None},
        headers=auth_headers(admin),
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Renamed"
    assert response.json()["trigger_conditions"] == {}

    response = await client.post(f"/workflows/{rule_id}/toggle", headers=auth_headers(admin))
    assert response.json()["is_active"] is False


@pytest.mark.asyncio
async def test_delete_rule_keeps_execution_history(client, db, admin, deal):
    created = (
        await client.post("/workflows", json=_rule_payload(), headers=auth_headers(admin))
    ).json()
    change_deal_status(db, deal.id, "draft", "submitted")

    response = await client.delete(f"/workflows/{created['id']}", headers=auth_headers(admin))
    assert response.status_code == 200

    db.expire_all()
    execution = db.query(WorkflowExecution).one()
    assert execution.workflow_rule_id is None
    assert execution.deal_id == deal.id


@pytest.mark.asyncio
async def test_list_rule_executions(client, db, admin, deal):
    created = (
        await client.post("/workflows", json=_rule_payload(), headers=auth_headers(admin))
    ).json()
    change_deal_status(db, deal.id, "draft", "submitted")

    response = await client.get(
        f"/workflows/{created['id']}/executions", headers=auth_headers(admin)
    )

    body = response.json()
    assert body["total"] == 1
    assert body["items"][0]["status"] == "success"

    response = await client.get(f"/deals/{deal.id}/workflow-executions")
    assert response.json()["total"] == 1


@pytest.mark.asyncio
async def test_unknown_rule_404(client, db, admin):
    response = await client.get(f"/workflows/{uuid.uuid4()}", headers=auth_headers(admin))
    assert response.status_code == 404
