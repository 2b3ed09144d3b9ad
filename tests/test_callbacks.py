"""Tests for scheduling and closing callbacks."""

import uuid
from datetime import timedelta

import pytest

from conftest import auth_headers, make_profile

from dealflow.db.enums import Role
from dealflow.db.models import DealActivityLog
from dealflow.utils.datetime_utils import utc_now


def _payload(client_profile, deal=None, **overrides):
    payload = {
        "scheduled_with": str(client_profile.id),
        "scheduled_at": (utc_now() + timedelta(days=2)).isoformat(),
        "title": "Rate review",
        "notes": "Bring payslips",
    }
    if deal:
        payload["deal_id"] = str(deal.id)
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_schedule_callback_logs_on_deal(client, db, broker, client_profile, deal):
    response = await client.post(
        "/callbacks", json=_payload(client_profile, deal), headers=auth_headers(broker)
    )

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "pending"
    assert body["scheduled_by"] == str(broker.id)
    assert body["reminder_24h_sent"] is False

    row = db.query(DealActivityLog).one()
    assert row.action == "callback_scheduled"
    assert row.event_type == "call"


@pytest.mark.asyncio
async def test_past_callback_rejected(client, db, broker, client_profile):
    response = await client.post(
        "/callbacks",
        json=_payload(client_profile, scheduled_at=(utc_now() - timedelta(hours=1)).isoformat()),
        headers=auth_headers(broker),
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_unknown_counterparty_rejected(client, db, broker):
    response = await client.post(
        "/callbacks",
        json={
            "scheduled_with": str(uuid.uuid4()),
            "scheduled_at": (utc_now() + timedelta(days=1)).isoformat(),
            "title": "Call",
        },
        headers=auth_headers(broker),
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_both_parties_see_upcoming_callback(client, db, broker, client_profile):
    await client.post("/callbacks", json=_payload(client_profile), headers=auth_headers(broker))

    for profile in (broker, client_profile):
        response = await client.get("/callbacks", headers=auth_headers(profile))
        assert [c["title"] for c in response.json()] == ["Rate review"]


@pytest.mark.asyncio
async def test_complete_callback(client, db, broker, client_profile):
    created = (
        await client.post("/callbacks", json=_payload(client_profile), headers=auth_headers(broker))
    ).json()

    response = await client.patch(
        f"/callbacks/{created['id']}/status",
        json={"status": "completed"},
        headers=auth_headers(client_profile),
    )
    assert response.status_code == 200
    assert response.json()["completed_at"] is not None

    response = await client.patch(
        f"/callbacks/{created['id']}/status",
        json={"status": "cancelled"},
        headers=auth_headers(client_profile),
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_outsider_cannot_update_callback(client, db, broker, client_profile):
    outsider = make_profile(db, Role.CLIENT)
    created = (
        await client.post("/callbacks", json=_payload(client_profile), headers=auth_headers(broker))
    ).json()

    response = await client.patch(
        f"/callbacks/{created['id']}/status",
        json={"status": "cancelled"},
        headers=auth_headers(outsider),
    )
    assert response.status_code == 404
