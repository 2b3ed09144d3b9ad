"""
Tests for the cron-facing /internal/scheduled endpoints.

These endpoints open their own SessionLocal() on the shared in-memory
database, so each test ends the fixture session's transaction first.
"""

from datetime import timedelta

import pytest

from dealflow.core.config import settings
from dealflow.db.models import AutomatedTask, Notification, ScheduledCallback
from dealflow.utils.datetime_utils import utc_now

SECRET = {"X-Internal-Secret": "test-secret"}


@pytest.mark.asyncio
async def test_missing_secret_header_rejected(client, db):
    response = await client.post("/internal/scheduled/idle-deals")
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_wrong_secret_rejected(client, db):
    response = await client.post(
        "/internal/scheduled/idle-deals", headers={"X-Internal-Secret": "nope"}
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_unconfigured_secret_is_501(client, db, monkeypatch):
    monkeypatch.setattr(settings, "INTERNAL_SECRET", "")
    response = await client.post("/internal/scheduled/callback-reminders", headers=SECRET)
    assert response.status_code == 501


@pytest.mark.asyncio
async def test_idle_deal_scan(client, db, idle_deal):
    db.commit()

    response = await client.post("/internal/scheduled/idle-deals", headers=SECRET)

    assert response.status_code == 200
    assert response.json() == {
        "idle_deals_found": 1,
        "notifications_created": 2,
        "tasks_created": 1,
        "errors": [],
    }
    assert db.query(AutomatedTask).count() == 1


@pytest.mark.asyncio
async def test_callback_reminder_sweep(client, db, broker, client_profile):
    db.add(
        ScheduledCallback(
            scheduled_by=broker.id,
            scheduled_with=client_profile.id,
            scheduled_at=utc_now() + timedelta(minutes=55),
            title="Rate review",
        )
    )
    db.commit()

    response = await client.post("/internal/scheduled/callback-reminders", headers=SECRET)

    assert response.status_code == 200
    assert response.json() == {"processed": 1, "errors": []}
    assert db.query(ScheduledCallback).one().reminder_1h_sent is True
    assert db.query(Notification).count() == 2
