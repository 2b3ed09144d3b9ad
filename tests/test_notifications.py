"""Tests for notification preferences and the notification endpoints."""

import pytest

from conftest import auth_headers

from dealflow.db.enums import NotificationType
from dealflow.services import notification_service


def _notify(db, user_id, title="Hello"):
    notification = notification_service.create_notification(
        db, user_id=user_id, title=title, message="msg", type=NotificationType.SUCCESS
    )
    db.commit()
    return notification


def test_missing_preferences_default_to_in_app_only(db, client_profile):
    prefs = notification_service.get_preferences(db, client_profile.id)

    assert prefs["email_enabled"] is False
    assert prefs["sms_enabled"] is False
    assert prefs["deal_status_updates"] is True
    assert notification_service.should_notify(db, client_profile.id, "idle_deal_alerts") is True


def test_update_preferences_creates_row(db, client_profile):
    prefs = notification_service.update_preferences(
        db, client_profile.id, {"email_enabled": True, "idle_deal_alerts": False, "bogus": True}
    )

    assert prefs["email_enabled"] is True
    assert prefs["idle_deal_alerts"] is False
    assert "bogus" not in prefs


@pytest.mark.asyncio
async def test_list_and_mark_read(client, db, client_profile, broker):
    first = _notify(db, client_profile.id, "First")
    _notify(db, client_profile.id, "Second")
    _notify(db, broker.id, "Not yours")

    response = await client.get("/notifications", headers=auth_headers(client_profile))
    body = response.json()
    assert body["unread_count"] == 2
    assert {n["title"] for n in body["items"]} == {"First", "Second"}

    response = await client.post(
        f"/notifications/{first.id}/read", headers=auth_headers(client_profile)
    )
    assert response.json()["is_read"] is True

    response = await client.get(
        "/notifications", params={"unread_only": True}, headers=auth_headers(client_profile)
    )
    assert [n["title"] for n in response.json()["items"]] == ["Second"]


@pytest.mark.asyncio
async def test_cannot_mark_someone_elses_notification(client, db, client_profile, broker):
    theirs = _notify(db, broker.id)

    response = await client.post(
        f"/notifications/{theirs.id}/read", headers=auth_headers(client_profile)
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_mark_all_read(client, db, client_profile):
    _notify(db, client_profile.id)
    _notify(db, client_profile.id)

    response = await client.post("/notifications/read-all", headers=auth_headers(client_profile))

    assert response.json() == {"marked": 2}
    assert notification_service.get_unread_count(db, client_profile.id) == 0


@pytest.mark.asyncio
async def test_settings_round_trip(client, db, client_profile):
    response = await client.get("/notifications/settings", headers=auth_headers(client_profile))
    assert response.json()["email_enabled"] is False

    response = await client.patch(
        "/notifications/settings",
        json={"sms_enabled": True},
        headers=auth_headers(client_profile),
    )
    assert response.json()["sms_enabled"] is True
    assert response.json()["deal_status_updates"] is True
