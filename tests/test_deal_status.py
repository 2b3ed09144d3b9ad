"""Tests for deal status transitions and their side effects."""

import uuid

import pytest

from conftest import enable_channels

from dealflow.db.enums import ActivityAction, DealStatus, TimelineEventType
from dealflow.db.models import Deal, DealActivityLog, Notification, NotificationPreference
from dealflow.services import email_service, notification_dispatcher
from dealflow.services.deal_status_service import DealNotFoundError, change_deal_status


@pytest.fixture
def sent_emails(monkeypatch):
    sent = []

    def fake_send_email(*, to_email, subject, html):
        sent.append({"to": to_email, "subject": subject, "html": html})
        return {"success": True, "message_id": "msg_1", "error": None}

    monkeypatch.setattr(email_service, "send_email", fake_send_email)
    return sent


def test_status_change_writes_one_activity_row(db, deal):
    change_deal_status(db, deal.id, DealStatus.DRAFT, DealStatus.SUBMITTED)

    rows = db.query(DealActivityLog).filter(DealActivityLog.deal_id == deal.id).all()
    assert len(rows) == 1
    assert rows[0].action == ActivityAction.STATUS_CHANGED.value
    assert rows[0].event_type == TimelineEventType.STATUS_CHANGE.value
    assert rows[0].details == {"from": "draft", "to": "submitted"}

    db.expire_all()
    assert db.get(Deal, deal.id).status == DealStatus.SUBMITTED.value


def test_repeated_change_is_not_deduplicated(db, deal):
    change_deal_status(db, deal.id, "draft", "submitted")
    change_deal_status(db, deal.id, "draft", "submitted")

    assert db.query(DealActivityLog).count() == 2
    assert db.query(Notification).filter(Notification.title == "Deal Status Updated").count() == 2


def test_client_gets_in_app_notification(db, deal, client_profile):
    change_deal_status(db, deal.id, DealStatus.DRAFT, DealStatus.FINAL_UNDERWRITING)

    notification = db.query(Notification).one()
    assert notification.user_id == client_profile.id
    assert notification.related_deal_id == deal.id
    assert notification.message == 'Your deal "Riverside Bridge" has moved to Final Underwriting'


def test_email_not_sent_without_preferences(db, deal, sent_emails):
    change_deal_status(db, deal.id, "draft", "submitted")

    assert sent_emails == []


def test_email_sent_when_enabled(db, deal, client_profile, sent_emails):
    enable_channels(db, client_profile.id, email=True)

    change_deal_status(db, deal.id, "draft", "submitted")

    assert len(sent_emails) == 1
    assert sent_emails[0]["to"] == client_profile.email
    assert sent_emails[0]["subject"] == "Deal Status Update: Riverside Bridge"
    assert "Submitted" in sent_emails[0]["html"]


def test_category_opt_out_suppresses_email_only(db, deal, client_profile, sent_emails):
    db.add(
        NotificationPreference(
            user_id=client_profile.id, email_enabled=True, deal_status_updates=False
        )
    )
    db.commit()

    change_deal_status(db, deal.id, "draft", "submitted")

    assert sent_emails == []
    assert db.query(Notification).count() == 1


def test_email_failure_does_not_fail_status_change(db, deal, client_profile, monkeypatch):
    enable_channels(db, client_profile.id, email=True)

    def boom(**kwargs):
        raise RuntimeError("provider down")

    monkeypatch.setattr(email_service, "send_email", boom)

    result = change_deal_status(db, deal.id, "draft", "submitted")

    assert result.deal.status == "submitted"
    assert db.query(Notification).count() == 1


def test_notification_failure_still_runs_rules(db, deal, monkeypatch):
    from dealflow.db.models import WorkflowExecution, WorkflowRule

    db.add(
        WorkflowRule(
            name="Any",
            trigger_type="status_change",
            trigger_conditions={},
            actions=[{"type": "create_task", "params": {"title": "Follow up"}}],
            is_active=True,
        )
    )
    db.commit()

    def boom(*args, **kwargs):
        raise RuntimeError("dispatcher down")

    monkeypatch.setattr(notification_dispatcher, "dispatch", boom)

    result = change_deal_status(db, deal.id, "draft", "submitted")

    assert result.actions_executed == 1
    assert db.query(WorkflowExecution).count() == 1
    assert db.query(DealActivityLog).filter(DealActivityLog.action == "status_changed").count() == 1


def test_unknown_deal_raises(db):
    with pytest.raises(DealNotFoundError):
        change_deal_status(db, uuid.uuid4(), "draft", "submitted")


@pytest.mark.asyncio
async def test_status_endpoint_reports_action_count(client, db, deal):
    from dealflow.db.models import WorkflowRule

    db.add(
        WorkflowRule(
            name="On submit",
            trigger_type="status_change",
            trigger_conditions={"to_status": "submitted"},
            actions=[{"type": "create_task", "params": {"title": "Review"}}],
            is_active=True,
        )
    )
    db.commit()

    response = await client.post(
        f"/deals/{deal.id}/status",
        json={"old_status": "draft", "new_status": "submitted"},
    )

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "executed_actions": 1,
        "message": "Processed 1 workflow actions",
    }


@pytest.mark.asyncio
async def test_status_endpoint_unknown_deal_404(client, db):
    response = await client.post(
        f"/deals/{uuid.uuid4()}/status",
        json={"old_status": "draft", "new_status": "submitted"},
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_status_endpoint_rejects_unknown_status(client, db, deal):
    response = await client.post(
        f"/deals/{deal.id}/status",
        json={"old_status": "draft", "new_status": "archived"},
    )
    assert response.status_code == 422
