"""Tests for the idle deal scanner."""

import uuid
from datetime import timedelta

from conftest import make_profile

from dealflow.db.enums import DealStatus, NotificationType, Role, TaskPriority
from dealflow.db.models import AutomatedTask, Deal, Notification
from dealflow.services import deal_service, idle_deal_service
from dealflow.utils.datetime_utils import ensure_utc, utc_now


def _add_deal(db, client_id, days_idle, status=DealStatus.IN_PROGRESS, name="Second"):
    deal = Deal(
        id=uuid.uuid4(),
        name=name,
        status=status.value,
        client_id=client_id,
        updated_at=utc_now() - timedelta(days=days_idle),
    )
    db.add(deal)
    db.commit()
    return deal


def test_idle_deal_alerts_client_broker_and_creates_task(db, idle_deal, client_profile, broker):
    stats = idle_deal_service.process_idle_deals(db)

    assert stats == {
        "idle_deals_found": 1,
        "notifications_created": 2,
        "tasks_created": 1,
        "errors": [],
    }

    notifications = db.query(Notification).all()
    assert {n.user_id for n in notifications} == {client_profile.id, broker.id}
    assert all(n.type == NotificationType.WARNING.value for n in notifications)
    broker_note = next(n for n in notifications if n.user_id == broker.id)
    assert broker_note.message == (
        'Cal Client\'s deal "Riverside Bridge" has been inactive for 7 days.'
    )

    task = db.query(AutomatedTask).one()
    assert task.title == "Review Idle Deal"
    assert task.assigned_to == broker.id
    assert task.priority == TaskPriority.HIGH.value
    assert abs(ensure_utc(task.due_date) - (utc_now() + timedelta(days=3))) < timedelta(minutes=1)


def test_second_scan_within_threshold_is_a_no_op(db, idle_deal):
    idle_deal_service.process_idle_deals(db)
    stats = idle_deal_service.process_idle_deals(db)

    assert stats["idle_deals_found"] == 1
    assert stats["notifications_created"] == 0
    assert stats["tasks_created"] == 0
    assert db.query(Notification).count() == 2
    assert db.query(AutomatedTask).count() == 1


def test_deal_alerts_again_after_threshold(db, idle_deal):
    idle_deal_service.process_idle_deals(db)

    stats = idle_deal_service.process_idle_deals(db, now=utc_now() + timedelta(days=8))

    assert stats["notifications_created"] == 2
    assert db.query(AutomatedTask).count() == 2


def test_client_without_broker_gets_the_task(db):
    loner = make_profile(db, Role.CLIENT, first_name="Lone")
    _add_deal(db, loner.id, days_idle=9)

    stats = idle_deal_service.process_idle_deals(db)

    assert stats["notifications_created"] == 1
    assert db.query(AutomatedTask).one().assigned_to == loner.id


def test_broker_message_needs_full_client_name(db, broker):
    partial = make_profile(db, Role.CLIENT, first_name="Pat", assigned_broker_id=broker.id)
    _add_deal(db, partial.id, days_idle=9, name="Harbour Refi")

    idle_deal_service.process_idle_deals(db)

    broker_note = db.query(Notification).filter(Notification.user_id == broker.id).one()
    assert broker_note.message == (
        'Client\'s deal "Harbour Refi" has been inactive for 7 days.'
    )


def test_recent_and_inactive_status_deals_are_ignored(db, client_profile):
    _add_deal(db, client_profile.id, days_idle=2, name="Fresh")
    _add_deal(db, client_profile.id, days_idle=30, status=DealStatus.COMPLETED, name="Done")

    stats = idle_deal_service.process_idle_deals(db)

    assert stats["idle_deals_found"] == 0
    assert db.query(Notification).count() == 0


def test_one_failing_deal_does_not_stop_the_batch(db, idle_deal, client_profile, monkeypatch):
    other = _add_deal(db, client_profile.id, days_idle=20)
    failing_id = idle_deal.id
    real_get_client = deal_service.get_client

    def flaky_get_client(session, deal):
        if deal.id == failing_id:
            raise RuntimeError("lookup failed")
        return real_get_client(session, deal)

    monkeypatch.setattr(deal_service, "get_client", flaky_get_client)

    stats = idle_deal_service.process_idle_deals(db)

    assert stats["idle_deals_found"] == 2
    assert stats["tasks_created"] == 1
    assert stats["errors"] == [{"deal_id": str(failing_id), "error": "lookup failed"}]
    assert db.query(AutomatedTask).one().deal_id == other.id
