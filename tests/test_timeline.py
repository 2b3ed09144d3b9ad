"""Tests for the deal timeline projection."""

import uuid
from datetime import timedelta

import pytest

from dealflow.db.enums import TimelineEventType
from dealflow.db.models import CommunicationLog, DealActivityLog
from dealflow.services import timeline_service
from dealflow.services.timeline_service import render_activity
from dealflow.utils.datetime_utils import utc_now


@pytest.fixture
def timeline_rows(db, deal, broker):
    now = utc_now()
    rows = [
        CommunicationLog(
            id=uuid.uuid4(),
            deal_id=deal.id,
            user_id=broker.id,
            communication_type="call",
            direction="outbound",
            content="Discussed valuation",
            duration_seconds=300,
            created_at=now - timedelta(hours=3),
        ),
        CommunicationLog(
            id=uuid.uuid4(),
            deal_id=deal.id,
            user_id=broker.id,
            communication_type="whatsapp",
            direction="outbound",
            content="Docs please",
            created_at=now - timedelta(hours=4),
        ),
        DealActivityLog(
            id=uuid.uuid4(),
            deal_id=deal.id,
            user_id=None,
            action="status_changed",
            event_type="status_change",
            details={"from": "draft", "to": "final_underwriting"},
            created_at=now - timedelta(hours=1),
        ),
        # Written before event_type was stored
        DealActivityLog(
            id=uuid.uuid4(),
            deal_id=deal.id,
            user_id=broker.id,
            action="document_upload",
            event_type=None,
            details={"file_name": "payslip.pdf"},
            created_at=now - timedelta(hours=2),
        ),
    ]
    db.add_all(rows)
    db.commit()
    return rows


def test_timeline_merges_sources_newest_first(db, deal, timeline_rows):
    events = timeline_service.build_timeline(db, deal.id)

    assert [e.type for e in events] == [
        TimelineEventType.STATUS_CHANGE,
        TimelineEventType.DOCUMENT,
        TimelineEventType.CALL,
        TimelineEventType.SMS,
    ]
    assert [e.source for e in events] == ["activity", "activity", "communication", "communication"]
    assert all(a.created_at >= b.created_at for a, b in zip(events, events[1:]))


def test_timeline_renders_content_and_actors(db, deal, timeline_rows):
    events = timeline_service.build_timeline(db, deal.id)

    status_event = events[0]
    assert status_event.content == 'Status changed from "Draft" to "Final Underwriting"'
    assert status_event.actor_name == "System"
    assert events[2].actor_name == "Bea Broker"
    assert events[2].content == "Discussed valuation"
    assert events[2].metadata["duration_seconds"] == 300


def test_timeline_is_rebuildable(db, deal, timeline_rows):
    first = timeline_service.build_timeline(db, deal.id)
    second = timeline_service.build_timeline(db, deal.id)

    assert [e.model_dump() for e in first] == [e.model_dump() for e in second]
    assert db.query(DealActivityLog).count() == 2


def test_stored_event_type_wins_over_action_name(db, deal):
    db.add(
        DealActivityLog(
            deal_id=deal.id,
            action="document_status_note",
            event_type="note",
            details={},
        )
    )
    db.commit()

    events = timeline_service.build_timeline(db, deal.id)
    assert events[0].type == TimelineEventType.NOTE


def test_render_activity_accepts_legacy_status_keys():
    assert render_activity(
        "status_change", {"old_status": "awaiting_dip", "new_status": "dip_approved"}
    ) == 'Status changed from "Awaiting Dip" to "Dip Approved"'


def test_render_activity_falls_back_to_action_name():
    assert render_activity("broker_assigned", {}) == "Broker assigned"


@pytest.mark.parametrize(
    "details, expected",
    [
        ({"title": "Checklist:"}, "Task created: Checklist:"),
        ({"title": ""}, "Task created"),
        ({}, "Task created"),
    ],
)
def test_render_task_created_keeps_title_verbatim(details, expected):
    assert render_activity("task_created", details) == expected


def test_empty_timeline(db, deal):
    assert timeline_service.build_timeline(db, deal.id) == []


@pytest.mark.asyncio
async def test_timeline_endpoint(client, db, deal, timeline_rows):
    response = await client.get(f"/deals/{deal.id}/timeline")

    assert response.status_code == 200
    body = response.json()
    assert len(body) == 4
    assert body[0]["type"] == "status_change"


@pytest.mark.asyncio
async def test_timeline_endpoint_unknown_deal(client, db):
    response = await client.get(f"/deals/{uuid.uuid4()}/timeline")
    assert response.status_code == 404
