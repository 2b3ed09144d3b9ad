"""Deal timeline - a read-only merge of communication and activity logs.

Output depends only on the rows currently stored for the deal, so it can be
rebuilt at any time.
"""

from uuid import UUID

from sqlalchemy.orm import Session

from dealflow.db.enums import ActivityAction, CommunicationType, TimelineEventType
from dealflow.db.models import CommunicationLog, DealActivityLog, Profile
from dealflow.schemas.timeline import TimelineEvent
from dealflow.utils.datetime_utils import ensure_utc
from dealflow.utils.text import display_name, humanize_status


COMMUNICATION_EVENT_TYPES: dict[str, TimelineEventType] = {
    CommunicationType.CALL.value: TimelineEventType.CALL,
    CommunicationType.EMAIL.value: TimelineEventType.EMAIL,
    CommunicationType.SMS.value: TimelineEventType.SMS,
    CommunicationType.WHATSAPP.value: TimelineEventType.SMS,
    CommunicationType.NOTE.value: TimelineEventType.NOTE,
}

SYSTEM_ACTOR = "System"


def _infer_event_type(action: str) -> TimelineEventType:
    """Only for activity rows written before event_type was stored."""
    lowered = action.lower()
    if "status" in lowered:
        return TimelineEventType.STATUS_CHANGE
    if "document" in lowered or "upload" in lowered:
        return TimelineEventType.DOCUMENT
    return TimelineEventType.NOTE


def _activity_event_type(row: DealActivityLog) -> TimelineEventType:
    if row.event_type:
        try:
            return TimelineEventType(row.event_type)
        except ValueError:
            pass
    return _infer_event_type(row.action)


def render_activity(action: str, details: dict | None) -> str:
    """Human-readable line for an activity row."""
    details = details or {}

    if action in (ActivityAction.STATUS_CHANGED.value, "status_change"):
        old = details.get("from", details.get("old_status"))
        new = details.get("to", details.get("new_status"))
        return f'Status changed from "{humanize_status(old)}" to "{humanize_status(new)}"'
    if action == ActivityAction.DOCUMENT_UPLOADED.value:
        return f"Uploaded document: {details.get('file_name') or 'file'}"
    if action == ActivityAction.DOCUMENT_APPROVED.value:
        return "Document approved"
    if action == ActivityAction.DOCUMENT_REJECTED.value:
        return f"Document rejected: {details.get('reason') or 'No reason provided'}"
    if action == ActivityAction.MESSAGE_SENT.value:
        return details.get("preview") or "Posted an update"
    if action == ActivityAction.TASK_CREATED.value:
        title = details.get("title")
        return f"Task created: {title}" if title else "Task created"
    if action == ActivityAction.TASK_COMPLETED.value:
        title = details.get("title")
        return f"Task completed: {title}" if title else "Task completed"
    if action == ActivityAction.FIELD_UPDATED.value and details.get("field"):
        return f"Updated {details['field'].replace('_', ' ')} to {details.get('value')}"
    if action == ActivityAction.CALLBACK_SCHEDULED.value and details.get("title"):
        return f"Callback scheduled: {details['title']}"
    return action.replace("_", " ").capitalize()


def render_communication(row: CommunicationLog) -> str:
    return row.content or row.subject or f"{row.communication_type} communication"


def _actor_names(db: Session, user_ids: set[UUID]) -> dict[UUID, str]:
    """Batch profile lookup for display names."""
    if not user_ids:
        return {}
    rows = (
        db.query(Profile.id, Profile.first_name, Profile.last_name, Profile.email)
        .filter(Profile.id.in_(user_ids))
        .all()
    )
    return {row.id: display_name(row.first_name, row.last_name, row.email) for row in rows}


def build_timeline(db: Session, deal_id: UUID) -> list[TimelineEvent]:
    """All timeline events for a deal, newest first."""
    communications = db.query(CommunicationLog).filter(CommunicationLog.deal_id == deal_id).all()
    activities = db.query(DealActivityLog).filter(DealActivityLog.deal_id == deal_id).all()

    actor_ids = {r.user_id for r in communications if r.user_id}
    actor_ids |= {r.user_id for r in activities if r.user_id}
    names = _actor_names(db, actor_ids)

    def actor_name(user_id: UUID | None) -> str:
        if user_id is None:
            return SYSTEM_ACTOR
        return names.get(user_id, "Unknown user")

    events: list[TimelineEvent] = []

    for row in communications:
        events.append(
            TimelineEvent(
                id=row.id,
                source="communication",
                type=COMMUNICATION_EVENT_TYPES.get(row.communication_type, TimelineEventType.NOTE),
                content=render_communication(row),
                actor_id=row.user_id,
                actor_name=actor_name(row.user_id),
                created_at=ensure_utc(row.created_at),
                metadata={
                    "communication_type": row.communication_type,
                    "direction": row.direction,
                    "subject": row.subject,
                    "status": row.status,
                    "duration_seconds": row.duration_seconds,
                },
            )
        )

    for row in activities:
        events.append(
            TimelineEvent(
                id=row.id,
                source="activity",
                type=_activity_event_type(row),
                content=render_activity(row.action, row.details),
                actor_id=row.user_id,
                actor_name=actor_name(row.user_id),
                created_at=ensure_utc(row.created_at),
                metadata={"action": row.action, "details": row.details or {}},
            )
        )

    events.sort(key=lambda e: (e.created_at, str(e.id)), reverse=True)
    return events
