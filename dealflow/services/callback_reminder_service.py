"""Staged reminders for scheduled callbacks.

Each pending callback gets up to three reminders (24h, 1h and 10m before).
At most one stage fires per pass, using disjoint windows. A stage is claimed
by flipping its flag with a conditional UPDATE before anything is sent, so
a reminder is delivered at most once even if scans overlap. If no scan lands
inside a window, that stage is skipped for good.
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy.orm import Session

from dealflow.core.config import settings
from dealflow.core.structured_logging import build_log_context
from dealflow.db.enums import CallbackStatus, NotificationType, ReminderStage
from dealflow.db.models import ScheduledCallback
from dealflow.services import notification_dispatcher
from dealflow.services.notification_dispatcher import EmailContent
from dealflow.utils.datetime_utils import ensure_utc, format_display_time, utc_now

logger = logging.getLogger(__name__)

LOOKAHEAD = timedelta(hours=24)


@dataclass(frozen=True)
class StageWindow:
    stage: ReminderStage
    flag: str
    lower: timedelta  # exclusive
    upper: timedelta  # inclusive
    label: str


# Checked in order; the first unsent stage whose window contains the lead time wins
STAGE_WINDOWS: tuple[StageWindow, ...] = (
    StageWindow(ReminderStage.H24, "reminder_24h_sent", timedelta(hours=23), timedelta(hours=24), "24 hours"),
    StageWindow(ReminderStage.H1, "reminder_1h_sent", timedelta(hours=0.83), timedelta(hours=1), "1 hour"),
    StageWindow(ReminderStage.M10, "reminder_10m_sent", timedelta(minutes=5), timedelta(minutes=10), "10 minutes"),
)


def select_stage(callback: ScheduledCallback, now: datetime) -> StageWindow | None:
    """Pick the reminder stage due for this callback right now, if any."""
    until = ensure_utc(callback.scheduled_at) - now
    for window in STAGE_WINDOWS:
        if getattr(callback, window.flag):
            continue
        if window.lower < until <= window.upper:
            return window
    return None


def find_upcoming_callbacks(session: Session, now: datetime) -> list[ScheduledCallback]:
    return (
        session.query(ScheduledCallback)
        .filter(
            ScheduledCallback.status == CallbackStatus.PENDING.value,
            ScheduledCallback.scheduled_at >= now,
            ScheduledCallback.scheduled_at <= now + LOOKAHEAD,
        )
        .order_by(ScheduledCallback.scheduled_at, ScheduledCallback.id)
        .all()
    )


def claim_stage(session: Session, callback_id: UUID, window: StageWindow) -> bool:
    """
    Flip the stage flag false -> true. Returns True only for the caller that flipped it.

    Commits immediately.
    """
    flag_column = getattr(ScheduledCallback, window.flag)
    updated = (
        session.query(ScheduledCallback)
        .filter(
            ScheduledCallback.id == callback_id,
            ScheduledCallback.status == CallbackStatus.PENDING.value,
            flag_column.is_(False),
        )
        .update({flag_column: True}, synchronize_session=False)
    )
    session.commit()
    return updated == 1


def _sms_body(callback: ScheduledCallback, label: str, when: str) -> str:
    body = f'Reminder: You have a scheduled callback "{callback.title}" in {label} at {when}'
    if callback.notes:
        body += f". Notes: {callback.notes}"
    return body


def _email(callback: ScheduledCallback, label: str, when: str) -> EmailContent:
    notes = ""
    if callback.notes:
        notes = f"<p><strong>Notes:</strong> {html.escape(callback.notes)}</p>"
    return EmailContent(
        subject=f"Callback Reminder: {callback.title}",
        html=(
            "<h2>Callback Reminder</h2>"
            f"<p>You have a scheduled callback <strong>{html.escape(callback.title)}</strong> "
            f"in {label}.</p>"
            f"<p><strong>When:</strong> {html.escape(when)}</p>"
            f"{notes}"
        ),
    )


def send_reminder(session: Session, callback: ScheduledCallback, window: StageWindow) -> int:
    """
    Deliver one reminder stage to both parties. Returns parties notified in-app.

    A failure for one party does not stop delivery to the other.
    """
    when = format_display_time(callback.scheduled_at, settings.REMINDER_DISPLAY_TIMEZONE)
    email = _email(callback, window.label, when)
    sms_body = _sms_body(callback, window.label, when)

    notified = 0
    for user_id in dict.fromkeys((callback.scheduled_by, callback.scheduled_with)):
        try:
            notification_dispatcher.dispatch(
                session,
                user_id=user_id,
                title="Callback Reminder",
                message=f'Callback "{callback.title}" is scheduled in {window.label} at {when}',
                notification_type=NotificationType.INFO,
                deal_id=callback.deal_id,
                email=email,
                sms_body=sms_body,
            )
            session.commit()
            notified += 1
        except Exception:
            session.rollback()
            logger.exception(
                f"Callback {window.stage.value} reminder failed for user {user_id}",
                extra=build_log_context(
                    user_id=user_id, callback_id=callback.id, job="callback_reminders"
                ),
            )
    return notified


def process_callback_reminders(session: Session, now: datetime | None = None) -> dict:
    """
    Fire due reminder stages for upcoming callbacks.

    Entry point for the scheduled reminder job.

    Returns summary stats: {processed, errors}
    """
    now = now or utc_now()
    callbacks = find_upcoming_callbacks(session, now)

    processed = 0
    errors = []

    for callback in callbacks:
        callback_id = callback.id
        try:
            window = select_stage(callback, now)
            if window is None:
                continue
            if not claim_stage(session, callback_id, window):
                logger.info(f"Callback {callback_id} {window.stage.value} already claimed")
                continue
            send_reminder(session, callback, window)
            processed += 1
        except Exception as e:
            session.rollback()
            logger.exception(
                f"Callback reminder failed for {callback_id}",
                extra=build_log_context(callback_id=callback_id, job="callback_reminders"),
            )
            errors.append({"callback_id": str(callback_id), "error": str(e)})

    return {"processed": processed, "errors": errors}
