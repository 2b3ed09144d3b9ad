"""Workflow engine adapters for deal-specific action behavior."""

import logging
from datetime import timedelta
from typing import Any, Protocol
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy.orm import Session

from dealflow.db.enums import WorkflowActionType
from dealflow.db.models import Deal, Profile, WorkflowRule
from dealflow.schemas.workflow import (
    ALLOWED_UPDATE_FIELDS,
    AssignBrokerAction,
    CreateTaskAction,
    SendNotificationAction,
    UpdateFieldAction,
    coerce_update_value,
    workflow_action_adapter,
)
from dealflow.services import activity_service, deal_service, notification_service, task_service
from dealflow.utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)


class WorkflowActionError(Exception):
    """An action could not be carried out; fails the enclosing rule."""


class WorkflowDomainAdapter(Protocol):
    def get_deal(self, db: Session, deal_id: UUID) -> Deal | None: ...

    def execute_action(
        self,
        db: Session,
        rule: WorkflowRule,
        action: Any,
        deal: Deal,
        event_data: dict,
    ) -> dict: ...


def _summarize_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "params")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


class DefaultWorkflowDomainAdapter:
    """Default adapter backed by deal, task and notification services."""

    KNOWN_ACTIONS = {action_type.value for action_type in WorkflowActionType}

    def get_deal(self, db: Session, deal_id: UUID) -> Deal | None:
        return deal_service.get_deal(db, deal_id)

    def execute_action(
        self,
        db: Session,
        rule: WorkflowRule,
        action: Any,
        deal: Deal,
        event_data: dict,
    ) -> dict:
        """
        Execute a single action.

        Returns a result dict. Unknown action types are skipped with a warning.

        Raises:
            WorkflowActionError: Malformed payload or the action could not complete
        """
        if not isinstance(action, dict):
            raise WorkflowActionError(f"Action must be an object, got {type(action).__name__}")

        action_type = action.get("type")
        if action_type not in self.KNOWN_ACTIONS:
            logger.warning(f"Unknown action type {action_type!r} in rule {rule.id}, skipping")
            return {
                "action_type": action_type,
                "success": True,
                "skipped": True,
                "description": f"Unknown action type: {action_type}",
            }

        try:
            parsed = workflow_action_adapter.validate_python(action)
        except ValidationError as exc:
            raise WorkflowActionError(
                f"Invalid {action_type} action: {_summarize_validation_error(exc)}"
            ) from exc

        if isinstance(parsed, CreateTaskAction):
            result = self._action_create_task(db, rule, parsed, deal, event_data)
        elif isinstance(parsed, SendNotificationAction):
            result = self._action_send_notification(db, parsed, deal)
        elif isinstance(parsed, UpdateFieldAction):
            result = self._action_update_field(db, parsed, deal)
        else:
            result = self._action_assign_broker(db, parsed, deal)

        result.setdefault("action_type", action_type)
        result.setdefault("success", True)
        return result

    def _action_create_task(
        self,
        db: Session,
        rule: WorkflowRule,
        action: CreateTaskAction,
        deal: Deal,
        event_data: dict,
    ) -> dict:
        """Create a task on the deal."""
        params = action.params

        assigned_to = params.assigned_to
        if assigned_to is None:
            triggered_by = event_data.get("triggered_by_user_id")
            assigned_to = (
                UUID(str(triggered_by))
                if triggered_by
                else deal_service.get_broker_id(db, deal) or deal.client_id
            )

        due_date = None
        if params.due_in_days is not None:
            due_date = utc_now() + timedelta(days=params.due_in_days)

        task = task_service.create_task(
            db,
            deal_id=deal.id,
            title=params.title,
            description=params.description,
            assigned_to=assigned_to,
            priority=params.priority,
            due_date=due_date,
            workflow_rule_id=rule.id,
        )
        return {"task_id": str(task.id), "description": f"Created task '{task.title}'"}

    def _action_send_notification(
        self,
        db: Session,
        action: SendNotificationAction,
        deal: Deal,
    ) -> dict:
        """Send in-app notification to the deal's client and/or broker."""
        params = action.params

        user_ids: list[UUID] = []
        if params.notify_client:
            user_ids.append(deal.client_id)
        if params.notify_broker:
            broker_id = deal_service.get_broker_id(db, deal)
            if broker_id and broker_id not in user_ids:
                user_ids.append(broker_id)

        for user_id in user_ids:
            notification_service.create_notification(
                db,
                user_id=user_id,
                title=params.title,
                message=params.message,
                type=params.notification_type,
                deal_id=deal.id,
            )

        return {
            "recipients": [str(u) for u in user_ids],
            "description": f"Sent notification to {len(user_ids)} recipient(s)",
        }

    def _action_update_field(
        self,
        db: Session,
        action: UpdateFieldAction,
        deal: Deal,
    ) -> dict:
        """Update one allow-listed field on the deal."""
        field = action.params.field
        if field not in ALLOWED_UPDATE_FIELDS:
            raise WorkflowActionError(f"Field '{field}' is not allowed for update")

        try:
            value = coerce_update_value(field, action.params.value)
        except ValueError as exc:
            raise WorkflowActionError(str(exc)) from exc

        setattr(deal, field, value)
        deal.updated_at = utc_now()
        activity_service.log_field_updated(db, deal_id=deal.id, field=field, value=value)
        db.flush()
        return {"field": field, "description": f"Updated {field}"}

    def _action_assign_broker(
        self,
        db: Session,
        action: AssignBrokerAction,
        deal: Deal,
    ) -> dict:
        """Point the deal's client at a new broker. The deal row is untouched."""
        broker_id = action.params.broker_id

        broker = db.query(Profile.id).filter(Profile.id == broker_id).first()
        if not broker:
            raise WorkflowActionError(f"Broker {broker_id} not found")

        client = deal_service.get_client(db, deal)
        if not client:
            raise WorkflowActionError(f"Client profile {deal.client_id} not found")

        previous = client.assigned_broker_id
        client.assigned_broker_id = broker_id
        activity_service.log_broker_assigned(
            db, deal_id=deal.id, broker_id=broker_id, previous_broker_id=previous
        )
        db.flush()
        return {"broker_id": str(broker_id), "description": f"Assigned broker {broker_id}"}
