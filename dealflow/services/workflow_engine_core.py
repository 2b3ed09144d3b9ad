"""Workflow engine core - matches rules to trigger events and executes their actions."""

import logging
import time
from uuid import UUID

from sqlalchemy.orm import Session

from dealflow.core.structured_logging import build_log_context
from dealflow.db.enums import WorkflowExecutionStatus, WorkflowTriggerType
from dealflow.db.models import Deal, WorkflowExecution, WorkflowRule
from dealflow.services.workflow_engine_adapters import WorkflowDomainAdapter

logger = logging.getLogger(__name__)


class WorkflowEngineCore:
    """
    Core workflow execution engine.

    Every matching active rule fires. Actions run in declared order and stop
    at the first failure; the failure is contained to that rule. One
    WorkflowExecution row is written per fired rule.
    """

    def __init__(self, adapter: WorkflowDomainAdapter) -> None:
        self.adapter = adapter

    def trigger(
        self,
        db: Session,
        trigger_type: WorkflowTriggerType,
        deal_id: UUID,
        event_data: dict,
    ) -> list[WorkflowExecution]:
        """
        Trigger rules for an event on a deal.

        Returns list of execution records created.
        """
        deal = self.adapter.get_deal(db, deal_id)
        if not deal:
            logger.warning(f"Deal {deal_id} not found, skipping {trigger_type.value} rules")
            return []

        executions = []
        for rule in self._find_matching_rules(db, trigger_type, event_data):
            try:
                execution = self._execute_rule(db, rule, deal, event_data)
            except Exception:
                db.rollback()
                logger.exception(
                    f"Rule {rule.id} could not be recorded",
                    extra=build_log_context(deal_id=deal_id, rule_id=rule.id),
                )
                continue
            executions.append(execution)

        return executions

    def _find_matching_rules(
        self,
        db: Session,
        trigger_type: WorkflowTriggerType,
        event_data: dict,
    ) -> list[WorkflowRule]:
        """Find active rules whose trigger conditions match the event."""
        rules = (
            db.query(WorkflowRule)
            .filter(
                WorkflowRule.trigger_type == trigger_type.value,
                WorkflowRule.is_active.is_(True),
            )
            .order_by(WorkflowRule.created_at, WorkflowRule.id)
            .all()
        )
        return [rule for rule in rules if self._trigger_matches(rule, trigger_type, event_data)]

    def _trigger_matches(
        self,
        rule: WorkflowRule,
        trigger_type: WorkflowTriggerType,
        event_data: dict,
    ) -> bool:
        """Check if the rule's trigger conditions match the event data."""
        conditions = rule.trigger_conditions or {}

        if trigger_type == WorkflowTriggerType.STATUS_CHANGE:
            from_status = conditions.get("from_status")
            to_status = conditions.get("to_status")

            if from_status and str(event_data.get("old_status")) != str(from_status):
                return False
            if to_status and str(event_data.get("new_status")) != str(to_status):
                return False
            return True

        return False

    def _execute_rule(
        self,
        db: Session,
        rule: WorkflowRule,
        deal: Deal,
        event_data: dict,
    ) -> WorkflowExecution:
        """Run a rule's actions and log the result."""
        start_time = time.time()
        action_results: list[dict] = []
        error_message: str | None = None

        for idx, action in enumerate(rule.actions or []):
            try:
                # Savepoint per action: a failed action leaves no partial writes
                with db.begin_nested():
                    result = self.adapter.execute_action(
                        db=db,
                        rule=rule,
                        action=action,
                        deal=deal,
                        event_data=event_data,
                    )
            except Exception as exc:
                error_message = str(exc) or exc.__class__.__name__
                action_results.append(
                    {
                        "action_type": action.get("type") if isinstance(action, dict) else None,
                        "success": False,
                        "error": error_message,
                    }
                )
                logger.warning(
                    f"Rule {rule.id} action {idx} failed: {error_message}",
                    extra=build_log_context(deal_id=deal.id, rule_id=rule.id),
                )
                break
            action_results.append(result)

        execution = WorkflowExecution(
            workflow_rule_id=rule.id,
            deal_id=deal.id,
            trigger_data={
                "old_status": event_data.get("old_status"),
                "new_status": event_data.get("new_status"),
            },
            actions_executed=action_results,
            status=(
                WorkflowExecutionStatus.SUCCESS.value
                if error_message is None
                else WorkflowExecutionStatus.FAILED.value
            ),
            error_message=error_message,
            duration_ms=int((time.time() - start_time) * 1000),
        )
        db.add(execution)
        db.commit()

        logger.info(
            f"Rule {rule.id} ({rule.name}) {execution.status} for deal {deal.id}",
            extra=build_log_context(deal_id=deal.id, rule_id=rule.id),
        )
        return execution


def count_completed_actions(executions: list[WorkflowExecution]) -> int:
    """Actions actually performed across successful executions (skips excluded)."""
    total = 0
    for execution in executions:
        if execution.status != WorkflowExecutionStatus.SUCCESS.value:
            continue
        total += sum(
            1
            for result in execution.actions_executed or []
            if result.get("success") and not result.get("skipped")
        )
    return total
