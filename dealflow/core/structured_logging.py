"""Structured logging helpers."""

from typing import Any
from uuid import UUID


def build_log_context(
    *,
    user_id: UUID | str | None = None,
    deal_id: UUID | str | None = None,
    rule_id: UUID | str | None = None,
    callback_id: UUID | str | None = None,
    job: str | None = None,
) -> dict[str, Any]:
    """Return a log context dict for ``extra=``; ids are stringified, empty values dropped."""
    context: dict[str, Any] = {}
    if user_id:
        context["user_id"] = str(user_id)
    if deal_id:
        context["deal_id"] = str(deal_id)
    if rule_id:
        context["rule_id"] = str(rule_id)
    if callback_id:
        context["callback_id"] = str(callback_id)
    if job:
        context["job"] = job
    return context
