"""Shared httpx client factory for outbound integrations."""

from __future__ import annotations

import httpx

from dealflow.core.config import settings


def build_client() -> httpx.Client:
    """Single-attempt client; every integration call gets the same timeout."""
    return httpx.Client(timeout=settings.EXTERNAL_CALL_TIMEOUT_SECONDS)


def error_detail(response: httpx.Response) -> str | None:
    """Best-effort parse of a provider error body."""
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict):
        detail = data.get("message") or data.get("error")
        if isinstance(detail, str):
            return detail
    return None
