"""Session identifier helpers."""

from __future__ import annotations

from datetime import datetime, timezone

from civic_requests.common.constants import GENERATED_KEY_PREFIX


def generate_session_id() -> str:
    now = datetime.now(tz=timezone.utc)
    # Sortable id without external dependency.
    return now.strftime("session-%Y%m%dT%H%M%S%fZ")


def generated_unique_key(index: int) -> str:
    return f"{GENERATED_KEY_PREFIX}{index}"
