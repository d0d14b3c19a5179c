"""Shared service-layer helper functions."""

from __future__ import annotations

from datetime import UTC, datetime


def now_iso() -> str:
    """Current UTC time as standard ISO 8601 (stamped on every ServiceResult)."""
    return datetime.now(UTC).isoformat()
