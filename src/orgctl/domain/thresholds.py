"""Good/warning/critical bands for dashboard coloring.

Presentation only: no structural rule depends on these.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class Status(StrEnum):
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"
    NEUTRAL = "neutral"


STATUS_COLORS: dict[Status, str] = {
    Status.GOOD: "emerald",
    Status.WARNING: "amber",
    Status.CRITICAL: "red",
    Status.NEUTRAL: "slate",
}


class ThresholdRule(BaseModel):
    """Band limits for one metric. Both limits are inclusive."""

    model_config = {"frozen": True, "populate_by_name": True}

    good: float
    warning: float
    higher_is_better: bool = Field(default=False, alias="higherIsBetter")


DEFAULT_THRESHOLDS: dict[str, dict[str, Any]] = {
    "personalomsattning": {"good": 10, "warning": 15, "higherIsBetter": False},
    "sjukfranvaro": {"good": 3.5, "warning": 5, "higherIsBetter": False},
    "leveranstid": {"good": 3, "warning": 5, "higherIsBetter": False},
    "kundnojdhet": {"good": 85, "warning": 75, "higherIsBetter": True},
    "kvalitetsindex": {"good": 85, "warning": 75, "higherIsBetter": True},
    "kostnadsavvikelse": {"good": 0, "warning": 5, "higherIsBetter": False},
}


def parse_thresholds(data: Mapping[str, Any]) -> dict[str, ThresholdRule]:
    return {key: ThresholdRule.model_validate(raw) for key, raw in data.items()}


def classify(value: float | None, rule: ThresholdRule | None) -> Status:
    """Place *value* in a band; ``NEUTRAL`` when there is no value or no rule."""
    if value is None or rule is None:
        return Status.NEUTRAL
    if rule.higher_is_better:
        if value >= rule.good:
            return Status.GOOD
        if value >= rule.warning:
            return Status.WARNING
        return Status.CRITICAL
    if value <= rule.good:
        return Status.GOOD
    if value <= rule.warning:
        return Status.WARNING
    return Status.CRITICAL


def color_for(status: Status) -> str:
    return STATUS_COLORS.get(status, STATUS_COLORS[Status.NEUTRAL])
