"""Tests for telemetry primitives: Span, trace_span, @traced."""

from __future__ import annotations

import time
from collections.abc import Generator

import pytest

from orgctl.services.result import ServiceError, ServiceResult
from orgctl.services.telemetry import (
    Span,
    _active,
    disable_telemetry,
    enable_telemetry,
    trace_span,
    traced,
)


@pytest.fixture(autouse=True)
def _reset_telemetry_state() -> Generator[None]:
    """Ensure clean telemetry state for every test."""
    yield
    disable_telemetry()
    _active.set(None)


class _Tracked:
    @traced
    def move(self) -> ServiceResult:
        with trace_span("mutate", op="move_unit", unit="ops-stab", target=None):
            pass
        return ServiceResult(ok=True, op="move_unit")

    @traced
    def missing(self) -> ServiceResult:
        error = ServiceError(code="NOT_FOUND", message="Unit nope not found")
        return ServiceResult(ok=False, op="get_unit", error=error)

    @traced
    def plain(self) -> int:
        return 42

    @traced
    def explode(self) -> ServiceResult:
        raise RuntimeError("boom")


class TestSpan:
    def test_open_span_has_no_duration(self) -> None:
        assert Span("read").duration_ms == 0.0

    def test_close_records_duration(self) -> None:
        span = Span("read")
        time.sleep(0.005)
        span.close()
        assert span.duration_ms > 0

    def test_to_dict_minimal(self) -> None:
        d = Span("read").to_dict()
        assert d == {"name": "read", "duration_ms": 0.0}

    def test_to_dict_nested(self) -> None:
        root = Span("OrganizationService.delete_unit")
        root.children.append(Span("mutate", {"unit": "it-drift"}))
        d = root.to_dict()
        assert d["children"][0] == {
            "name": "mutate",
            "duration_ms": 0.0,
            "attrs": {"unit": "it-drift"},
        }


class TestTraceSpan:
    def test_disabled_yields_none(self) -> None:
        with trace_span("mutate") as span:
            assert span is None

    def test_outside_traced_call_yields_none(self) -> None:
        enable_telemetry()
        with trace_span("mutate") as span:
            assert span is None


class TestTraced:
    def test_disabled_leaves_meta_alone(self) -> None:
        result = _Tracked().move()
        assert result.meta is None

    def test_enabled_injects_span_tree(self) -> None:
        enable_telemetry()
        result = _Tracked().move()
        telemetry = result.meta["telemetry"]  # type: ignore[index]
        assert telemetry["name"] == "_Tracked.move"
        assert "attrs" not in telemetry
        assert telemetry["children"][0]["name"] == "mutate"
        # None-valued attributes are dropped
        assert telemetry["children"][0]["attrs"] == {"op": "move_unit", "unit": "ops-stab"}

    def test_failed_result_records_error_code(self) -> None:
        enable_telemetry()
        result = _Tracked().missing()
        assert result.meta["telemetry"]["attrs"] == {"error": "NOT_FOUND"}  # type: ignore[index]

    def test_non_result_return_passes_through(self) -> None:
        enable_telemetry()
        assert _Tracked().plain() == 42

    def test_exception_propagates_and_resets_span(self) -> None:
        enable_telemetry()
        with pytest.raises(RuntimeError, match="boom"):
            _Tracked().explode()
        assert _active.get() is None
