"""Timing spans for service calls.

Collection is off unless ``--verbose`` turned it on; a disabled hook costs
one ContextVar lookup. A ``@traced`` service method becomes the root span,
``trace_span`` blocks inside it become children tagged with the op, unit
or revision they worked on, and the finished tree lands in
``ServiceResult.meta["telemetry"]``.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from orgctl.services.result import ServiceResult

log = structlog.get_logger("orgctl.telemetry")

_enabled: ContextVar[bool] = ContextVar("orgctl_telemetry", default=False)
_active: ContextVar[Span | None] = ContextVar("orgctl_active_span", default=None)

_P = ParamSpec("_P")
_R = TypeVar("_R")


@dataclass
class Span:
    """One timed step. *attrs* are fixed when the span opens."""

    name: str
    attrs: dict[str, Any] = field(default_factory=dict)
    children: list[Span] = field(default_factory=list)
    started: float = field(default_factory=time.perf_counter)
    duration_ms: float = 0.0

    def close(self) -> None:
        self.duration_ms = (time.perf_counter() - self.started) * 1000

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.attrs:
            data["attrs"] = self.attrs
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data


@contextmanager
def _activate(span: Span) -> Iterator[Span]:
    token = _active.set(span)
    try:
        yield span
    finally:
        span.close()
        _active.reset(token)


@contextmanager
def trace_span(name: str, **attrs: Any) -> Iterator[Span | None]:
    """Time a step of the current traced call.

    Attributes given as ``None`` are left out. Yields None outside a traced
    call or with telemetry off.
    """
    parent = _active.get() if _enabled.get() else None
    if parent is None:
        yield None
        return
    child = Span(name, {key: value for key, value in attrs.items() if value is not None})
    parent.children.append(child)
    with _activate(child):
        yield child


def _attach(result: ServiceResult, span: Span) -> ServiceResult:
    if result.error is not None:
        span.attrs["error"] = result.error.code
    meta = {**(result.meta or {}), "telemetry": span.to_dict()}
    return result.model_copy(update={"meta": meta})


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Run a service method as a root span when telemetry is on."""

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)

        span = Span(func.__qualname__)
        try:
            with _activate(span):
                result = func(*args, **kwargs)
        except Exception:
            log.debug("span.complete", span_name=span.name, ok=False)
            raise

        if not isinstance(result, ServiceResult):
            return result
        log.debug(
            "span.complete",
            span_name=span.name,
            op=result.op,
            ok=result.ok,
            duration_ms=round(span.duration_ms, 2),
        )
        return _attach(result, span)  # type: ignore[return-value]

    return wrapper


def enable_telemetry() -> None:
    """Turn on span collection (``--verbose``)."""
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)
