"""ServiceResult and ServiceError — the universal service contract.

INVARIANT: All service-layer methods return ServiceResult.
The CLI and any future interface (e.g. an HTTP adapter) consume this type.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from orgctl.services._helpers import now_iso

# Error codes. Validation and not-found are client errors; the rest are
# internal failures and map to a different exit status in the CLI.
VALIDATION_ERROR = "VALIDATION_ERROR"
NOT_FOUND = "NOT_FOUND"
CONFLICT = "CONFLICT"
PERSISTENCE_ERROR = "PERSISTENCE_ERROR"

CLIENT_ERROR_CODES = frozenset({VALIDATION_ERROR, NOT_FOUND})


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_client_error(self) -> bool:
        return self.code in CLIENT_ERROR_CODES


class ServiceResult(BaseModel):
    """Universal return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"create_unit"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (timing spans, counts, etc.).
        timestamp: UTC ISO time the result was produced.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None
    timestamp: str = Field(default_factory=now_iso)
