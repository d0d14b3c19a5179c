"""BaseService — foundation for all orgctl services.

Every service receives a :class:`Workspace` at construction time and owns
its read-mutate-validate-write cycle against the organization document.
Domain and persistence exceptions stop here: they are converted into
failed :class:`ServiceResult` values and never reach the CLI.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import pydantic

from orgctl.domain.errors import NotFoundError, OrgError, ValidationError
from orgctl.domain.models import OrgUnit
from orgctl.domain.tree import find_by_id
from orgctl.domain.validation import TreeValidator
from orgctl.infrastructure.storage import ConflictError, PersistenceError
from orgctl.services.result import (
    CONFLICT,
    NOT_FOUND,
    PERSISTENCE_ERROR,
    VALIDATION_ERROR,
    ServiceError,
    ServiceResult,
)

if TYPE_CHECKING:
    from orgctl.infrastructure.workspace import Workspace

logger = logging.getLogger(__name__)


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class MyService(BaseService):
            def op(self) -> ServiceResult:
                try:
                    root, revision = self._load()
                    ...
                except (OrgError, PersistenceError) as exc:
                    return self._failure("op", exc)
                return self._success("op", {...})
    """

    def __init__(self, workspace: Workspace) -> None:
        self._workspace = workspace

    @property
    def validator(self) -> TreeValidator:
        return TreeValidator(self._workspace.type_rules, root_id=self._workspace.root_id)

    # ------------------------------------------------------------------
    # Document access
    # ------------------------------------------------------------------

    def _load(self) -> tuple[OrgUnit, str]:
        """Read the stored tree and the revision it was read at."""
        stored = self._workspace.store.read()
        try:
            root = OrgUnit.from_document(stored.data)
        except pydantic.ValidationError as exc:
            msg = f"Invalid organization document: {exc.error_count()} errors"
            raise PersistenceError(msg) from exc
        return root, stored.revision

    def _require_unit(self, root: OrgUnit, unit_id: str) -> OrgUnit:
        unit = find_by_id(root, unit_id)
        if unit is None:
            raise NotFoundError(f"Unit {unit_id} not found", unit_id=unit_id)
        return unit

    def _save(self, root: OrgUnit, revision: str) -> None:
        self._workspace.store.write_document(root.to_document(), expected_revision=revision)

    # ------------------------------------------------------------------
    # Result construction
    # ------------------------------------------------------------------

    @staticmethod
    def _success(
        op: str,
        data: dict[str, Any],
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings or [])

    @staticmethod
    def _failure(op: str, exc: OrgError | PersistenceError) -> ServiceResult:
        """Map a domain or persistence exception to a failed result."""
        if isinstance(exc, ValidationError):
            error = ServiceError(
                code=VALIDATION_ERROR,
                message="; ".join(exc.issues),
                detail={"issues": exc.issues},
            )
        elif isinstance(exc, NotFoundError):
            detail = {"id": exc.unit_id} if exc.unit_id else {}
            error = ServiceError(code=NOT_FOUND, message=str(exc), detail=detail)
        elif isinstance(exc, ConflictError):
            error = ServiceError(code=CONFLICT, message=str(exc))
        elif isinstance(exc, PersistenceError):
            logger.error("%s failed: %s", op, exc)
            error = ServiceError(code=PERSISTENCE_ERROR, message=str(exc))
        else:
            error = ServiceError(code=VALIDATION_ERROR, message=str(exc))
        return ServiceResult(ok=False, op=op, error=error)
