"""Domain exceptions raised by the validator and the mutator.

The service layer converts these into :class:`ServiceResult` failures.
"""

from __future__ import annotations


class OrgError(Exception):
    """Base class for organization-tree errors."""


class ValidationError(OrgError):
    """A field-level or structural rule was violated.

    Always carries the complete list of human-readable issues.
    """

    def __init__(self, issues: list[str]) -> None:
        self.issues = list(issues)
        super().__init__("; ".join(self.issues))


class NotFoundError(OrgError):
    """A referenced unit, parent, or target does not exist in the tree."""

    def __init__(self, message: str, *, unit_id: str | None = None) -> None:
        self.unit_id = unit_id
        super().__init__(message)
