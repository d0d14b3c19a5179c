"""OrgUnit tree model and the create/update input schemas.

``OrgUnit`` is deliberately lax: a stored document with bad data must still
load so that :meth:`TreeValidator.validate_organization` can report every
problem. Field rules live on :class:`UnitCreate` and :class:`UnitUpdate`.

INVARIANT: ``id`` is permanent. Once created, a unit's ID never changes.
"""

from __future__ import annotations

import re
from typing import Any

import pydantic
from pydantic import BaseModel, Field, field_validator

from orgctl.domain.errors import ValidationError

UNIT_ID_PATTERN = re.compile(r"^[a-z0-9-]+$")
COST_CENTER_PATTERN = re.compile(r"^\d{4}$")

NAME_MAX_LENGTH = 100
MANAGER_MAX_LENGTH = 100


class OrgUnit(BaseModel):
    """A node in the organization tree.

    Children are owned exclusively by their parent; the mutator is the only
    code that reshapes ``children``.
    """

    model_config = {"populate_by_name": True}

    id: str
    name: str
    type: str
    cost_center: str = Field(alias="costCenter")
    manager: str | None = None
    children: list[OrgUnit] = Field(default_factory=list)

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def summary(self) -> dict[str, Any]:
        """Flat view without children (used in service payloads)."""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "cost_center": self.cost_center,
            "manager": self.manager,
            "child_count": len(self.children),
        }

    def to_document(self) -> dict[str, Any]:
        """Serialize to the persisted JSON shape.

        ``manager`` is omitted when unset and ``children`` for leaves.
        """
        doc: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "costCenter": self.cost_center,
        }
        if self.manager is not None:
            doc["manager"] = self.manager
        if self.children:
            doc["children"] = [child.to_document() for child in self.children]
        return doc

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> OrgUnit:
        return cls.model_validate(data)


def _check_unit_id(value: str) -> str:
    if not UNIT_ID_PATTERN.match(value):
        msg = "ID may only contain lowercase letters, digits and hyphens"
        raise ValueError(msg)
    return value


def _check_cost_center(value: str) -> str:
    if not COST_CENTER_PATTERN.match(value):
        msg = "Cost center must be exactly 4 digits"
        raise ValueError(msg)
    return value


class UnitCreate(BaseModel):
    """Input schema for creating a unit."""

    model_config = {"frozen": True, "populate_by_name": True}

    id: str
    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    type: str = Field(min_length=1)
    cost_center: str = Field(alias="costCenter")
    manager: str | None = Field(default=None, max_length=MANAGER_MAX_LENGTH)

    @field_validator("id")
    @classmethod
    def _validate_id(cls, value: str) -> str:
        return _check_unit_id(value)

    @field_validator("cost_center")
    @classmethod
    def _validate_cost_center(cls, value: str) -> str:
        return _check_cost_center(value)

    def to_unit(self) -> OrgUnit:
        return OrgUnit(
            id=self.id,
            name=self.name,
            type=self.type,
            cost_center=self.cost_center,
            manager=self.manager or None,
        )


class UnitUpdate(BaseModel):
    """Input schema for a partial update.

    Convention: an omitted field, or one given as ``None``, is left
    untouched. ``manager=""`` clears the manager.
    Unknown keys, ``id`` included, are rejected rather than dropped.
    """

    model_config = {"frozen": True, "populate_by_name": True, "extra": "forbid"}

    name: str | None = Field(default=None, min_length=1, max_length=NAME_MAX_LENGTH)
    type: str | None = Field(default=None, min_length=1)
    cost_center: str | None = Field(default=None, alias="costCenter")
    manager: str | None = Field(default=None, max_length=MANAGER_MAX_LENGTH)

    @field_validator("cost_center")
    @classmethod
    def _validate_cost_center(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _check_cost_center(value)

    def changes(self) -> dict[str, str]:
        """Fields explicitly supplied with a non-None value."""
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None
        }


def field_issues(exc: pydantic.ValidationError) -> list[str]:
    """Flatten a pydantic error into one ``field: message`` line per problem."""
    issues: list[str] = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ())) or "input"
        if err.get("type") == "value_error" and "error" in err.get("ctx", {}):
            message = str(err["ctx"]["error"])
        elif err.get("type") == "extra_forbidden":
            message = "not an updatable field"
        else:
            message = err.get("msg", "invalid value")
        issues.append(f"{loc}: {message}")
    return issues


def parse_create(fields: dict[str, Any]) -> UnitCreate:
    """Validate raw create input, raising :class:`ValidationError` with all field issues."""
    try:
        return UnitCreate.model_validate(fields)
    except pydantic.ValidationError as exc:
        raise ValidationError(field_issues(exc)) from exc


def parse_update(fields: dict[str, Any]) -> UnitUpdate:
    """Validate raw update input, raising :class:`ValidationError` with all field issues."""
    try:
        return UnitUpdate.model_validate(fields)
    except pydantic.ValidationError as exc:
        raise ValidationError(field_issues(exc)) from exc
