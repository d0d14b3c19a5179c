"""Type Rules — which unit types may nest under which, and at what depth.

A pure lookup table. Loaded once at startup (see
:mod:`orgctl.config.tables`) and injected into the validator.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from pydantic import BaseModel, Field

# Code-baked defaults; an ``[organization] types_file`` replaces them wholesale.
DEFAULT_TYPE_RULES: dict[str, dict[str, Any]] = {
    "koncern": {"label": "Koncern", "allowedChildren": ["division"], "allowedAtDepth": [0]},
    "division": {
        "label": "Division",
        "allowedChildren": ["avdelning", "stab", "enhet"],
        "allowedAtDepth": [1],
    },
    "stab": {"label": "Stab", "allowedChildren": ["enhet"], "allowedAtDepth": [2]},
    "avdelning": {
        "label": "Avdelning",
        "allowedChildren": ["enhet", "sektion"],
        "allowedAtDepth": [2],
    },
    "enhet": {"label": "Enhet", "allowedChildren": ["sektion"], "allowedAtDepth": [2, 3]},
    "sektion": {"label": "Sektion", "allowedChildren": [], "allowedAtDepth": [3, 4]},
}


class TypeRule(BaseModel):
    """Rule for a single unit type."""

    model_config = {"frozen": True, "populate_by_name": True}

    label: str = Field(min_length=1)
    allowed_children: frozenset[str] = Field(default=frozenset(), alias="allowedChildren")
    allowed_at_depth: frozenset[int] = Field(alias="allowedAtDepth", min_length=1)


class TypeRules:
    """Read-only table of :class:`TypeRule` keyed by type name.

    Iteration order follows the source table, so listings stay stable.
    """

    def __init__(self, rules: Mapping[str, TypeRule]) -> None:
        self._rules: dict[str, TypeRule] = dict(rules)
        unknown = sorted(
            {child for rule in self._rules.values() for child in rule.allowed_children}
            - set(self._rules)
        )
        if unknown:
            msg = f"allowedChildren references unknown types: {', '.join(unknown)}"
            raise ValueError(msg)
        if not any(self.is_root_only(name) for name in self._rules):
            msg = "No top-level type defined (a type allowed only at depth 0)"
            raise ValueError(msg)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> TypeRules:
        """Build from raw ``{type: {label, allowedChildren, allowedAtDepth}}`` data."""
        return cls({name: TypeRule.model_validate(raw) for name, raw in data.items()})

    @classmethod
    def default(cls) -> TypeRules:
        return cls.from_mapping(DEFAULT_TYPE_RULES)

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._rules

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def get(self, type_name: str) -> TypeRule | None:
        return self._rules.get(type_name)

    def label(self, type_name: str) -> str:
        rule = self._rules.get(type_name)
        return rule.label if rule else type_name

    def allowed_children(self, type_name: str) -> frozenset[str]:
        rule = self._rules.get(type_name)
        return rule.allowed_children if rule else frozenset()

    def allowed_at_depth(self, type_name: str) -> frozenset[int]:
        rule = self._rules.get(type_name)
        return rule.allowed_at_depth if rule else frozenset()

    def is_root_only(self, type_name: str) -> bool:
        """True for a top-level type: permitted at depth 0 and nowhere else."""
        return self.allowed_at_depth(type_name) == frozenset({0})

    def list_types(self) -> list[dict[str, str]]:
        """All types as ``{value, label}`` in table order."""
        return [{"value": name, "label": rule.label} for name, rule in self._rules.items()]

    def list_allowed_child_types(self, parent_type: str) -> list[dict[str, str]]:
        """Types allowed under *parent_type* as ``{value, label}`` in table order."""
        allowed = self.allowed_children(parent_type)
        return [
            {"value": name, "label": rule.label}
            for name, rule in self._rules.items()
            if name in allowed
        ]
