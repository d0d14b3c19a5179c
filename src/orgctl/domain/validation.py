"""TreeValidator — structural rules over an organization tree.

Single-operation checks (uniqueness, child type, type change, move, delete)
are run before a mutation; :meth:`TreeValidator.validate_organization` is
the final gate after every mutation and accumulates every violation rather
than stopping at the first.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from orgctl.domain.models import OrgUnit
from orgctl.domain.rules import TypeRules
from orgctl.domain.tree import collect_all_cost_centers, collect_all_ids, is_descendant, walk


class ValidationResult(BaseModel):
    """Pass/fail plus issue list. ``issues`` is empty iff ``valid``."""

    model_config = {"frozen": True}

    valid: bool
    issues: list[str] = Field(default_factory=list)

    @classmethod
    def from_issues(cls, issues: list[str]) -> ValidationResult:
        return cls(valid=not issues, issues=list(issues))


class TreeValidator:
    """Stateless validator parameterized by :class:`TypeRules`.

    Args:
        rules: Type nesting table.
        root_id: Designated root id. When set, a tree whose root carries a
            different id is reported as invalid.
    """

    def __init__(self, rules: TypeRules, *, root_id: str | None = None) -> None:
        self.rules = rules
        self.root_id = root_id

    # ------------------------------------------------------------------
    # Single-operation preconditions
    # ------------------------------------------------------------------

    def validate_unique_id(
        self, root: OrgUnit, unit_id: str, exclude_id: str | None = None
    ) -> ValidationResult:
        issues: list[str] = []
        if unit_id in collect_all_ids(root, exclude_id):
            issues.append(f"ID {unit_id} already exists")
        return ValidationResult.from_issues(issues)

    def validate_unique_cost_center(
        self, root: OrgUnit, cost_center: str, exclude_id: str | None = None
    ) -> ValidationResult:
        issues: list[str] = []
        if cost_center in collect_all_cost_centers(root, exclude_id):
            issues.append(f"Cost center {cost_center} already exists")
        return ValidationResult.from_issues(issues)

    def validate_child_type(self, parent_type: str, child_type: str) -> ValidationResult:
        issues: list[str] = []
        if child_type not in self.rules:
            issues.append(f"Unknown unit type: {child_type}")
        elif child_type not in self.rules.allowed_children(parent_type):
            issues.append(
                f"{self.rules.label(child_type)} is not allowed under "
                f"{self.rules.label(parent_type)}"
            )
        return ValidationResult.from_issues(issues)

    def validate_type_change(
        self,
        unit: OrgUnit,
        new_type: str,
        parent_type: str | None,
        root: OrgUnit,
    ) -> ValidationResult:
        """Check that *unit* may become *new_type* without orphaning any child by rule.

        ``parent_type=None`` means *unit* is the root, which must stay top-level.
        """
        if new_type not in self.rules:
            return ValidationResult.from_issues([f"Unknown unit type: {new_type}"])

        issues: list[str] = []
        if parent_type is None:
            if not self.rules.is_root_only(new_type):
                issues.append(
                    f"Top level unit {unit.name} must be of a top-level type, not {new_type}"
                )
        elif new_type not in self.rules.allowed_children(parent_type):
            issues.append(
                f"{self.rules.label(new_type)} is not allowed under {self.rules.label(parent_type)}"
            )

        allowed = self.rules.allowed_children(new_type)
        for child in unit.children:
            if child.type not in allowed:
                issues.append(
                    f"Child {child.name} ({child.type}) would not be allowed under "
                    f"{self.rules.label(new_type)}"
                )
        return ValidationResult.from_issues(issues)

    def validate_move(self, unit: OrgUnit, new_parent: OrgUnit, root: OrgUnit) -> ValidationResult:
        if unit.id == new_parent.id:
            return ValidationResult.from_issues(["Cannot move a unit into itself"])

        issues: list[str] = []
        if is_descendant(unit, new_parent):
            issues.append("Cannot move a unit into one of its own descendants")
        if self.rules.is_root_only(unit.type):
            issues.append(f"Cannot move a {self.rules.label(unit.type)} unit")
        if unit.type not in self.rules.allowed_children(new_parent.type):
            issues.append(
                f"{self.rules.label(unit.type)} can not be placed under "
                f"{self.rules.label(new_parent.type)}"
            )
        return ValidationResult.from_issues(issues)

    def validate_delete(self, unit: OrgUnit, *, allow_children: bool = False) -> ValidationResult:
        issues: list[str] = []
        if not allow_children and unit.children:
            issues.append(
                f"Unit {unit.name} has {len(unit.children)} child units. "
                "Specify a unit to reassign them to."
            )
        return ValidationResult.from_issues(issues)

    # ------------------------------------------------------------------
    # Whole-tree gate
    # ------------------------------------------------------------------

    def validate_organization(self, root: OrgUnit) -> ValidationResult:
        """Walk the tree once and report every invariant violation."""
        issues: list[str] = []
        ids: set[str] = set()
        cost_centers: set[str] = set()

        if self.root_id is not None and root.id != self.root_id:
            issues.append(f"Top level unit must have ID {self.root_id}, found {root.id}")
        if root.type in self.rules and not self.rules.is_root_only(root.type):
            issues.append(f"Top level unit {root.name} must be of a top-level type")

        for unit, depth, parent in walk(root):
            if unit.cost_center in cost_centers:
                issues.append(f"Duplicate cost center: {unit.cost_center} (unit: {unit.name})")
            cost_centers.add(unit.cost_center)

            if unit.id in ids:
                issues.append(f"Duplicate ID: {unit.id} (unit: {unit.name})")
            ids.add(unit.id)

            if unit.type not in self.rules:
                issues.append(f"Unknown unit type: {unit.type} (unit: {unit.name})")
                continue

            if depth not in self.rules.allowed_at_depth(unit.type):
                issues.append(
                    f"{self.rules.label(unit.type)} is not allowed at depth {depth} "
                    f"(unit: {unit.name})"
                )

            if parent is not None and parent.type in self.rules:
                if unit.type not in self.rules.allowed_children(parent.type):
                    issues.append(
                        f"{self.rules.label(unit.type)} is not allowed under "
                        f"{self.rules.label(parent.type)} (unit: {unit.name})"
                    )

        return ValidationResult.from_issues(issues)
