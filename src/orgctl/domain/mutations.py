"""TreeMutator — the only code that changes tree shape.

Each operation checks its preconditions, mutates the in-memory tree in
place, then re-runs whole-tree validation. A raised error means the caller
must discard the tree: there is no in-memory rollback, and the service
layer never writes a tree whose mutation raised.
"""

from __future__ import annotations

import logging

from orgctl.domain.errors import NotFoundError, ValidationError
from orgctl.domain.models import OrgUnit, UnitCreate, UnitUpdate
from orgctl.domain.tree import UnitLocation, find_by_id, is_descendant, locate
from orgctl.domain.validation import TreeValidator

logger = logging.getLogger(__name__)


class TreeMutator:
    """Create, update, delete, and move units under validator control."""

    def __init__(self, validator: TreeValidator) -> None:
        self._validator = validator

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def create_child(self, root: OrgUnit, parent_id: str, fields: UnitCreate) -> OrgUnit:
        """Append a new leaf unit under *parent_id* and return it."""
        parent = find_by_id(root, parent_id)
        if parent is None:
            raise NotFoundError(f"Parent unit {parent_id} not found", unit_id=parent_id)

        issues: list[str] = []
        issues.extend(self._validator.validate_unique_id(root, fields.id).issues)
        issues.extend(self._validator.validate_unique_cost_center(root, fields.cost_center).issues)
        issues.extend(self._validator.validate_child_type(parent.type, fields.type).issues)
        if issues:
            raise ValidationError(issues)

        unit = fields.to_unit()
        parent.children.append(unit)
        self._revalidate(root)
        logger.debug("Created unit %s under %s", unit.id, parent.id)
        return unit

    def update_fields(self, root: OrgUnit, unit_id: str, updates: UnitUpdate) -> OrgUnit:
        """Apply the fields present in *updates* to *unit_id*.

        ``manager=""`` clears the manager; omitted or ``None`` fields are untouched.
        """
        location = self._require(root, unit_id)
        unit = location.unit
        changes = updates.changes()

        issues: list[str] = []
        new_cost_center = changes.get("cost_center")
        if new_cost_center is not None and new_cost_center != unit.cost_center:
            issues.extend(
                self._validator.validate_unique_cost_center(
                    root, new_cost_center, exclude_id=unit.id
                ).issues
            )
        new_type = changes.get("type")
        if new_type is not None and new_type != unit.type:
            parent_type = location.parent.type if location.parent else None
            issues.extend(
                self._validator.validate_type_change(unit, new_type, parent_type, root).issues
            )
        if issues:
            raise ValidationError(issues)

        if "name" in changes:
            unit.name = changes["name"]
        if "cost_center" in changes:
            unit.cost_center = changes["cost_center"]
        if "type" in changes:
            unit.type = changes["type"]
        if "manager" in changes:
            unit.manager = changes["manager"] or None

        self._revalidate(root)
        logger.debug("Updated unit %s: %s", unit.id, sorted(changes))
        return unit

    def delete_unit(
        self,
        root: OrgUnit,
        unit_id: str,
        reassign_children_to: str | None = None,
    ) -> OrgUnit:
        """Remove *unit_id*, first moving its children to *reassign_children_to*.

        Returns the removed unit. Reassigned children keep their subtrees.
        """
        if unit_id == root.id:
            raise ValidationError(["Cannot delete the top level unit"])

        location = self._require(root, unit_id)
        unit = location.unit

        if unit.children:
            if reassign_children_to is None:
                raise ValidationError(self._validator.validate_delete(unit).issues)
            target = find_by_id(root, reassign_children_to)
            if target is None:
                raise NotFoundError(
                    f"Reassignment target {reassign_children_to} not found",
                    unit_id=reassign_children_to,
                )
            if target.id == unit.id or is_descendant(unit, target):
                raise ValidationError(
                    ["Cannot reassign children to the deleted unit or one of its descendants"]
                )
            target.children.extend(unit.children)
            logger.debug(
                "Reassigned %d children of %s to %s", len(unit.children), unit.id, target.id
            )

        assert location.parent is not None
        location.parent.children.pop(location.index)
        self._revalidate(root)
        return unit

    def move_unit(self, root: OrgUnit, unit_id: str, new_parent_id: str) -> OrgUnit:
        """Relocate *unit_id* (with its whole subtree) under *new_parent_id*."""
        if unit_id == root.id:
            raise ValidationError(["Cannot move the top level unit"])

        location = self._require(root, unit_id)
        new_parent = find_by_id(root, new_parent_id)
        if new_parent is None:
            raise NotFoundError(f"Target unit {new_parent_id} not found", unit_id=new_parent_id)

        result = self._validator.validate_move(location.unit, new_parent, root)
        if not result.valid:
            raise ValidationError(result.issues)

        assert location.parent is not None
        location.parent.children.pop(location.index)
        new_parent.children.append(location.unit)
        self._revalidate(root)
        logger.debug("Moved unit %s to %s", unit_id, new_parent_id)
        return location.unit

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require(self, root: OrgUnit, unit_id: str) -> UnitLocation:
        location = locate(root, unit_id)
        if location is None:
            raise NotFoundError(f"Unit {unit_id} not found", unit_id=unit_id)
        return location

    def _revalidate(self, root: OrgUnit) -> None:
        result = self._validator.validate_organization(root)
        if not result.valid:
            raise ValidationError(result.issues)
