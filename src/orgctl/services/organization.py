"""OrganizationService — the admin operations over the organization tree.

Pipeline for every mutation: READ → PARSE → MUTATE (validated) → WRITE → RESPOND.
The tree is read fresh for each call; if any step before WRITE raises,
the in-memory tree is dropped and storage is left untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from orgctl.domain.errors import OrgError, ValidationError
from orgctl.domain.models import OrgUnit, parse_create, parse_update
from orgctl.domain.mutations import TreeMutator
from orgctl.domain.tree import count_units, find_by_cost_center, path_to
from orgctl.infrastructure.storage import PersistenceError
from orgctl.services.base import BaseService
from orgctl.services.result import ServiceResult
from orgctl.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)


class OrganizationService(BaseService):
    """Read and modify the organization tree."""

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @traced
    def get_tree(self) -> ServiceResult:
        """Return the whole tree in its document shape."""
        try:
            root, _ = self._load()
        except PersistenceError as exc:
            return self._failure("get_tree", exc)
        return self._success("get_tree", {"tree": root.to_document(), "count": count_units(root)})

    @traced
    def get_unit(self, unit_id: str) -> ServiceResult:
        """Return one unit with its subtree."""
        try:
            root, _ = self._load()
            unit = self._require_unit(root, unit_id)
        except (OrgError, PersistenceError) as exc:
            return self._failure("get_unit", exc)
        return self._success("get_unit", {"unit": unit.to_document(), "count": count_units(unit)})

    @traced
    def get_breadcrumbs(self, unit_id: str) -> ServiceResult:
        """Path from the root down to *unit_id*."""
        try:
            root, _ = self._load()
            self._require_unit(root, unit_id)
        except (OrgError, PersistenceError) as exc:
            return self._failure("get_breadcrumbs", exc)
        path = [{"id": u.id, "name": u.name, "type": u.type} for u in path_to(root, unit_id)]
        return self._success("get_breadcrumbs", {"path": path})

    @traced
    def check_cost_center(self, cost_center: str) -> ServiceResult:
        """Report whether *cost_center* is free, naming the unit that holds it if not."""
        try:
            root, _ = self._load()
        except PersistenceError as exc:
            return self._failure("check_cost_center", exc)
        existing = find_by_cost_center(root, cost_center)
        return self._success(
            "check_cost_center",
            {
                "cost_center": cost_center,
                "available": existing is None,
                "conflicting_unit": (
                    {"id": existing.id, "name": existing.name} if existing else None
                ),
            },
        )

    @traced
    def list_types(self) -> ServiceResult:
        types = self._workspace.type_rules.list_types()
        return self._success("list_types", {"types": types, "count": len(types)})

    @traced
    def list_allowed_child_types(self, parent_type: str) -> ServiceResult:
        rules = self._workspace.type_rules
        if parent_type not in rules:
            return self._failure(
                "list_allowed_child_types",
                ValidationError([f"Unknown unit type: {parent_type}"]),
            )
        types = rules.list_allowed_child_types(parent_type)
        return self._success(
            "list_allowed_child_types",
            {"parent_type": parent_type, "types": types, "count": len(types)},
        )

    @traced
    def validate(self) -> ServiceResult:
        """Full-tree validation of the stored document (read-only).

        Succeeds even when issues are found; ``data.valid`` carries the verdict.
        """
        try:
            root, _ = self._load()
        except PersistenceError as exc:
            return self._failure("validate", exc)
        units = count_units(root)
        with trace_span("validate_organization", units=units):
            result = self.validator.validate_organization(root)
        return self._success(
            "validate",
            {
                "valid": result.valid,
                "issues": result.issues,
                "count": len(result.issues),
                "units": units,
            },
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    @traced
    def create_unit(self, parent_id: str, fields: dict[str, Any]) -> ServiceResult:
        """Create a unit under *parent_id* from raw *fields*."""

        def mutation(mutator: TreeMutator, root: OrgUnit) -> dict[str, Any]:
            unit = mutator.create_child(root, parent_id, parse_create(fields))
            return {"unit": unit.summary(), "parent_id": parent_id}

        return self._mutate("create_unit", fields.get("id"), mutation)

    @traced
    def update_unit(self, unit_id: str, fields: dict[str, Any]) -> ServiceResult:
        """Apply a partial update. ``manager=""`` clears the manager."""

        def mutation(mutator: TreeMutator, root: OrgUnit) -> dict[str, Any]:
            updates = parse_update(fields)
            unit = mutator.update_fields(root, unit_id, updates)
            return {"unit": unit.summary(), "fields_changed": sorted(updates.changes())}

        return self._mutate("update_unit", unit_id, mutation)

    @traced
    def delete_unit(self, unit_id: str, reassign_children_to: str | None = None) -> ServiceResult:
        """Delete *unit_id*; units with children need *reassign_children_to*."""

        def mutation(mutator: TreeMutator, root: OrgUnit) -> dict[str, Any]:
            unit = mutator.delete_unit(root, unit_id, reassign_children_to)
            return {
                "id": unit.id,
                "name": unit.name,
                "reassigned_to": reassign_children_to if unit.children else None,
                "reassigned": [child.id for child in unit.children],
            }

        return self._mutate("delete_unit", unit_id, mutation)

    @traced
    def move_unit(self, unit_id: str, new_parent_id: str) -> ServiceResult:
        """Move *unit_id* with its subtree under *new_parent_id*."""

        def mutation(mutator: TreeMutator, root: OrgUnit) -> dict[str, Any]:
            unit = mutator.move_unit(root, unit_id, new_parent_id)
            return {"unit": unit.summary(), "parent_id": new_parent_id}

        return self._mutate("move_unit", unit_id, mutation)

    def _mutate(
        self,
        op: str,
        unit_id: str | None,
        mutation: Callable[[TreeMutator, OrgUnit], dict[str, Any]],
    ) -> ServiceResult:
        mutator = TreeMutator(self.validator)
        try:
            root, revision = self._load()
            with trace_span("mutate", op=op, unit=unit_id):
                data = mutation(mutator, root)
            with trace_span("write", revision=revision[:12]):
                self._save(root, revision)
        except (OrgError, PersistenceError) as exc:
            logger.debug("%s %s rejected: %s", op, unit_id, exc)
            return self._failure(op, exc)
        logger.info("%s %s committed", op, unit_id)
        return self._success(op, data)
