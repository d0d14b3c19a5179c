"""Read-only traversal over an OrgUnit tree.

Every function returns references into the existing tree, never copies.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import NamedTuple

from orgctl.domain.models import OrgUnit


class UnitLocation(NamedTuple):
    """Search result used for splicing: the unit, its parent, and its index."""

    unit: OrgUnit
    parent: OrgUnit | None
    index: int


def walk(
    root: OrgUnit,
    depth: int = 0,
    parent: OrgUnit | None = None,
) -> Iterator[tuple[OrgUnit, int, OrgUnit | None]]:
    """Depth-first pre-order walk yielding ``(unit, depth, parent)``."""
    yield root, depth, parent
    for child in root.children:
        yield from walk(child, depth + 1, root)


def find_by_id(root: OrgUnit, unit_id: str) -> OrgUnit | None:
    for unit, _depth, _parent in walk(root):
        if unit.id == unit_id:
            return unit
    return None


def find_by_cost_center(root: OrgUnit, cost_center: str) -> OrgUnit | None:
    for unit, _depth, _parent in walk(root):
        if unit.cost_center == cost_center:
            return unit
    return None


def locate(root: OrgUnit, unit_id: str) -> UnitLocation | None:
    """Find a unit together with its direct parent and index in ``parent.children``.

    The root is returned with ``parent=None`` and ``index=-1``.
    """
    if root.id == unit_id:
        return UnitLocation(root, None, -1)
    for unit, _depth, _parent in walk(root):
        for index, child in enumerate(unit.children):
            if child.id == unit_id:
                return UnitLocation(child, unit, index)
    return None


def find_parent(root: OrgUnit, unit_id: str) -> OrgUnit | None:
    """Direct parent of *unit_id*; None for the root or an unknown id."""
    location = locate(root, unit_id)
    return location.parent if location else None


def is_descendant(ancestor: OrgUnit, candidate: OrgUnit) -> bool:
    """True if *candidate* is reachable below *ancestor* (self does not count)."""
    for child in ancestor.children:
        if child.id == candidate.id or is_descendant(child, candidate):
            return True
    return False


def path_to(root: OrgUnit, unit_id: str) -> list[OrgUnit]:
    """Breadcrumb path from the root down to *unit_id*; empty if not found."""
    if root.id == unit_id:
        return [root]
    for child in root.children:
        sub = path_to(child, unit_id)
        if sub:
            return [root, *sub]
    return []


def collect_leaf_cost_centers(unit: OrgUnit) -> list[str]:
    """Leaf cost centers below *unit* in child order; ``[own]`` for a leaf."""
    if not unit.children:
        return [unit.cost_center]
    return [cc for child in unit.children for cc in collect_leaf_cost_centers(child)]


def collect_all_ids(root: OrgUnit, exclude_id: str | None = None) -> set[str]:
    return {unit.id for unit, _d, _p in walk(root) if unit.id != exclude_id}


def collect_all_cost_centers(root: OrgUnit, exclude_id: str | None = None) -> set[str]:
    return {unit.cost_center for unit, _d, _p in walk(root) if unit.id != exclude_id}


def count_units(root: OrgUnit) -> int:
    return sum(1 for _ in walk(root))
