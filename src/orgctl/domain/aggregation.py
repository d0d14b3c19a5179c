"""Bottom-up aggregation of cost-center records through the org tree.

An internal unit has no metrics row of its own: its figures are always
derived from the leaf cost centers in its scope.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from orgctl.domain.metrics import (
    ACCOUNT_GROUPS,
    COST_GROUPS,
    DEFAULT_PRODUCTION_METRICS,
    MONTHS,
    REVENUE_GROUP,
    AccountGroupData,
    DataValues,
    MonthlyValue,
    PersonnelData,
    ProductionMetric,
    UnitData,
)
from orgctl.domain.models import OrgUnit
from orgctl.domain.tree import collect_leaf_cost_centers


def round_half_up(value: float, decimals: int = 1) -> float:
    """Round to *decimals* places with halves going up (``2.25 -> 2.3``, ``-2.25 -> -2.2``)."""
    factor = 10**decimals
    return math.floor(value * factor + 0.5) / factor


def resolve_scope(unit: OrgUnit) -> list[str]:
    """Leaf cost centers whose records make up *unit*'s figures."""
    return collect_leaf_cost_centers(unit)


# ---------------------------------------------------------------------------
# Roll-up
# ---------------------------------------------------------------------------


def aggregate_unit_data(
    unit: OrgUnit,
    data: DataValues,
    metrics: Sequence[ProductionMetric] = DEFAULT_PRODUCTION_METRICS,
) -> UnitData:
    """Compute the rolled-up :class:`UnitData` for *unit*.

    A true leaf with a record gets that record back unchanged. Cost centers
    without a record are skipped, and an empty scope yields zeroed figures.
    """
    scope = resolve_scope(unit)
    if len(scope) == 1 and scope[0] in data.values:
        return data.values[scope[0]]

    records = [data.values[cc] for cc in scope if cc in data.values]
    return UnitData(
        ekonomi=_aggregate_economy(records),
        personal=_aggregate_personnel(records),
        produktion=_aggregate_production(records, metrics),
    )


def _sum_series(values: Iterable[MonthlyValue]) -> MonthlyValue:
    yearly = 0.0
    monthly = [0.0] * MONTHS
    for value in values:
        yearly += value.yearly
        for i, amount in enumerate(value.monthly):
            monthly[i] += amount
    return MonthlyValue(yearly=yearly, monthly=monthly)


def _aggregate_economy(records: Sequence[UnitData]) -> dict[str, AccountGroupData]:
    result: dict[str, AccountGroupData] = {}
    for group in ACCOUNT_GROUPS:
        present = [r.ekonomi[group] for r in records if group in r.ekonomi]
        result[group] = AccountGroupData(
            budget=_sum_series(g.budget for g in present),
            utfall=_sum_series(g.utfall for g in present),
        )
    return result


def _aggregate_personnel(records: Sequence[UnitData]) -> PersonnelData:
    total = sum(r.personal.antal_anstallda for r in records)
    if total == 0:
        return PersonnelData()

    turnover = sum(r.personal.personalomsattning * r.personal.antal_anstallda for r in records)
    sick_leave = sum(r.personal.sjukfranvaro * r.personal.antal_anstallda for r in records)
    return PersonnelData(
        antal_anstallda=total,
        personalomsattning=round_half_up(turnover / total, 1),
        sjukfranvaro=round_half_up(sick_leave / total, 1),
    )


def _weighted_average(pairs: Sequence[tuple[float, float]]) -> float | None:
    """Weighted mean of ``(value, weight)`` pairs; plain mean if all weights are zero."""
    if not pairs:
        return None
    total_weight = sum(weight for _value, weight in pairs)
    if total_weight == 0:
        return sum(value for value, _weight in pairs) / len(pairs)
    return sum(value * weight for value, weight in pairs) / total_weight


def _aggregate_production(
    records: Sequence[UnitData],
    metrics: Sequence[ProductionMetric],
) -> dict[str, float | None]:
    result: dict[str, float | None] = {}
    for metric in metrics:
        if metric.aggregation == "sum":
            result[metric.key] = sum(r.produktion.get(metric.key) or 0 for r in records)
            continue
        pairs = [
            (value, r.personal.antal_anstallda)
            for r in records
            if (value := r.produktion.get(metric.key)) is not None
        ]
        average = _weighted_average(pairs)
        result[metric.key] = None if average is None else round_half_up(average, metric.decimals)
    return result


# ---------------------------------------------------------------------------
# Derived figures
# ---------------------------------------------------------------------------


def _yearly(ekonomi: dict[str, AccountGroupData], group: str, track: str) -> float:
    entry = ekonomi.get(group)
    return entry.track(track).yearly if entry else 0


def _month(ekonomi: dict[str, AccountGroupData], group: str, track: str, index: int) -> float:
    entry = ekonomi.get(group)
    return entry.track(track).monthly[index] if entry else 0


def total_costs(ekonomi: dict[str, AccountGroupData], track: str) -> float:
    """Sum of all cost-group yearly totals for *track*."""
    return sum(_yearly(ekonomi, group, track) for group in COST_GROUPS)


def calculate_result(ekonomi: dict[str, AccountGroupData], track: str) -> float:
    """Revenue minus total costs for *track* (``budget`` or ``utfall``)."""
    return _yearly(ekonomi, REVENUE_GROUP, track) - total_costs(ekonomi, track)


def monthly_results(ekonomi: dict[str, AccountGroupData], track: str) -> list[float]:
    """Month-by-month revenue minus costs (always 12 entries)."""
    return [
        _month(ekonomi, REVENUE_GROUP, track, i)
        - sum(_month(ekonomi, group, track, i) for group in COST_GROUPS)
        for i in range(MONTHS)
    ]


def calculate_variance(budget: float, actual: float) -> float:
    """Percentage deviation of *actual* from *budget*, one decimal; 0 when budget is 0."""
    if budget == 0:
        return 0
    # one-step * 1000 scaling; round_half_up(x * 100) lands on the other side for some inputs
    return math.floor(((actual - budget) / budget) * 1000 + 0.5) / 10
