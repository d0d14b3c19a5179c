"""DashboardService — read-only roll-up of cost-center figures.

Every call reads the tree and the metrics document fresh and never writes.
Figures for internal units are always aggregated from their leaf cost
centers, see :mod:`orgctl.domain.aggregation`.
"""

from __future__ import annotations

from typing import Any

from orgctl.domain.aggregation import (
    aggregate_unit_data,
    calculate_result,
    calculate_variance,
    monthly_results,
    resolve_scope,
    total_costs,
)
from orgctl.domain.errors import OrgError, ValidationError
from orgctl.domain.metrics import MONTH_NAMES, REVENUE_GROUP, TRACKS, UnitData
from orgctl.domain.models import OrgUnit
from orgctl.domain.thresholds import classify
from orgctl.infrastructure.storage import PersistenceError
from orgctl.services.base import BaseService
from orgctl.services.result import ServiceResult
from orgctl.services.telemetry import trace_span, traced

COST_VARIANCE_KEY = "kostnadsavvikelse"


def _track_figures(budget: float, utfall: float) -> dict[str, float]:
    return {
        "budget": budget,
        "utfall": utfall,
        "variance": calculate_variance(budget, utfall),
    }


class DashboardService(BaseService):
    """Aggregated economic, personnel and production figures per unit."""

    def _figures(self, unit: OrgUnit) -> UnitData:
        with trace_span("aggregate", unit=unit.id):
            return aggregate_unit_data(unit, self._workspace.data_values)

    def _statuses(self, figures: UnitData, cost_variance: float) -> dict[str, str]:
        thresholds = self._workspace.thresholds
        values: dict[str, float | None] = {
            "personalomsattning": figures.personal.personalomsattning,
            "sjukfranvaro": figures.personal.sjukfranvaro,
            COST_VARIANCE_KEY: cost_variance,
        }
        values.update(figures.produktion)
        return {key: classify(value, thresholds.get(key)).value for key, value in values.items()}

    def _load_unit(self, unit_id: str | None) -> OrgUnit:
        root, _ = self._load()
        if unit_id is None:
            return root
        return self._require_unit(root, unit_id)

    @traced
    def summary(self, unit_id: str | None = None) -> ServiceResult:
        """Headline figures for *unit_id* (the root when omitted)."""
        try:
            unit = self._load_unit(unit_id)
            figures = self._figures(unit)
        except (OrgError, PersistenceError) as exc:
            return self._failure("summary", exc)

        ekonomi = figures.ekonomi
        result = _track_figures(
            calculate_result(ekonomi, "budget"), calculate_result(ekonomi, "utfall")
        )
        costs = _track_figures(total_costs(ekonomi, "budget"), total_costs(ekonomi, "utfall"))
        revenue_group = ekonomi.get(REVENUE_GROUP)
        revenue = _track_figures(
            revenue_group.budget.yearly if revenue_group else 0,
            revenue_group.utfall.yearly if revenue_group else 0,
        )
        scope = resolve_scope(unit)
        data_values = self._workspace.data_values

        return self._success(
            "summary",
            {
                "unit": unit.summary(),
                "year": data_values.year,
                "scope_size": len(scope),
                "missing_records": [cc for cc in scope if cc not in data_values.values],
                "is_aggregated": not unit.is_leaf,
                "result": result,
                "revenue": revenue,
                "costs": costs,
                "figures": figures.model_dump(),
                "statuses": self._statuses(figures, costs["variance"]),
            },
        )

    @traced
    def monthly(self, unit_id: str | None = None, track: str = "utfall") -> ServiceResult:
        """Month-by-month result for one track."""
        if track not in TRACKS:
            return self._failure(
                "monthly",
                ValidationError([f"Unknown track: {track} (expected one of {', '.join(TRACKS)})"]),
            )
        try:
            unit = self._load_unit(unit_id)
            figures = self._figures(unit)
        except (OrgError, PersistenceError) as exc:
            return self._failure("monthly", exc)

        results = monthly_results(figures.ekonomi, track)
        months = [
            {"month": name, "result": value}
            for name, value in zip(MONTH_NAMES, results, strict=True)
        ]
        return self._success(
            "monthly",
            {
                "unit": unit.summary(),
                "track": track,
                "months": months,
                "total": sum(results),
            },
        )

    @traced
    def compare_children(self, unit_id: str | None = None) -> ServiceResult:
        """Side-by-side figures for the direct children, by headcount descending."""
        try:
            unit = self._load_unit(unit_id)
        except (OrgError, PersistenceError) as exc:
            return self._failure("compare_children", exc)

        rows: list[dict[str, Any]] = []
        try:
            for child in unit.children:
                figures = self._figures(child)
                costs_budget = total_costs(figures.ekonomi, "budget")
                costs_utfall = total_costs(figures.ekonomi, "utfall")
                cost_variance = calculate_variance(costs_budget, costs_utfall)
                rows.append(
                    {
                        "unit": child.summary(),
                        "headcount": figures.personal.antal_anstallda,
                        "result": _track_figures(
                            calculate_result(figures.ekonomi, "budget"),
                            calculate_result(figures.ekonomi, "utfall"),
                        ),
                        "costs": _track_figures(costs_budget, costs_utfall),
                        "personalomsattning": figures.personal.personalomsattning,
                        "sjukfranvaro": figures.personal.sjukfranvaro,
                        "kundnojdhet": figures.produktion.get("kundnojdhet"),
                        "statuses": self._statuses(figures, cost_variance),
                    }
                )
        except PersistenceError as exc:
            return self._failure("compare_children", exc)

        rows.sort(key=lambda row: row["headcount"], reverse=True)
        return self._success(
            "compare_children",
            {"unit": unit.summary(), "children": rows, "count": len(rows)},
        )
