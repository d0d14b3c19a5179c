"""Per-cost-center metric records (the dashboard's reference data).

Field names follow the stored ``data.json`` document, which is keyed by
cost center::

    {"year": "2026", "values": {"0010": {"ekonomi": ..., "personal": ..., "produktion": ...}}}
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

MONTHS = 12

REVENUE_GROUP = "intakter"
COST_GROUPS: tuple[str, ...] = ("personal", "lokaler", "material", "externa", "ovrigt")
ACCOUNT_GROUPS: tuple[str, ...] = (REVENUE_GROUP, *COST_GROUPS)

Track = Literal["budget", "utfall"]
TRACKS: tuple[str, ...] = ("budget", "utfall")

MONTH_NAMES: tuple[str, ...] = (
    "Jan", "Feb", "Mar", "Apr", "Maj", "Jun",
    "Jul", "Aug", "Sep", "Okt", "Nov", "Dec",
)  # fmt: skip


class MonthlyValue(BaseModel):
    """A yearly total plus twelve monthly values."""

    yearly: float = 0
    monthly: list[float] = Field(
        default_factory=lambda: [0.0] * MONTHS, min_length=MONTHS, max_length=MONTHS
    )


class AccountGroupData(BaseModel):
    """Budget and actual (``utfall``) series for one account group."""

    budget: MonthlyValue = Field(default_factory=MonthlyValue)
    utfall: MonthlyValue = Field(default_factory=MonthlyValue)

    def track(self, track: str) -> MonthlyValue:
        return self.utfall if track == "utfall" else self.budget


class PersonnelData(BaseModel):
    antal_anstallda: float = 0
    personalomsattning: float = 0
    sjukfranvaro: float = 0


class UnitData(BaseModel):
    """Figures for one cost center, or the roll-up of a subtree."""

    ekonomi: dict[str, AccountGroupData] = Field(default_factory=dict)
    personal: PersonnelData = Field(default_factory=PersonnelData)
    produktion: dict[str, float | None] = Field(default_factory=dict)


class DataValues(BaseModel):
    """The whole metrics document: one record per cost center."""

    year: str = ""
    values: dict[str, UnitData] = Field(default_factory=dict)


class ProductionMetric(BaseModel):
    """How a production metric rolls up.

    ``sum`` metrics are counts (null counts as zero). ``weighted_avg``
    metrics are headcount-weighted over records that supply a value, and
    stay null when none do.
    """

    model_config = {"frozen": True}

    key: str
    label: str
    aggregation: Literal["sum", "weighted_avg"]
    decimals: int = 1


DEFAULT_PRODUCTION_METRICS: tuple[ProductionMetric, ...] = (
    ProductionMetric(key="arenden", label="Ärenden", aggregation="sum", decimals=0),
    ProductionMetric(key="leveranstid", label="Leveranstid", aggregation="weighted_avg"),
    ProductionMetric(
        key="kundnojdhet", label="Kundnöjdhet", aggregation="weighted_avg", decimals=0
    ),
    ProductionMetric(
        key="kvalitetsindex", label="Kvalitetsindex", aggregation="weighted_avg", decimals=0
    ),
)
