"""Workspace — the single dependency injected into every service.

Bundles resolved settings with the organization document store, the
metrics document, and the static lookup tables. Tables and metrics are
loaded lazily so ``--help`` and pure tree commands never touch them.
"""

from __future__ import annotations

import logging
from functools import cached_property
from typing import TYPE_CHECKING

import pydantic

from orgctl.config.tables import load_thresholds, load_type_rules
from orgctl.domain.metrics import DataValues
from orgctl.infrastructure.storage import DocumentStore, PersistenceError, read_json_file

if TYPE_CHECKING:
    from orgctl.config.settings import OrgSettings
    from orgctl.domain.rules import TypeRules
    from orgctl.domain.thresholds import ThresholdRule

logger = logging.getLogger(__name__)


class Workspace:
    """Resolved data locations and process-wide read-only tables."""

    def __init__(self, settings: OrgSettings) -> None:
        self.settings = settings
        self.store = DocumentStore(
            settings.document_path,
            settings.backup_path,
            max_backups=settings.storage.backup_max_count,
        )

    @property
    def root_id(self) -> str:
        return self.settings.organization.root_id

    @cached_property
    def type_rules(self) -> TypeRules:
        types_file = self.settings.organization.types_file
        return load_type_rules(self.settings.resolve(types_file) if types_file else None)

    @cached_property
    def thresholds(self) -> dict[str, ThresholdRule]:
        thresholds_file = self.settings.organization.thresholds_file
        return load_thresholds(
            self.settings.resolve(thresholds_file) if thresholds_file else None
        )

    @cached_property
    def data_values(self) -> DataValues:
        """The metrics document; an absent file means no figures yet."""
        path = self.settings.metrics_path
        if not path.exists():
            logger.debug("No metrics document at %s", path)
            return DataValues()
        raw = read_json_file(path, label="metrics")
        try:
            return DataValues.model_validate(raw)
        except pydantic.ValidationError as exc:
            msg = f"Invalid metrics document {path.name}: {exc.error_count()} errors"
            raise PersistenceError(msg) from exc
