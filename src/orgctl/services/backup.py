"""BackupService — manual snapshots and restore of the organization document."""

from __future__ import annotations

import pydantic

from orgctl.domain.models import OrgUnit
from orgctl.domain.tree import count_units
from orgctl.infrastructure.storage import MANUAL_MARKER, PersistenceError, read_json_file
from orgctl.services.base import BaseService
from orgctl.services.result import ServiceResult
from orgctl.services.telemetry import traced


class BackupService(BaseService):
    """Create, list and restore document backups."""

    @traced
    def create_snapshot(self) -> ServiceResult:
        try:
            path = self._workspace.store.create_manual_snapshot()
        except PersistenceError as exc:
            return self._failure("create_snapshot", exc)
        return self._success("create_snapshot", {"name": path.name, "path": str(path)})

    @traced
    def list_backups(self) -> ServiceResult:
        store = self._workspace.store
        items = [
            {"name": name, "manual": f".{MANUAL_MARKER}." in name}
            for name in store.list_backups()
        ]
        return self._success(
            "list_backups",
            {"items": items, "count": len(items), "backup_dir": str(store.backup_dir)},
        )

    @traced
    def restore(self, name: str) -> ServiceResult:
        """Restore backup *name* after checking it holds a readable tree.

        Structural problems in the restored tree come back as warnings;
        ``orgctl check`` lists them in full.
        """
        store = self._workspace.store
        try:
            raw = read_json_file(store.backup_path(name), label="backup")
            root = OrgUnit.from_document(raw)
            store.restore_backup(name)
        except pydantic.ValidationError as exc:
            msg = f"Backup {name} is not a valid organization document: {exc.error_count()} errors"
            return self._failure("restore", PersistenceError(msg))
        except PersistenceError as exc:
            return self._failure("restore", exc)

        issues = self.validator.validate_organization(root).issues
        return self._success("restore", {"name": name, "units": count_units(root)}, issues)
