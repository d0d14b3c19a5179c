"""File-backed JSON document store with atomic writes and rotating backups.

INVARIANT: A crash mid-write never leaves a partially written document.
Writes go to a temp file next to the target and are moved into place with
``os.replace``. A failed write restores the backup taken just before it.

The store also carries a revision (SHA-256 of the document bytes). Callers
that pass the revision they read to :meth:`DocumentStore.write_document`
get a :class:`ConflictError` instead of silently clobbering a concurrent
write.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import shutil
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

MANUAL_MARKER = "manual"


class PersistenceError(Exception):
    """Reading or writing the backing document failed."""


class ConflictError(PersistenceError):
    """The document changed on disk since it was read."""


@dataclass(frozen=True)
class StoredDocument:
    """A document as read from disk plus the revision it was read at."""

    data: dict[str, Any]
    revision: str


def _revision(raw: bytes) -> str:
    return hashlib.sha256(raw).hexdigest()


def _timestamp() -> str:
    """Compact UTC timestamp for backup filenames (sorts chronologically)."""
    return datetime.now(UTC).strftime("%Y%m%dT%H%M%S%f")


def _backup_timestamp(name: str) -> str:
    """Extract the timestamp from ``<stem>[.manual].<ts>.json``."""
    return name.rsplit(".", 2)[-2]


def read_json_file(path: Path, *, label: str = "document") -> Any:
    """Read and parse a JSON file, wrapping every failure in PersistenceError."""
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Failed to read {label} {path.name}: {exc}"
        raise PersistenceError(msg) from exc
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON in {label} {path.name}: {exc}"
        raise PersistenceError(msg) from exc


class DocumentStore:
    """Single JSON document on disk with timestamped backups.

    Args:
        document_path: The live document (e.g. ``data/organization.json``).
        backup_dir: Directory for ``<stem>.<ts>.json`` backups.
        max_backups: Automatic backups to keep after each write (newest win).
            Manual snapshots are never pruned.
    """

    def __init__(self, document_path: Path, backup_dir: Path, *, max_backups: int = 10) -> None:
        self.path = document_path
        self.backup_dir = backup_dir
        self.max_backups = max_backups

    @property
    def stem(self) -> str:
        return self.path.stem

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def read(self) -> StoredDocument:
        """Return the last successfully written document and its revision."""
        try:
            raw = self.path.read_bytes()
        except OSError as exc:
            msg = f"Failed to read {self.path.name}: {exc}"
            raise PersistenceError(msg) from exc
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            msg = f"Invalid JSON in {self.path.name}: {exc}"
            raise PersistenceError(msg) from exc
        if not isinstance(data, dict):
            msg = f"{self.path.name} must contain a JSON object"
            raise PersistenceError(msg)
        return StoredDocument(data=data, revision=_revision(raw))

    def read_document(self) -> dict[str, Any]:
        return self.read().data

    def current_revision(self) -> str | None:
        try:
            return _revision(self.path.read_bytes())
        except FileNotFoundError:
            return None
        except OSError as exc:
            msg = f"Failed to read {self.path.name}: {exc}"
            raise PersistenceError(msg) from exc

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def write_document(
        self,
        data: dict[str, Any],
        *,
        expected_revision: str | None = None,
    ) -> str:
        """Atomically replace the document and return its new revision.

        Raises:
            ConflictError: *expected_revision* no longer matches the file.
            PersistenceError: structure check or any I/O step failed. The
                previous document is restored from its backup first.
        """
        if not data or not data.get("id") or not data.get("costCenter"):
            msg = "Invalid organization data structure"
            raise PersistenceError(msg)

        if expected_revision is not None:
            current = self.current_revision()
            if current != expected_revision:
                msg = f"{self.path.name} was modified by another writer; reload and retry"
                raise ConflictError(msg)

        payload = (json.dumps(data, indent=2, ensure_ascii=False) + "\n").encode("utf-8")
        backup_path = self.backup_dir / f"{self.stem}.{_timestamp()}.json"
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        backed_up = False

        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            if self.path.exists():
                shutil.copy2(self.path, backup_path)
                backed_up = True
                logger.debug("Backup created: %s", backup_path.name)

            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(payload)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            if backed_up:
                self._restore_from(backup_path)
            tmp_path.unlink(missing_ok=True)
            msg = f"Failed to write {self.path.name}: {exc}"
            raise PersistenceError(msg) from exc

        logger.info("Wrote %s", self.path.name)
        self._prune_backups()
        return _revision(payload)

    def _restore_from(self, backup_path: Path) -> None:
        """Best-effort restore after a failed write."""
        try:
            shutil.copy2(backup_path, self.path)
            logger.warning("Rolled back %s from %s", self.path.name, backup_path.name)
        except OSError:
            logger.error("Failed to roll back %s", self.path.name, exc_info=True)

    # ------------------------------------------------------------------
    # Backups
    # ------------------------------------------------------------------

    def create_manual_snapshot(self) -> Path:
        """Copy the current document to ``<stem>.manual.<ts>.json``."""
        if not self.path.exists():
            msg = f"{self.path.name} does not exist"
            raise PersistenceError(msg)
        snapshot = self.backup_dir / f"{self.stem}.{MANUAL_MARKER}.{_timestamp()}.json"
        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(self.path, snapshot)
        except OSError as exc:
            msg = f"Failed to create backup: {exc}"
            raise PersistenceError(msg) from exc
        return snapshot

    def list_backups(self) -> list[str]:
        """Backup file names, newest first."""
        if not self.backup_dir.exists():
            return []
        names = [p.name for p in self.backup_dir.glob(f"{self.stem}.*.json")]
        return sorted(names, key=_backup_timestamp, reverse=True)

    def backup_path(self, name: str) -> Path:
        """Resolve backup *name* inside the backup directory.

        Raises:
            PersistenceError: *name* escapes the directory or does not exist.
        """
        backup_path = self.backup_dir / name
        if Path(name).name != name or not backup_path.resolve().is_relative_to(
            self.backup_dir.resolve()
        ):
            msg = f"Invalid backup name: {name!r}"
            raise PersistenceError(msg)
        if not backup_path.is_file():
            msg = f"Backup {name} does not exist"
            raise PersistenceError(msg)
        return backup_path

    def restore_backup(self, name: str) -> Path:
        """Replace the document with backup *name*, snapshotting the current one first."""
        backup_path = self.backup_path(name)

        if self.path.exists():
            self.create_manual_snapshot()

        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        try:
            shutil.copy2(backup_path, tmp_path)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            msg = f"Failed to restore from backup: {exc}"
            raise PersistenceError(msg) from exc
        logger.info("Restored %s from %s", self.path.name, name)
        return backup_path

    def _prune_backups(self) -> None:
        """Remove automatic backups beyond ``max_backups`` (keep newest).

        Runs after the new document is in place, so a backup that cannot be
        removed is logged and left for the next write.
        """
        automatic = [
            name for name in self.list_backups() if f".{MANUAL_MARKER}." not in name
        ]
        for old in automatic[self.max_backups :]:
            try:
                (self.backup_dir / old).unlink(missing_ok=True)
            except OSError as exc:
                logger.warning("Could not remove old backup %s: %s", old, exc)
                continue
            logger.debug("Removed old backup: %s", old)
