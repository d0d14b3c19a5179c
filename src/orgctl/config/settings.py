"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``ORGCTL_*`` prefix
  3. TOML file    — ``orgctl.toml`` discovered via walk-up
  4. Code defaults — baked into the section models

Uses Pydantic Settings v2 with a custom :class:`TomlSettingsSource` that
reuses the ``find_config`` walk-up discovery from
:mod:`orgctl.config.discovery`.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any, ClassVar

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from orgctl.config.discovery import find_config
from orgctl.config.models import OrganizationConfig, StorageConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from an ``orgctl.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                import click

                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class OrgSettings(BaseSettings):
    """Unified settings for the orgctl CLI.

    Attributes:
        workspace_root: Directory that relative storage paths resolve
            against (parent of ``orgctl.toml``, or CWD if none was found).
        config_path: The TOML file in effect, or None.
        data_dir: ``--data-dir`` override for ``[storage] data_dir``.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "ORGCTL_",
        "env_nested_delimiter": "__",
    }

    # --- Resolved path (not in TOML, derived from config location) ---
    workspace_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None
    data_dir: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    organization: OrganizationConfig = Field(default_factory=OrganizationConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)

    # Retained for type-checker visibility; not used at runtime.
    _toml_path: ClassVar[Path | None] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        workspace_root: Path | None = None,
        **cli_flags: Any,
    ) -> OrgSettings:
        """Construct settings from a CLI invocation.

        Discovers ``orgctl.toml`` via walk-up (or explicit *config_path*),
        resolves *workspace_root* from the config file's parent directory,
        and merges CLI flags as highest-priority overrides. ``None`` flags
        are dropped so they never shadow env or TOML values.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(workspace_root)

        resolved_root = workspace_root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        flags = {key: value for key, value in cli_flags.items() if value is not None}
        _tls.toml_path = toml_path
        try:
            return cls(
                workspace_root=resolved_root,
                config_path=toml_path,
                **flags,
            )
        finally:
            _tls.toml_path = None

    # ------------------------------------------------------------------
    # Resolved paths
    # ------------------------------------------------------------------

    def resolve(self, value: str | Path) -> Path:
        """Resolve *value* against the workspace root unless already absolute."""
        path = Path(value)
        return path if path.is_absolute() else self.workspace_root / path

    @property
    def data_path(self) -> Path:
        return self.data_dir if self.data_dir is not None else self.resolve(self.storage.data_dir)

    @property
    def document_path(self) -> Path:
        return self.data_path / self.storage.document

    @property
    def metrics_path(self) -> Path:
        return self.data_path / self.storage.metrics

    @property
    def backup_path(self) -> Path:
        return self.resolve(self.storage.backup_dir)
