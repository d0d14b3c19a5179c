"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, orgctl.toml only contains overrides.
A fresh workspace needs no config file at all.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- orgctl.toml sections ---


class OrganizationConfig(BaseModel):
    """[organization] section."""

    model_config = {"frozen": True}

    root_id: str = "koncernen"
    types_file: str | None = None
    thresholds_file: str | None = None


class StorageConfig(BaseModel):
    """[storage] section.

    Relative paths resolve against the workspace root (the directory
    holding ``orgctl.toml``).
    """

    model_config = {"frozen": True}

    data_dir: str = "data"
    document: str = "organization.json"
    metrics: str = "data.json"
    backup_dir: str = "backups"
    backup_max_count: int = Field(default=10, ge=1)
