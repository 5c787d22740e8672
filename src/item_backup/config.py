from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

LOG = logging.getLogger(__name__)

DEFAULT_ARCHIVER_EXECUTABLE = "7z"
# Ceiling for a single archiver invocation.
DEFAULT_ARCHIVE_TIMEOUT_SECONDS = 6 * 60 * 60


class ConfigError(Exception):
    """Raised when the backup configuration is invalid."""


class SecretRef(BaseModel):
    """Reference to a secret stored in an environment variable or file."""

    env: Optional[str] = Field(default=None, description="Environment variable name.")
    file: Optional[Path] = Field(default=None, description="Path to a file containing the secret.")

    def resolve(self) -> Optional[str]:
        if self.env:
            value = os.getenv(self.env)
            if value:
                return value
        if self.file:
            file_path = Path(self.file).expanduser()
            if file_path.exists():
                return file_path.read_text(encoding="utf-8").strip()
        return None


# --- Defaults ----------------------------------------------------------------


class GlobalDefaults(BaseModel):
    """Run-wide fallbacks shared read-only by every item."""

    model_config = ConfigDict(frozen=True)

    default_backup_path: Path
    default_password: str = Field(default="", repr=False)


class DefaultsConfig(BaseModel):
    backup_path: Path
    password: Optional[str] = Field(default=None, repr=False)
    password_ref: Optional[SecretRef] = None

    @field_validator("backup_path", mode="before")
    @classmethod
    def _require_backup_path(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError("Default backup path must not be empty.")
        return value

    @field_validator("backup_path")
    @classmethod
    def _expand_backup_path(cls, value: Path) -> Path:
        return value.expanduser()

    def to_global_defaults(self) -> GlobalDefaults:
        password = self.password
        if not password and self.password_ref:
            password = self.password_ref.resolve()
        return GlobalDefaults(default_backup_path=self.backup_path, default_password=password or "")


# --- Items -------------------------------------------------------------------


class BackupItemConfig(BaseModel):
    """One configured backup unit."""

    model_config = ConfigDict(frozen=True)

    name: str
    source_path: Optional[Path] = None
    dest_path: Optional[Path] = None
    use_default_path: bool = True
    should_zip: bool = True
    is_password_protected: bool = False
    password: Optional[str] = Field(default=None, repr=False)
    use_default_password: bool = True
    compression_level: int = 5

    @field_validator("name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Backup item name must not be empty.")
        return value

    @field_validator("source_path", "dest_path", mode="before")
    @classmethod
    def _blank_path_to_none(cls, value: object) -> object:
        # Path("") would silently become the current directory.
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("source_path", "dest_path")
    @classmethod
    def _expand_path(cls, value: Optional[Path]) -> Optional[Path]:
        return value.expanduser() if value is not None else None


# --- Runtime options ---------------------------------------------------------


class ArchiverConfig(BaseModel):
    executable: str = DEFAULT_ARCHIVER_EXECUTABLE
    timeout_seconds: Optional[float] = DEFAULT_ARCHIVE_TIMEOUT_SECONDS

    @field_validator("timeout_seconds")
    @classmethod
    def _positive_timeout(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value <= 0:
            raise ValueError("Archiver timeout must be positive.")
        return value


class NamingConfig(BaseModel):
    twenty_four_hour: bool = False


class LoggingConfig(BaseModel):
    level: str = "INFO"
    file: Optional[Path] = None

    @field_validator("level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("file")
    @classmethod
    def _expand_file(cls, value: Optional[Path]) -> Optional[Path]:
        return value.expanduser() if value is not None else None


class BackupConfig(BaseModel):
    defaults: DefaultsConfig
    items: List[BackupItemConfig]
    archiver: ArchiverConfig = ArchiverConfig()
    naming: NamingConfig = NamingConfig()
    logging: LoggingConfig = LoggingConfig()

    @field_validator("items")
    @classmethod
    def _require_items(cls, value: List[BackupItemConfig]) -> List[BackupItemConfig]:
        if not value:
            raise ValueError("At least one backup item must be configured.")
        return value

    @model_validator(mode="after")
    def _warn_duplicate_names(self) -> "BackupConfig":
        seen = set()
        for item in self.items:
            if item.name in seen:
                LOG.warning("Item name '%s' is configured more than once; same-second runs share a run name", item.name)
            seen.add(item.name)
        return self

    def global_defaults(self) -> GlobalDefaults:
        return self.defaults.to_global_defaults()


def load_config(path: Path) -> BackupConfig:
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(raw, dict) or not raw:
        raise ConfigError(f"Invalid configuration file: {path}")

    try:
        return BackupConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
