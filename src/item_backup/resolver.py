from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .config import BackupItemConfig, ConfigError, GlobalDefaults


class ResolutionError(ConfigError):
    """Raised when an item cannot be merged into a runnable plan."""


@dataclass(frozen=True)
class ResolvedPlan:
    """Fully merged settings for one item's execution."""

    item_name: str
    source_path: Path
    effective_dest_dir: Path
    should_zip: bool
    is_password_protected: bool
    compression_level: int
    run_name: str
    effective_password: Optional[str] = field(default=None, repr=False)


def resolve(item: BackupItemConfig, defaults: GlobalDefaults, run_name: str) -> ResolvedPlan:
    """Merge ``item`` with ``defaults``.

    The default-path flag always wins over an explicit ``dest_path``. The
    password is only looked at when the item is password protected.
    """
    if item.source_path is None:
        raise ResolutionError(f"Item '{item.name}' has no source path.")

    if item.use_default_path:
        dest_dir: Optional[Path] = defaults.default_backup_path
    else:
        dest_dir = item.dest_path
    if dest_dir is None:
        raise ResolutionError(f"Item '{item.name}' has no destination path and does not use the default.")

    password: Optional[str] = None
    if item.is_password_protected:
        password = defaults.default_password if item.use_default_password else item.password
        if not password:
            source = "default password" if item.use_default_password else "item password"
            raise ResolutionError(f"Item '{item.name}' is password protected but its {source} is empty.")

    return ResolvedPlan(
        item_name=item.name,
        source_path=item.source_path,
        effective_dest_dir=dest_dir,
        should_zip=item.should_zip,
        is_password_protected=item.is_password_protected,
        compression_level=item.compression_level,
        run_name=run_name,
        effective_password=password,
    )
