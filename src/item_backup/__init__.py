"""Configuration-driven backup of directories to zip archives or plain copies."""

from __future__ import annotations

from .config import load_config, BackupConfig, GlobalDefaults, BackupItemConfig  # noqa: F401
from .orchestrator import BackupOrchestrator, build_orchestrator  # noqa: F401

__version__ = "0.1.0"
