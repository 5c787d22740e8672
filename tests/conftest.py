"""Shared fixtures and fake capabilities for item-backup tests."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

from item_backup.config import BackupItemConfig, GlobalDefaults
from item_backup.job_engine import ArchiveInvocation, ArchiveOutcome, CapabilityError

DEFAULT_PASSWORD = "default-secret"
ITEM_PASSWORD = "item-secret"


class FakeArchiver:
    def __init__(self, outcomes: Optional[List[ArchiveOutcome]] = None, launch_error: bool = False) -> None:
        self.outcomes = list(outcomes or [])
        self.launch_error = launch_error
        self.invocations: List[ArchiveInvocation] = []

    def invoke(self, invocation: ArchiveInvocation) -> ArchiveOutcome:
        self.invocations.append(invocation)
        if self.launch_error:
            raise CapabilityError("7z: No such file or directory")
        if self.outcomes:
            return self.outcomes.pop(0)
        return ArchiveOutcome(completed=True, exit_status=0)


class FakeCopier:
    def __init__(self, ok: bool = True, launch_error: bool = False) -> None:
        self.ok = ok
        self.launch_error = launch_error
        self.calls: List[Tuple[Path, Path]] = []

    def invoke(self, source: Path, dest: Path) -> bool:
        self.calls.append((source, dest))
        if self.launch_error:
            raise CapabilityError("copy unavailable")
        return self.ok


class FakeDirectories:
    def __init__(self, failing: Optional[Dict[Path, bool]] = None) -> None:
        self.failing = failing or {}
        self.created: List[Path] = []

    def ensure_exists(self, path: Path) -> bool:
        if path in self.failing:
            return False
        self.created.append(path)
        return True


@pytest.fixture()
def defaults(tmp_path: Path) -> GlobalDefaults:
    return GlobalDefaults(default_backup_path=tmp_path / "backups", default_password=DEFAULT_PASSWORD)


@pytest.fixture()
def make_item(tmp_path: Path):
    def _make(**overrides) -> BackupItemConfig:
        data = {
            "name": "Docs",
            "source_path": tmp_path / "source",
            "use_default_path": True,
            "should_zip": True,
            "is_password_protected": False,
            "use_default_password": True,
            "compression_level": 5,
        }
        data.update(overrides)
        return BackupItemConfig(**data)

    return _make


@pytest.fixture()
def archiver() -> FakeArchiver:
    return FakeArchiver()


@pytest.fixture()
def copier() -> FakeCopier:
    return FakeCopier()


@pytest.fixture()
def directories() -> FakeDirectories:
    return FakeDirectories()
