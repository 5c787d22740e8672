from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol

ARCHIVE_FORMAT = "zip"


class Action(str, enum.Enum):
    ARCHIVE = "archive"
    COPY = "copy"


@dataclass(frozen=True)
class ArchiveInvocation:
    output_path: Path
    source_path: Path
    compression_level: int
    password: Optional[str] = field(default=None, repr=False)
    archive_format: str = ARCHIVE_FORMAT


@dataclass(frozen=True)
class ArchiveOutcome:
    completed: bool
    exit_status: Optional[int]

    @property
    def ok(self) -> bool:
        return self.completed and self.exit_status == 0


class Archiver(Protocol):
    def invoke(self, invocation: ArchiveInvocation) -> ArchiveOutcome:
        ...


class Copier(Protocol):
    def invoke(self, source: Path, dest: Path) -> bool:
        ...


class Directories(Protocol):
    def ensure_exists(self, path: Path) -> bool:
        ...


@dataclass
class ExecutionResult:
    item_name: str
    action: Action
    status: str
    summary: str
    started_at: datetime
    completed_at: datetime
    destination: Optional[Path] = None
    reason: Optional[str] = None
    exit_status: Optional[int] = None

    @property
    def success(self) -> bool:
        return self.status == "success"

    def __str__(self) -> str:
        return self.summary


class CapabilityError(Exception):
    """Raised by a capability that could not be launched at all."""


class ItemFailure(Exception):
    """Raised by executors to signal a controlled, item-level failure."""

    def __init__(self, message: str, path: Optional[Path] = None, exit_status: Optional[int] = None) -> None:
        super().__init__(message)
        self.path = path
        self.exit_status = exit_status


class DirectoryCreationFailure(ItemFailure):
    """Destination directory could not be created."""


class ArchiveFailure(ItemFailure):
    """Archiver exited non-zero, did not complete, or failed to launch."""


class CopyFailure(ItemFailure):
    """Recursive copy reported failure or could not be launched."""
