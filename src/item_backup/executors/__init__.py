from __future__ import annotations

from .archive import ArchiveExecutor, archive_path_for
from .base import BaseExecutor, failed_result
from .copy import CopyExecutor

__all__ = [
    "ArchiveExecutor",
    "BaseExecutor",
    "CopyExecutor",
    "archive_path_for",
    "failed_result",
]
