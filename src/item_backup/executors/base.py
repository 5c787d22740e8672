from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Tuple

from item_backup.job_engine import (
    Action,
    DirectoryCreationFailure,
    Directories,
    ExecutionResult,
    ItemFailure,
)
from item_backup.resolver import ResolvedPlan


class BaseExecutor:
    """Runs one action for a resolved plan and turns the outcome into a result."""

    action: Action

    def __init__(self, directories: Directories) -> None:
        self._directories = directories

    def run(self, plan: ResolvedPlan) -> ExecutionResult:
        started_at = datetime.now()
        try:
            destination, summary = self.execute(plan)
        except ItemFailure as exc:
            return failed_result(plan.item_name, self.action, exc, started_at)
        return ExecutionResult(
            item_name=plan.item_name,
            action=self.action,
            status="success",
            summary=summary,
            started_at=started_at,
            completed_at=datetime.now(),
            destination=destination,
        )

    def execute(self, plan: ResolvedPlan) -> Tuple[Path, str]:
        raise NotImplementedError

    def _ensure_directory(self, path: Path) -> None:
        try:
            ok = self._directories.ensure_exists(path)
        except OSError as exc:
            raise DirectoryCreationFailure(f"could not create directory {path}: {exc}", path=path) from exc
        if not ok:
            raise DirectoryCreationFailure(f"could not create directory {path}", path=path)


def failed_result(item_name: str, action: Action, exc: Exception, started_at: datetime) -> ExecutionResult:
    path = getattr(exc, "path", None)
    exit_status = getattr(exc, "exit_status", None)
    summary = f"{item_name}: {action.value} FAILED - {exc}"
    if path is not None and str(path) not in str(exc):
        summary += f" (path: {path})"
    return ExecutionResult(
        item_name=item_name,
        action=action,
        status="failed",
        summary=summary,
        started_at=started_at,
        completed_at=datetime.now(),
        destination=path,
        reason=str(exc),
        exit_status=exit_status,
    )
