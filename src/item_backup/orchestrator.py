from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Sequence

from .capabilities import FilesystemDirectories, TreeCopier, build_archiver
from .config import BackupConfig, BackupItemConfig, ConfigError, GlobalDefaults
from .executors import ArchiveExecutor, BaseExecutor, CopyExecutor, failed_result
from .job_engine import Action, Archiver, Copier, Directories, ExecutionResult
from .naming import NamingPolicy
from .resolver import ResolutionError, resolve

LOG = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class BackupOrchestrator:
    """Runs every configured item in order, one result per item."""

    def __init__(
        self,
        archiver: Archiver,
        copier: Copier,
        directories: Directories,
        naming: Optional[NamingPolicy] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._archive_executor = ArchiveExecutor(archiver, directories)
        self._copy_executor = CopyExecutor(copier, directories)
        self._naming = naming or NamingPolicy()
        self._clock = clock or datetime.now

    def run(
        self,
        items: Sequence[BackupItemConfig],
        defaults: GlobalDefaults,
        only: Optional[Sequence[str]] = None,
    ) -> List[ExecutionResult]:
        if not items:
            raise ConfigError("Invalid configuration: no backup items defined.")

        results: List[ExecutionResult] = []
        for item in self._select_items(items, only):
            results.append(self.run_item(item, defaults))
        return results

    def run_item(self, item: BackupItemConfig, defaults: GlobalDefaults) -> ExecutionResult:
        started_at = self._clock()
        action = Action.ARCHIVE if item.should_zip else Action.COPY
        run_name = self._naming.derive_run_name(item.name, started_at)
        try:
            plan = resolve(item, defaults, run_name=run_name)
        except ResolutionError as exc:
            return failed_result(item.name, action, exc, started_at)

        executor: BaseExecutor = self._archive_executor if plan.should_zip else self._copy_executor
        try:
            return executor.run(plan)
        except Exception as exc:  # noqa: BLE001
            LOG.debug("Unexpected error for %s", item.name, exc_info=True)
            return failed_result(item.name, action, exc, started_at)

    def _select_items(
        self, items: Sequence[BackupItemConfig], only: Optional[Sequence[str]]
    ) -> Iterable[BackupItemConfig]:
        if only:
            name_set = set(only)
            missing = name_set - {item.name for item in items}
            if missing:
                missing_str = ", ".join(sorted(missing))
                raise ConfigError(f"Unknown item(s) requested: {missing_str}")
            return [item for item in items if item.name in name_set]
        return list(items)


def build_orchestrator(config: BackupConfig, clock: Optional[Clock] = None) -> BackupOrchestrator:
    return BackupOrchestrator(
        archiver=build_archiver(config.archiver),
        copier=TreeCopier(),
        directories=FilesystemDirectories(),
        naming=NamingPolicy(twenty_four_hour=config.naming.twenty_four_hour),
        clock=clock,
    )

