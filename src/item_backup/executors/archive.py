from __future__ import annotations

import logging
from pathlib import Path
from typing import Tuple

from item_backup.job_engine import (
    ARCHIVE_FORMAT,
    Action,
    ArchiveFailure,
    ArchiveInvocation,
    Archiver,
    CapabilityError,
    Directories,
)
from item_backup.resolver import ResolvedPlan

from .base import BaseExecutor

LOG = logging.getLogger(__name__)


def archive_path_for(plan: ResolvedPlan) -> Path:
    return plan.effective_dest_dir / plan.run_name / f"{plan.run_name}.{ARCHIVE_FORMAT}"


class ArchiveExecutor(BaseExecutor):
    """Compresses an item's source into a zip archive through the archiver."""

    action = Action.ARCHIVE

    def __init__(self, archiver: Archiver, directories: Directories) -> None:
        super().__init__(directories)
        self._archiver = archiver

    def execute(self, plan: ResolvedPlan) -> Tuple[Path, str]:
        output_path = archive_path_for(plan)
        self._ensure_directory(output_path.parent)

        invocation = ArchiveInvocation(
            output_path=output_path,
            source_path=plan.source_path,
            compression_level=plan.compression_level,
            password=plan.effective_password if plan.is_password_protected else None,
        )

        LOG.info("Archiving %s to %s (level %s)", plan.source_path, output_path, plan.compression_level)
        try:
            outcome = self._archiver.invoke(invocation)
        except CapabilityError as exc:
            raise ArchiveFailure(f"archiver could not be launched: {exc}", path=output_path) from exc

        if not outcome.completed:
            raise ArchiveFailure(
                f"archiver did not complete (exit status {outcome.exit_status}) writing {output_path}",
                path=output_path,
                exit_status=outcome.exit_status,
            )
        if outcome.exit_status != 0:
            raise ArchiveFailure(
                f"archiver exited with status {outcome.exit_status} writing {output_path}",
                path=output_path,
                exit_status=outcome.exit_status,
            )

        protection = "with password protection" if plan.is_password_protected else "without password protection"
        summary = (
            f"{plan.item_name}: archived {plan.source_path} to {output_path} "
            f"({ARCHIVE_FORMAT}, compression level {plan.compression_level}, {protection})"
        )
        return output_path, summary
