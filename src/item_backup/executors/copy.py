from __future__ import annotations

import logging
from pathlib import Path
from typing import Tuple

from item_backup.job_engine import Action, CapabilityError, Copier, CopyFailure, Directories
from item_backup.resolver import ResolvedPlan

from .base import BaseExecutor

LOG = logging.getLogger(__name__)


class CopyExecutor(BaseExecutor):
    """Copies an item's source tree into a run-named directory."""

    action = Action.COPY

    def __init__(self, copier: Copier, directories: Directories) -> None:
        super().__init__(directories)
        self._copier = copier

    def execute(self, plan: ResolvedPlan) -> Tuple[Path, str]:
        self._ensure_directory(plan.effective_dest_dir)
        destination = plan.effective_dest_dir / plan.run_name

        LOG.info("Copying %s to %s", plan.source_path, destination)
        try:
            ok = self._copier.invoke(plan.source_path, destination)
        except CapabilityError as exc:
            raise CopyFailure(f"copy could not be launched: {exc}", path=destination) from exc
        if not ok:
            raise CopyFailure(f"copy of {plan.source_path} to {destination} failed", path=destination)

        summary = f"{plan.item_name}: copied {plan.source_path} to {destination} (plain copy, no archive created)"
        return destination, summary
