from __future__ import annotations

import logging
import os
import shutil
import stat
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .config import ArchiverConfig
from .job_engine import ArchiveInvocation, ArchiveOutcome, CapabilityError

LOG = logging.getLogger(__name__)

PASSWORD_PLACEHOLDER = "-p********"


@dataclass
class SevenZipArchiver:
    """Drives a 7-Zip compatible command-line archiver."""

    executable: str = "7z"
    timeout_seconds: Optional[float] = None

    def build_command(self, invocation: ArchiveInvocation, redact: bool = False) -> List[str]:
        cmd = [
            self.executable,
            "a",
            f"-t{invocation.archive_format}",
            _operand(invocation.output_path),
            _operand(invocation.source_path),
            f"-mx={invocation.compression_level}",
        ]
        if invocation.password:
            cmd.append(PASSWORD_PLACEHOLDER if redact else f"-p{invocation.password}")
        return cmd

    def invoke(self, invocation: ArchiveInvocation) -> ArchiveOutcome:
        cmd = self.build_command(invocation)
        LOG.debug("Running %s", " ".join(self.build_command(invocation, redact=True)))
        try:
            result = subprocess.run(cmd, capture_output=True, timeout=self.timeout_seconds)
        except subprocess.TimeoutExpired:
            LOG.error("Archiver timed out after %ss writing %s", self.timeout_seconds, invocation.output_path)
            return ArchiveOutcome(completed=False, exit_status=None)
        except OSError as exc:
            raise CapabilityError(f"{self.executable}: {exc.strerror or exc}") from exc

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", "ignore").strip()
            LOG.error("Archiver exited with status %s: %s", result.returncode, stderr[:500])
        return ArchiveOutcome(completed=True, exit_status=result.returncode)


def _operand(path: Path) -> str:
    # Absolute paths never start with "-", so 7z cannot read them as switches.
    return str(Path(path).absolute())


class TreeCopier:
    """Recursive copy that overwrites, keeps empty directories and skips unreadable files."""

    def invoke(self, source: Path, dest: Path) -> bool:
        if not source.exists():
            raise CapabilityError(f"source {source} does not exist")
        if not source.is_dir():
            dest.mkdir(parents=True, exist_ok=True)
            _copy_overwriting(str(source), str(dest / source.name))
            return True

        try:
            shutil.copytree(source, dest, copy_function=_copy_overwriting, dirs_exist_ok=True)
        except shutil.Error as exc:
            # Per-file failures do not fail the item.
            for src, dst, reason in exc.args[0]:
                LOG.warning("Skipped %s -> %s: %s", src, dst, reason)
        except OSError as exc:
            LOG.error("Copy of %s to %s failed: %s", source, dest, exc)
            return False
        return True


def _copy_overwriting(src: str, dst: str) -> str:
    if os.path.exists(dst) and not os.access(dst, os.W_OK):
        os.chmod(dst, os.stat(dst).st_mode | stat.S_IWUSR)
    return shutil.copy2(src, dst)


class FilesystemDirectories:
    def ensure_exists(self, path: Path) -> bool:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            LOG.error("Could not create directory %s: %s", path, exc)
            return False
        return path.is_dir()


def build_archiver(config: ArchiverConfig) -> SevenZipArchiver:
    return SevenZipArchiver(executable=config.executable, timeout_seconds=config.timeout_seconds)
