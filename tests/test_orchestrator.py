"""Tests for item_backup.orchestrator."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest
from freezegun import freeze_time

from item_backup.config import BackupConfig, ConfigError
from item_backup.capabilities import FilesystemDirectories, SevenZipArchiver, TreeCopier
from item_backup.job_engine import Action, ArchiveOutcome
from item_backup.naming import NamingPolicy
from item_backup.orchestrator import BackupOrchestrator, build_orchestrator

from conftest import DEFAULT_PASSWORD, FakeArchiver, FakeCopier, FakeDirectories

FIXED_NOW = datetime(2024, 3, 5, 9, 7, 2)


def _orchestrator(archiver=None, copier=None, directories=None, **kwargs) -> BackupOrchestrator:
    return BackupOrchestrator(
        archiver=archiver or FakeArchiver(),
        copier=copier or FakeCopier(),
        directories=directories or FakeDirectories(),
        clock=lambda: FIXED_NOW,
        **kwargs,
    )


class TestRun:
    def test_empty_items_raise_config_error(self, defaults):
        with pytest.raises(ConfigError):
            _orchestrator().run([], defaults)

    def test_dispatches_by_should_zip(self, make_item, defaults):
        archiver, copier = FakeArchiver(), FakeCopier()
        items = [make_item(name="Zipped", should_zip=True), make_item(name="Copied", should_zip=False)]

        results = _orchestrator(archiver, copier).run(items, defaults)

        assert [r.action for r in results] == [Action.ARCHIVE, Action.COPY]
        assert len(archiver.invocations) == 1
        assert len(copier.calls) == 1

    def test_run_names_are_timestamp_qualified(self, make_item, defaults):
        archiver = FakeArchiver()
        _orchestrator(archiver).run([make_item()], defaults)
        expected = defaults.default_backup_path / "Docs-2024-03-05-09-07-02" / "Docs-2024-03-05-09-07-02.zip"
        assert archiver.invocations[0].output_path == expected

    def test_continue_on_error(self, make_item, defaults):
        archiver = FakeArchiver(
            [ArchiveOutcome(completed=True, exit_status=2), ArchiveOutcome(completed=True, exit_status=0)]
        )
        items = [make_item(name="First"), make_item(name="Second")]

        results = _orchestrator(archiver).run(items, defaults)

        assert len(results) == 2
        assert [r.item_name for r in results] == ["First", "Second"]
        assert not results[0].success
        assert results[0].exit_status == 2
        assert results[1].success

    def test_resolution_error_is_item_level(self, make_item, defaults):
        items = [make_item(name="Broken", source_path=""), make_item(name="Fine")]

        results = _orchestrator().run(items, defaults)

        assert [r.success for r in results] == [False, True]
        assert "source path" in results[0].reason

    def test_unexpected_error_is_item_level(self, make_item, defaults):
        class ExplodingArchiver:
            def invoke(self, invocation):
                raise RuntimeError("boom")

        items = [make_item(name="Boom"), make_item(name="Copy", should_zip=False)]

        results = _orchestrator(archiver=ExplodingArchiver()).run(items, defaults)

        assert not results[0].success
        assert "boom" in results[0].reason
        assert results[1].success

    def test_password_never_in_results(self, make_item, defaults):
        items = [
            make_item(name="Secret", is_password_protected=True, compression_level=9),
            make_item(name="Failing", is_password_protected=True),
        ]
        archiver = FakeArchiver([ArchiveOutcome(completed=True, exit_status=0), ArchiveOutcome(completed=False, exit_status=None)])

        results = _orchestrator(archiver).run(items, defaults)

        assert results[0].success
        assert "password protection" in results[0].summary
        for result in results:
            assert DEFAULT_PASSWORD not in result.summary
            assert DEFAULT_PASSWORD not in (result.reason or "")

    def test_unprotected_password_never_sent(self, make_item, defaults):
        archiver = FakeArchiver()
        item = make_item(is_password_protected=False, use_default_password=True)
        _orchestrator(archiver).run([item], defaults)
        assert archiver.invocations[0].password is None

    def test_copy_summary_has_no_compression(self, make_item, defaults):
        results = _orchestrator().run([make_item(should_zip=False)], defaults)
        assert results[0].success
        assert "zip" not in results[0].summary.lower()
        assert "compression" not in results[0].summary.lower()

    def test_only_selects_in_declared_order(self, make_item, defaults):
        items = [make_item(name="A"), make_item(name="B"), make_item(name="C")]
        results = _orchestrator().run(items, defaults, only=["C", "A"])
        assert [r.item_name for r in results] == ["A", "C"]

    def test_only_unknown_item(self, make_item, defaults):
        with pytest.raises(ConfigError, match="Unknown item"):
            _orchestrator().run([make_item()], defaults, only=["Nope"])

    def test_twenty_four_hour_naming(self, make_item, defaults):
        archiver = FakeArchiver()
        orchestrator = BackupOrchestrator(
            archiver=archiver,
            copier=FakeCopier(),
            directories=FakeDirectories(),
            naming=NamingPolicy(twenty_four_hour=True),
            clock=lambda: datetime(2024, 3, 5, 21, 7, 2),
        )
        orchestrator.run([make_item()], defaults)
        assert archiver.invocations[0].output_path.name == "Docs-2024-03-05-21-07-02.zip"


@freeze_time("2024-03-05 09:07:02")
def test_default_clock_uses_current_time(make_item, defaults):
    copier = FakeCopier()
    orchestrator = BackupOrchestrator(archiver=FakeArchiver(), copier=copier, directories=FakeDirectories())
    orchestrator.run([make_item(should_zip=False)], defaults)
    assert copier.calls[0][1] == defaults.default_backup_path / "Docs-2024-03-05-09-07-02"


@freeze_time("2024-03-05 09:07:02")
def test_end_to_end_copy_with_real_capabilities(tmp_path: Path):
    source = tmp_path / "source"
    (source / "sub").mkdir(parents=True)
    (source / "sub" / "file.txt").write_text("data")
    config = BackupConfig.model_validate(
        {
            "defaults": {"backup_path": str(tmp_path / "backups")},
            "items": [{"name": "Docs", "source_path": str(source), "should_zip": "false"}],
        }
    )

    orchestrator = build_orchestrator(config)
    results = orchestrator.run(config.items, config.global_defaults())

    assert results[0].success
    copied = tmp_path / "backups" / "Docs-2024-03-05-09-07-02" / "sub" / "file.txt"
    assert copied.read_text() == "data"


def test_build_orchestrator_wires_capabilities(tmp_path: Path):
    config = BackupConfig.model_validate(
        {
            "defaults": {"backup_path": str(tmp_path)},
            "items": [{"name": "Docs", "source_path": str(tmp_path)}],
            "archiver": {"executable": "7za", "timeout_seconds": 10},
        }
    )
    orchestrator = build_orchestrator(config)
    assert isinstance(orchestrator._archive_executor._archiver, SevenZipArchiver)
    assert orchestrator._archive_executor._archiver.executable == "7za"
    assert isinstance(orchestrator._copy_executor._copier, TreeCopier)
    assert isinstance(orchestrator._copy_executor._directories, FilesystemDirectories)
