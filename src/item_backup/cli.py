from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .config import BackupConfig, ConfigError, load_config
from .job_engine import ExecutionResult
from .logger import configure_logging, get_logger
from .orchestrator import build_orchestrator

DEFAULT_CONFIG_PATH = "/etc/item-backup/backup.yaml"

EXIT_OK = 0
EXIT_ITEM_FAILED = 1
EXIT_CONFIG_ERROR = 2

LOG = get_logger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Configuration-driven backup of directories to zip archives or copies.")
    parser.add_argument(
        "--config",
        default=os.getenv("ITEM_BACKUP_CONFIG", DEFAULT_CONFIG_PATH),
        help="Path to configuration YAML file.",
    )
    parser.add_argument(
        "--item",
        action="append",
        help="Specific item name to back up (can be specified multiple times). Runs all items when omitted.",
    )
    parser.add_argument(
        "--list-items",
        action="store_true",
        help="List items defined in the configuration and exit.",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL"),
        help="Log level (default from configuration, else INFO).",
    )
    parser.add_argument("--log-file", type=Path, help="Also write logs to this rotating file.")
    return parser.parse_args(argv)


def list_items(config: BackupConfig) -> None:
    for item in config.items:
        action = "zip" if item.should_zip else "copy"
        print(f"{item.name}\t{action}\t{item.source_path}")


def report(results: List[ExecutionResult]) -> int:
    exit_code = EXIT_OK
    for result in results:
        if result.success:
            LOG.info(result.summary)
        else:
            exit_code = EXIT_ITEM_FAILED
            LOG.error(result.summary)
        print(result.summary)

    failed = sum(1 for result in results if not result.success)
    LOG.info("Backup run finished: %d item(s), %d failed", len(results), failed)
    return exit_code


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    config_path = Path(args.config).expanduser()

    try:
        config = load_config(config_path)
    except ConfigError as exc:
        configure_logging(args.log_level or "INFO", args.log_file)
        LOG.error("Configuration error: %s", exc)
        return EXIT_CONFIG_ERROR

    configure_logging(args.log_level or config.logging.level, args.log_file or config.logging.file)

    if args.list_items:
        list_items(config)
        return EXIT_OK

    LOG.info("Starting backup run using config %s", config_path)
    orchestrator = build_orchestrator(config)
    try:
        results = orchestrator.run(config.items, config.global_defaults(), only=args.item)
    except ConfigError as exc:
        LOG.error("Configuration error: %s", exc)
        return EXIT_CONFIG_ERROR
    return report(results)


if __name__ == "__main__":
    sys.exit(main())
