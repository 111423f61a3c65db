"""Command-line entry points.

``pizzint-collect`` runs one tick and exits (cron, GitHub Actions, manual).
``pizzint-continuous`` collects at a fixed interval until SIGINT / SIGTERM.

Both work with no arguments; flags only override Settings::

    pizzint-collect                                  # backend from .env
    pizzint-collect --backend file --data-file data/readings.json
    pizzint-continuous --interval-minutes 10

Exit code: 0 on success or skipped, 1 on error.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import signal
import sys
from pathlib import Path
from typing import Any

from pizzint.core.config import Settings
from pizzint.core.config import settings as default_settings
from pizzint.core.enums import StorageBackend
from pizzint.core.utils.logging_config import configure_logging, get_logger
from pizzint.pipeline.runner import collect_once, run_forever

logger = get_logger("cli")


def _base_parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument(
        "--backend",
        choices=[b.value for b in StorageBackend],
        default=None,
        help="Storage backend (default: STORAGE_BACKEND setting)",
    )
    parser.add_argument(
        "--data-file",
        type=Path,
        default=None,
        help="JSON data file for the file backend (default: DATA_FILE setting)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        default=False,
        help="Emit structured logs as JSON lines",
    )
    return parser


def _apply_overrides(args: argparse.Namespace, settings: Settings) -> Settings:
    update: dict[str, Any] = {}
    if args.backend is not None:
        update["storage_backend"] = StorageBackend(args.backend)
    if args.data_file is not None:
        update["data_file"] = args.data_file
    if getattr(args, "interval_minutes", None) is not None:
        update["collect_interval_minutes"] = args.interval_minutes
    return settings.model_copy(update=update) if update else settings


def collect_main(argv: list[str] | None = None, settings: Settings | None = None) -> int:
    """Run a single collection tick.

    Returns:
        Exit code: 0 on success or skipped, 1 on error.
    """
    args = _base_parser("Collect one pizza index reading.").parse_args(argv)
    settings = _apply_overrides(args, settings or default_settings)
    configure_logging(json_output=args.json_logs or settings.log_json)

    result = asyncio.run(collect_once(settings))
    print(json.dumps(result.to_dict(), indent=2))
    return 0 if result.ok else 1


async def _continuous(settings: Settings) -> int:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:  # Windows event loops
            pass
    return await run_forever(settings, stop_event=stop)


def continuous_main(argv: list[str] | None = None, settings: Settings | None = None) -> int:
    """Collect forever at the configured interval.

    Returns:
        Exit code 0 after a clean shutdown.
    """
    parser = _base_parser("Collect pizza index readings at a fixed interval.")
    parser.add_argument(
        "--interval-minutes",
        type=int,
        default=None,
        help="Minutes between ticks (default: COLLECT_INTERVAL_MINUTES setting)",
    )
    args = parser.parse_args(argv)
    settings = _apply_overrides(args, settings or default_settings)
    configure_logging(json_output=args.json_logs or settings.log_json)

    try:
        ticks = asyncio.run(_continuous(settings))
    except KeyboardInterrupt:
        ticks = None
    logger.info("shutdown", ticks=ticks)
    return 0


if __name__ == "__main__":
    sys.exit(collect_main())
