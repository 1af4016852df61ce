#!/usr/bin/env python3
"""Main entrypoint — wires stores, fetcher, channels and runs the check scheduler.

Usage::

    # Run with default config
    python scripts/run.py

    # Custom config and checks files
    python scripts/run.py --config config/settings.yaml --checks config/checks.yaml

    # Evaluate every check once and exit
    python scripts/run.py --once --log-level DEBUG
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys

import structlog

from checkwatch.checker.target import GraphiteTargetFetcher
from checkwatch.checker.value import ThresholdValueChecker
from checkwatch.core.config import load_checks, load_settings
from checkwatch.core.logging import setup_logging
from checkwatch.notify.factory import create_dispatcher
from checkwatch.schedule.runner import CheckRunner
from checkwatch.schedule.scheduler import CheckScheduler
from checkwatch.store.memory import InMemoryAlertStore, InMemoryCheckStore

logger = structlog.get_logger(__name__)


async def run(args: argparse.Namespace) -> int:
    """Start all components and run until interrupted."""
    settings = load_settings(args.config)
    setup_logging(level=args.log_level)

    checks = load_checks(args.checks or settings.checks_file)
    check_store = InMemoryCheckStore(checks)
    alert_store = InMemoryAlertStore()
    dispatcher = create_dispatcher(settings.notifications)

    logger.info(
        "checkwatch_starting",
        checks=len(checks),
        channels=[ch.name for ch in dispatcher.channels],
        graphite=settings.graphite.url,
    )

    fetcher = GraphiteTargetFetcher(settings.graphite)
    await fetcher.connect()

    runner = CheckRunner(
        alert_store=alert_store,
        check_store=check_store,
        target_fetcher=fetcher,
        value_checker=ThresholdValueChecker(),
        dispatcher=dispatcher,
    )
    scheduler = CheckScheduler(check_store, runner, settings.scheduler)

    if args.once:
        await scheduler.tick()
    else:
        await scheduler.start()

        # ── Wait for shutdown signal ─────────────────────────────
        stop_event = asyncio.Event()

        def _signal_handler() -> None:
            logger.info("shutdown_signal_received")
            stop_event.set()

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, _signal_handler)
            except NotImplementedError:
                # Windows: signal handlers not supported on ProactorEventLoop
                pass

        try:
            await stop_event.wait()
        except KeyboardInterrupt:
            logger.info("keyboard_interrupt")

        await scheduler.stop()

    # ── Graceful shutdown ────────────────────────────────────────
    await dispatcher.close()
    await fetcher.close()

    states = {c.name: c.state.name for c in await check_store.list_checks()}
    logger.info("checkwatch_stopped", ticks=scheduler.tick_count, states=states)
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Evaluate threshold checks against Graphite and notify subscribers.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--checks",
        default=None,
        help="Path to checks YAML (default: settings.checks_file)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Evaluate every enabled check a single time and exit",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    args = parser.parse_args()

    code = asyncio.run(run(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
