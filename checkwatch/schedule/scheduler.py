"""CheckScheduler — runs every enabled check once per tick, concurrently."""

from __future__ import annotations

import asyncio
import time
from types import TracebackType

import structlog

from checkwatch.core.config import SchedulerConfig
from checkwatch.core.types import Check
from checkwatch.schedule.runner import CheckRunner
from checkwatch.store.base import CheckStore

logger = structlog.stdlib.get_logger()


class CheckScheduler:
    """Background loop that evaluates all enabled checks at a fixed interval.

    Runs are bounded by ``run_timeout_secs`` and by ``max_concurrent_checks``
    in flight at once. A run that hangs or times out does not affect the
    others.

    Usage::

        scheduler = CheckScheduler(check_store, runner, config)
        async with scheduler:
            await asyncio.sleep(3600)
    """

    def __init__(
        self,
        check_store: CheckStore,
        runner: CheckRunner,
        config: SchedulerConfig | None = None,
    ) -> None:
        self._check_store = check_store
        self._runner = runner
        self._config = config or SchedulerConfig()
        self._semaphore = asyncio.Semaphore(self._config.max_concurrent_checks)
        self._task: asyncio.Task[None] | None = None
        self._running = False
        self._tick_count = 0
        self._last_tick_time: float = 0.0

    @property
    def running(self) -> bool:
        return self._running

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def last_tick_time(self) -> float:
        return self._last_tick_time

    async def tick(self) -> int:
        """Evaluate every enabled check once. Returns how many were started."""
        checks = await self._check_store.list_checks(enabled_only=True)
        await asyncio.gather(*(self._run_one(c) for c in checks))
        self._tick_count += 1
        self._last_tick_time = time.time()
        return len(checks)

    async def _run_one(self, check: Check) -> None:
        async with self._semaphore:
            try:
                await asyncio.wait_for(
                    self._runner.run(check),
                    timeout=self._config.run_timeout_secs,
                )
            except asyncio.TimeoutError:
                logger.warning(
                    "check_run_timeout",
                    check=check.name,
                    timeout_secs=self._config.run_timeout_secs,
                )

    async def start(self) -> None:
        """Start the background tick loop."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info("scheduler_started", interval_secs=self._config.interval_secs)

    async def stop(self) -> None:
        """Stop the tick loop, cancelling any in-flight tick."""
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("scheduler_stopped", ticks=self._tick_count)

    async def _loop(self) -> None:
        while self._running:
            started = time.monotonic()
            try:
                count = await self.tick()
                logger.debug("scheduler_tick", checks=count)
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("scheduler_tick_error")

            elapsed = time.monotonic() - started
            try:
                await asyncio.sleep(max(0.0, self._config.interval_secs - elapsed))
            except asyncio.CancelledError:
                break

    async def __aenter__(self) -> CheckScheduler:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.stop()
