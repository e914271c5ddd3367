"""Cancellable periodic refresh for order views."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

STAFF_POLL_INTERVAL_SECONDS = 10.0
CUSTOMER_POLL_INTERVAL_SECONDS = 30.0

PollAction = Callable[[], Awaitable[Any]]
SleepFunc = Callable[[float], Awaitable[Any]]


class PollingTask:
    """Runs an async action immediately and then on a fixed interval.

    The loop is a single ``asyncio`` task. ``stop()`` cancels it together with
    any manual refreshes still in flight, so a fetch that was started before
    the stop never gets to apply its result.
    """

    def __init__(
        self,
        action: PollAction,
        interval_seconds: float,
        name: str = "poller",
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """Initialize the polling task.

        Args:
            action: Coroutine function to run on every tick
            interval_seconds: Delay between the end of one tick and the next
            name: Name used for the asyncio task and in log messages
            sleep: Sleep coroutine, injectable for tests
        """
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")

        self.action = action
        self.interval_seconds = interval_seconds
        self.name = name
        self._sleep = sleep
        self._loop_task: asyncio.Task | None = None
        self._manual_tasks: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    def start(self) -> None:
        """Start polling; calling it again while running does nothing."""
        if self.running:
            return

        logger.info(f"Starting {self.name} every {self.interval_seconds}s")
        self._loop_task = asyncio.create_task(self._run(), name=self.name)

    def run_now(self) -> asyncio.Task:
        """Trigger one fetch right away without touching the timer.

        Returns:
            The task running the fetch, which ``stop()`` will also cancel
        """
        task = asyncio.create_task(self._tick(), name=f"{self.name}-manual")
        self._manual_tasks.add(task)
        task.add_done_callback(self._manual_tasks.discard)
        return task

    async def stop(self) -> None:
        """Cancel the timer and every in-flight fetch, then wait for them."""
        tasks = list(self._manual_tasks)
        if self._loop_task is not None:
            tasks.append(self._loop_task)
            self._loop_task = None

        for task in tasks:
            task.cancel()

        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        self._manual_tasks.clear()
        logger.info(f"Stopped {self.name}")

    async def _run(self) -> None:
        while True:
            await self._tick()
            await self._sleep(self.interval_seconds)

    async def _tick(self) -> None:
        # A failed tick must not end the loop; the next tick retries.
        try:
            await self.action()
        except Exception:
            logger.exception(f"{self.name} tick failed")
