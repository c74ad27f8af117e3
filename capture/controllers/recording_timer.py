"""
Recording Timer

Countdown bounding a recording to a maximum length.

The timer is only a tick source. A periodic asyncio task calls the
owner's async tick handler once per TICK_INTERVAL; the owner calls
tick() and, on expiry, runs its own stop path. The timer never touches
session state itself.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from capture.models import Countdown
from config.settings import MAX_CLIP_SECONDS, TICK_INTERVAL


def _current_task() -> Optional[asyncio.Task]:
    try:
        return asyncio.current_task()
    except RuntimeError:
        # No running loop (synchronous teardown)
        return None


class RecordingTimer:
    """
    Countdown clock with an optional periodic driver.

    Usage:
        timer = RecordingTimer(on_tick=session.handle_tick)
        timer.start(15)
        # ... session.handle_tick() calls timer.tick() every second ...
        timer.stop()

    Without on_tick the timer is driven manually by calling tick().
    """

    def __init__(
        self,
        on_tick: Optional[Callable[[], Awaitable[None]]] = None,
        tick_interval: float = TICK_INTERVAL,
        limit_seconds: int = MAX_CLIP_SECONDS,
    ):
        """
        Initialize timer.

        Args:
            on_tick: Async handler awaited once per interval while running
            tick_interval: Seconds between ticks
            limit_seconds: Default countdown start value
        """
        self.logger = logging.getLogger(__name__)
        self.on_tick = on_tick
        self.tick_interval = tick_interval
        self.limit_seconds = limit_seconds

        self._remaining = 0
        self._running = False
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def countdown(self) -> Countdown:
        return Countdown(remaining_seconds=self._remaining, running=self._running)

    def remaining(self) -> int:
        return self._remaining

    def start(self, limit_seconds: Optional[int] = None) -> None:
        """
        Start counting down from `limit_seconds` (default: configured limit).

        Raises:
            ValueError: If the limit is not positive
        """
        limit = self.limit_seconds if limit_seconds is None else limit_seconds
        if limit <= 0:
            raise ValueError(f"Invalid countdown limit: {limit}")

        self.stop()
        self._remaining = int(limit)
        self._running = True

        if self.on_tick is not None:
            self._task = asyncio.get_running_loop().create_task(self._drive())
        self.logger.debug(f"Countdown started at {self._remaining}s")

    def tick(self) -> bool:
        """
        Advance the countdown by one second.

        Returns:
            True exactly once: on the tick that reaches zero while running
        """
        if not self._running:
            return False

        self._remaining = max(0, self._remaining - 1)
        if self._remaining == 0:
            self._running = False
            self.logger.info("Countdown expired")
            return True
        return False

    def stop(self) -> None:
        """Halt ticking. Idempotent."""
        self._running = False
        task, self._task = self._task, None
        # From inside the driver the task exits on its own once _running is False
        if task is not None and not task.done() and task is not _current_task():
            task.cancel()

    def reset(self) -> None:
        """Stop and clear the countdown"""
        self.stop()
        self._remaining = 0

    async def _drive(self) -> None:
        me = asyncio.current_task()
        while self._running and self._task is me:
            await asyncio.sleep(self.tick_interval)
            if not self._running or self._task is not me:
                break
            try:
                await self.on_tick()
            except Exception as e:
                self.logger.error(f"Error in tick handler: {e}", exc_info=True)
