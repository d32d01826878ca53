"""Gravity tick scheduling.

The game owns one scheduler and tells it when to run and at what interval.
The scheduler only calls back; it never touches game state itself.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

TickCallback = Callable[[], None]


class DropScheduler(ABC):
    """Abstract base class for drop schedulers."""

    def __init__(self):
        self.interval_ms: Optional[int] = None
        self._on_tick: Optional[TickCallback] = None

    def bind(self, on_tick: TickCallback) -> None:
        """Set the callback fired on every tick."""
        self._on_tick = on_tick

    @abstractmethod
    def start(self, interval_ms: int) -> None:
        """Start ticking every interval_ms, replacing any running schedule."""

    @abstractmethod
    def stop(self) -> None:
        """Stop ticking. No tick fires after this returns."""

    @property
    @abstractmethod
    def running(self) -> bool:
        """Whether ticks are currently scheduled."""


class AsyncioDropScheduler(DropScheduler):
    """Scheduler backed by a single asyncio task.

    start() must be called from inside a running event loop. Ticks run on
    that loop, so they are serialized with every other coroutine touching
    the game.
    """

    def __init__(self):
        super().__init__()
        self._task: Optional[asyncio.Task] = None

    def start(self, interval_ms: int) -> None:
        self.stop()
        self.interval_ms = interval_ms
        self._task = asyncio.get_running_loop().create_task(self._run(interval_ms))
        logger.debug(f"[Scheduler] Started: interval={interval_ms}ms")

    def stop(self) -> None:
        if self._task is None:
            return
        if not self._task.done():
            self._task.cancel()
            logger.debug("[Scheduler] Stopped")
        self._task = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run(self, interval_ms: int) -> None:
        try:
            while True:
                await asyncio.sleep(interval_ms / 1000)
                if self._on_tick is not None:
                    self._on_tick()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # A failing tick ends the schedule rather than looping on the error
            logger.error(f"[Scheduler] Tick failed: {e}", exc_info=True)


class ManualDropScheduler(DropScheduler):
    """Scheduler driven by explicit fire() calls.

    Used for headless play and tests, where time is advanced by the caller.
    """

    def __init__(self):
        super().__init__()
        self._running = False
        self.started_intervals: List[int] = []

    def start(self, interval_ms: int) -> None:
        self.interval_ms = interval_ms
        self._running = True
        self.started_intervals.append(interval_ms)

    def stop(self) -> None:
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def fire(self) -> bool:
        """Deliver one tick if the schedule is running.

        Returns:
            True if a tick was delivered
        """
        if not self._running or self._on_tick is None:
            return False
        self._on_tick()
        return True
