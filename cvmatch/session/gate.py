"""
Gate timer.

A fixed-length countdown shown between text extraction and analysis.
The countdown runs as a single asyncio task that is captured on
activation and cancelled on deactivation, so no tick can land after
its phase has ended.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_DURATION = 15


class GateTimer:
    """Countdown that signals completion exactly once per activation.

    Args:
        duration: Number of ticks to count down from.
        interval: Seconds between ticks.
        on_tick: Called with the remaining count after every tick.
        on_complete: Called once when the count reaches zero.
        sleep: Coroutine used to wait between ticks (tests inject a
            fake one).
    """

    def __init__(
        self,
        duration: int = DEFAULT_DURATION,
        interval: float = 1.0,
        on_tick: Optional[Callable[[int], None]] = None,
        on_complete: Optional[Callable[[], None]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if duration <= 0:
            raise ValueError("duration must be positive")
        self.duration = duration
        self.interval = interval
        self.on_tick = on_tick
        self.on_complete = on_complete
        self._sleep = sleep
        self.remaining = duration
        self._task: Optional[asyncio.Task] = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def activate(self) -> asyncio.Task:
        """Start (or restart) the countdown from the full duration.

        Must be called from a running event loop.
        """
        self.deactivate()
        self.remaining = self.duration
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.debug("Gate timer activated for %d ticks", self.duration)
        return self._task

    def deactivate(self) -> None:
        """Stop the countdown; no further callbacks fire."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            logger.debug("Gate timer cancelled with %d ticks left", self.remaining)

    async def _run(self) -> None:
        while self.remaining > 0:
            await self._sleep(self.interval)
            self.remaining -= 1
            if self.on_tick is not None:
                self.on_tick(self.remaining)
        logger.debug("Gate timer completed")
        self._task = None
        if self.on_complete is not None:
            self.on_complete()
