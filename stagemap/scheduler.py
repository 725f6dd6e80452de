"""
Deferred callbacks that run after the current synchronous work is done.

Used for UI niceties such as releasing toolbar focus once an edit dialog
opened. Nothing depends on the exact timing. Inside a running asyncio loop
callbacks go through loop.call_soon; without one they queue up until the
host calls run_pending().
"""

import asyncio
import logging
from collections import deque
from typing import Callable, Deque

logger = logging.getLogger(__name__)


class DeferredScheduler:

    def __init__(self):
        self._pending: Deque[Callable[[], None]] = deque()

    def call_soon(self, callback: Callable[[], None]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._pending.append(callback)
            return
        loop.call_soon(callback)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def run_pending(self) -> int:
        """Run queued callbacks in FIFO order; returns how many ran."""
        ran = 0
        # Callbacks queued while draining wait for the next call
        for _ in range(len(self._pending)):
            callback = self._pending.popleft()
            callback()
            ran += 1
        if ran:
            logger.debug(f"Ran {ran} deferred callbacks")
        return ran
