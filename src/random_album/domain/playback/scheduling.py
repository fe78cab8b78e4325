"""
Fire-once deferred calls driven by the event loop.

There is no timer thread: the loop that dispatches playback events also calls
run_due() on every iteration, so deferred callbacks run on the same thread as
the event handlers. Calls cannot be cancelled; callers guard against
duplicates themselves.
"""

import time
from typing import Callable, List, Tuple

from loguru import logger

Clock = Callable[[], float]


class DeferredCallScheduler:
    """Runs callbacks once their delay has elapsed.

    Args:
        clock: Monotonic time source in seconds (injectable for tests)
    """

    def __init__(self, clock: Clock = time.monotonic):
        self._clock = clock
        self._pending: List[Tuple[float, int, Callable[[], None]]] = []
        self._sequence = 0

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> None:
        """Schedule callback to run once, delay_seconds from now."""
        due = self._clock() + max(0.0, delay_seconds)
        self._sequence += 1
        self._pending.append((due, self._sequence, callback))
        self._pending.sort(key=lambda item: (item[0], item[1]))

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def seconds_until_next(self) -> float | None:
        """Time until the earliest pending call, or None when idle."""
        if not self._pending:
            return None
        return max(0.0, self._pending[0][0] - self._clock())

    def run_due(self) -> int:
        """Run every callback whose time has come, oldest first.

        Callbacks scheduled while running are not run in the same pass.

        Returns:
            Number of callbacks run
        """
        now = self._clock()
        due = [item for item in self._pending if item[0] <= now]
        if not due:
            return 0
        self._pending = [item for item in self._pending if item[0] > now]

        for _, sequence, callback in due:
            logger.trace(f"Running deferred call #{sequence}")
            callback()
        return len(due)
