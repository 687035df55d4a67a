"""Rest timer shown between sets.

The timer stores a deadline, never a tick count: every observation recomputes
``remaining = max(0, deadline - now)``. A suspended process (locked screen,
backgrounded app) therefore resumes with the right value on its next
observation.
"""
import asyncio
import logging
import time
from typing import Callable

from src.config.settings import settings

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
CompletionCallback = Callable[[], None]
TickCallback = Callable[[float], None]


class RestTimer:
    """Deadline-based countdown with extend / skip / cancel.

    ``on_complete`` fires exactly once per ``start()``: when an observation
    finds the deadline passed, or on ``skip()``. ``cancel()`` stops the timer
    without firing.
    """

    def __init__(
        self,
        on_complete: CompletionCallback | None = None,
        clock: Clock = time.monotonic,
    ):
        self._on_complete = on_complete
        self._clock = clock
        self._deadline: float | None = None
        self._total: float = 0.0
        self._finished = False
        self._cancelled = False

    # State

    @property
    def is_running(self) -> bool:
        return self._deadline is not None and not self._finished and not self._cancelled

    @property
    def is_finished(self) -> bool:
        return self._finished

    @property
    def total_duration(self) -> float:
        return self._total

    def remaining(self) -> float:
        """Seconds left; 0 once finished, cancelled, or never started."""
        if self._deadline is None or self._finished or self._cancelled:
            return 0.0
        return max(0.0, self._deadline - self._clock())

    def progress(self) -> float:
        """Fraction of the (possibly extended) duration still remaining, 0..1."""
        if self._total <= 0:
            return 0.0
        return min(1.0, self.remaining() / self._total)

    # Transitions

    def start(self, duration: float) -> None:
        """Arm the timer for ``duration`` seconds from now. Restarts a previous run."""
        if duration < 0:
            raise ValueError("duration must be >= 0")
        self._deadline = self._clock() + duration
        self._total = float(duration)
        self._finished = False
        self._cancelled = False
        logger.debug("Rest timer started for %.1fs", duration)

    def extend(self, seconds: float | None = None) -> None:
        """Push the deadline back. Elapsed time is kept."""
        if not self.is_running:
            return
        seconds = seconds if seconds is not None else settings.REST_TIMER_EXTEND_SECONDS
        self._deadline += seconds
        self._total += seconds

    def skip(self) -> None:
        """Finish now. Fires completion if it has not fired yet."""
        if self._deadline is None or self._cancelled:
            return
        self._fire()

    def cancel(self) -> None:
        """Stop without firing. Safe to call any number of times."""
        self._cancelled = True

    def observe(self) -> float:
        """One observation: returns remaining seconds and fires on reaching zero."""
        remaining = self.remaining()
        if self.is_running and remaining <= 0:
            self._fire()
        return remaining

    def _fire(self) -> None:
        if self._finished:
            return
        self._finished = True
        if self._on_complete is not None:
            self._on_complete()

    # Observation loop

    async def run(
        self,
        on_tick: TickCallback | None = None,
        interval: float | None = None,
    ) -> None:
        """Cooperative observation loop; returns after completion or cancellation."""
        interval = interval if interval is not None else settings.REST_TIMER_TICK_SECONDS
        while self.is_running:
            remaining = self.observe()
            if not self.is_running:
                break
            if on_tick is not None:
                on_tick(remaining)
            await asyncio.sleep(min(interval, remaining) if remaining > 0 else 0)
