"""Timer-driven task scheduling with cooperative cancellation."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)


class CancellationToken:
    """One-way cancel flag that also interrupts pending waits."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to ``timeout`` seconds; returns True if cancelled meanwhile."""
        return self._event.wait(timeout)


class PeriodicTask:
    """Invokes ``callback(tick)`` on a fixed interval until stopped.

    Runs synchronously on the calling thread, so two ticks never overlap.
    Cancellation is only observed between ticks: a tick that has started
    always runs to completion.
    """

    def __init__(
        self,
        interval_s: float,
        callback: Callable[[int], None],
        token: CancellationToken | None = None,
        max_ticks: int | None = None,
        immediate: bool = True,
    ) -> None:
        if interval_s < 0:
            raise ValueError(f"interval_s must be non-negative, got {interval_s}")
        if max_ticks is not None and max_ticks < 1:
            raise ValueError(f"max_ticks must be at least 1, got {max_ticks}")
        self.interval_s = interval_s
        self.callback = callback
        self.token = token or CancellationToken()
        self.max_ticks = max_ticks
        self.immediate = immediate
        self.ticks = 0

    def run(self) -> int:
        """Run until ``max_ticks`` or cancellation; returns the tick count."""
        if not self.immediate and self.token.wait(self.interval_s):
            return self.ticks

        while not self.token.cancelled:
            self.callback(self.ticks)
            self.ticks += 1

            if self.max_ticks is not None and self.ticks >= self.max_ticks:
                break
            if self.token.wait(self.interval_s):
                logger.info("Periodic task cancelled after %d tick(s)", self.ticks)
                break

        return self.ticks


def single_shot(callback: Callable[[int], None], token: CancellationToken | None = None) -> int:
    """Run ``callback`` once, unless already cancelled."""
    return PeriodicTask(0.0, callback, token=token, max_ticks=1).run()
