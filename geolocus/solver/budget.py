"""Cancellation signals polled by the solver."""

from __future__ import annotations

import time
from typing import Callable, Optional, Protocol


class Cancellation(Protocol):
    def is_cancelled(self) -> bool: ...


class CancellationToken:
    """Manually triggered cancellation flag."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def is_cancelled(self) -> bool:
        return self._cancelled


class Budget:
    """Cancellation that fires after ``max_steps`` polls or ``timeout`` seconds.

    Every call to :meth:`is_cancelled` counts as one step, so a budget shared
    across plans bounds the total work of a driver run. The clock starts on
    the first poll.
    """

    def __init__(
        self,
        max_steps: Optional[int] = None,
        timeout: Optional[float] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_steps is not None and max_steps < 0:
            raise ValueError("max_steps must be non-negative")
        if timeout is not None and timeout < 0:
            raise ValueError("timeout must be non-negative")
        self.max_steps = max_steps
        self.timeout = timeout
        self._clock = clock
        self._started: Optional[float] = None
        self.steps = 0
        self.reason: Optional[str] = None

    def is_cancelled(self) -> bool:
        if self.reason is not None:
            return True
        now = self._clock()
        if self._started is None:
            self._started = now
        self.steps += 1
        if self.max_steps is not None and self.steps > self.max_steps:
            self.reason = "steps"
        elif self.timeout is not None and now - self._started > self.timeout:
            self.reason = "timeout"
        return self.reason is not None


class AnyOf:
    """Cancelled as soon as any wrapped signal is."""

    def __init__(self, *signals: Optional[Cancellation]) -> None:
        self.signals = [signal for signal in signals if signal is not None]

    def is_cancelled(self) -> bool:
        return any(signal.is_cancelled() for signal in self.signals)


__all__ = ["AnyOf", "Budget", "Cancellation", "CancellationToken"]
