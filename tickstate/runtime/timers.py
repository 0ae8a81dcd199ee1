"""
Elapsed-time timers for tick-driven state machines.

Timers measure how long something has been going on (time spent in a state,
how long a transition condition has held). They read a clock callable; the
host either uses the default monotonic wall clock or a ManualClock that it
advances once per tick, so that every timer in a machine observes the same
notion of time.
"""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable

from tickstate.core.types import Clock


@runtime_checkable
class TimerProtocol(Protocol):
    """
    Contract for timers consumed by states and transitions.

    Runtime Invariants:
    - elapsed increases monotonically between resets
    - reset() sets elapsed back to zero
    """

    @property
    def elapsed(self) -> float: ...

    def reset(self) -> None: ...


class ManualClock:
    """
    A clock that only moves when told to. Pass it (or its bound ``__call__``)
    as the clock of every Timer that should follow the host's tick loop.
    """

    def __init__(self, start: float = 0.0) -> None:
        """
        :param start: The initial time in seconds.
        """
        self._now = float(start)

    @property
    def now(self) -> float:
        """The current time in seconds."""
        return self._now

    def advance(self, dt: float) -> float:
        """
        Move the clock forward.

        :param dt: Seconds to advance by. Must be non-negative.
        :return: The new current time.
        :raises ValueError: If dt is negative.
        """
        if dt < 0:
            raise ValueError("Clock cannot move backwards")
        self._now += dt
        return self._now

    def __call__(self) -> float:
        return self._now


class Timer:
    """
    Measures the time passed since it was created or last reset.
    """

    def __init__(self, clock: Clock = time.monotonic) -> None:
        """
        :param clock: Callable returning the current time in seconds.
        """
        self._clock = clock
        self._start = clock()

    @property
    def clock(self) -> Clock:
        """The time source this timer reads."""
        return self._clock

    @property
    def elapsed(self) -> float:
        """Seconds since the last reset."""
        return self._clock() - self._start

    def reset(self) -> None:
        """Restart measuring from the current time."""
        self._start = self._clock()

    def __repr__(self) -> str:
        return f"Timer(elapsed={self.elapsed:.3f})"
