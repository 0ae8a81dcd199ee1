"""
Runtime package for time keeping.

Architecture:
- Provides elapsed-time timers for states and transitions
- Lets the host drive time explicitly once per tick

Cross-cutting:
- Deterministic time for tests through ManualClock
"""

from .timers import ManualClock, Timer, TimerProtocol

__all__ = ["ManualClock", "Timer", "TimerProtocol"]
