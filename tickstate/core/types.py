"""
Type aliases shared across the state machine.

This module helps break circular dependencies between modules and provides
a central location for type information.

Design:
- No runtime dependencies on other modules
- Only contains type definitions
- Used by state.py and runtime/timers.py
"""

from typing import Callable

# Action run when an event reaches a state; receives the event's arguments
ActionCallback = Callable[..., None]

# Time source returning seconds as a float
Clock = Callable[[], float]
