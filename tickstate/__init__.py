"""tickstate: tick-driven Hierarchical Finite State Machine (HFSM) primitives

This package provides composable state nodes and transitions for behaviour
that is evaluated once per simulation tick (AI, animation, gameplay logic).

Responsibilities:
    - Parallel (concurrent) composite states with negotiated exit
    - Debounced, time-gated transitions
    - A compact owning state machine that ticks states and switches them
    - Timers driven by a host-supplied clock

Interactions:
    - Client code through public API
    - Host application tick loop
    - Logging system for diagnostics

Cross-cutting Concerns:
    Thread Safety:
        - Single logical thread of control drives ticks
        - No locks; hooks run synchronously within a tick

    Error Handling:
        - Structured error hierarchy for configuration errors
        - Callback exceptions propagate unchanged

    Logging:
        - Standard library logging, one logger per module
        - Debug level only, no handlers installed
"""

from .core import (
    Actionable,
    ParallelState,
    State,
    StateBase,
    StateMachine,
    StateMachineOwner,
    Transition,
    TransitionAfterContinuous,
    TransitionBase,
)
from .runtime import ManualClock, Timer

__version__ = "0.1.0"

__all__ = [
    "Actionable",
    "ManualClock",
    "ParallelState",
    "State",
    "StateBase",
    "StateMachine",
    "StateMachineOwner",
    "Timer",
    "Transition",
    "TransitionAfterContinuous",
    "TransitionBase",
]
