"""
Core package providing the state nodes, transitions and owning machine.

Architecture:
- base.py: StateBase and the owner / event capability protocols
- state.py: callback-driven leaf State
- parallel.py: ParallelState running children concurrently
- transition.py: Transition and the debounced TransitionAfterContinuous
- machine.py: StateMachine owning and switching named states

Design Patterns:
- Composite Pattern for state hierarchy
- Mediator Pattern for exit negotiation
- Strategy Pattern for transition conditions
"""

# Import order matters to avoid circular dependencies
from .base import Actionable, StateBase, StateMachineOwner
from .errors import (
    ConfigurationError,
    DuplicateStateError,
    HFSMError,
    StateMachineNotInitializedError,
    StateNotFoundError,
)
from .transition import Transition, TransitionAfterContinuous, TransitionBase
from .state import State
from .parallel import ParallelState
from .machine import StateMachine

__all__ = [
    # Nodes and contracts
    "Actionable",
    "StateBase",
    "StateMachineOwner",
    "State",
    "ParallelState",
    "StateMachine",
    # Transitions
    "TransitionBase",
    "Transition",
    "TransitionAfterContinuous",
    # Errors
    "HFSMError",
    "StateNotFoundError",
    "DuplicateStateError",
    "StateMachineNotInitializedError",
    "ConfigurationError",
]
