"""
Error hierarchy for the state machine.

Only configuration mistakes are reported through exceptions. Exit
negotiation, event dispatch and debounced transitions never raise on their
own; exceptions raised by user callbacks propagate unchanged.
"""

from typing import Hashable, Optional


class HFSMError(Exception):
    """
    Base exception class for errors within the hierarchical state machine library.
    """


class StateNotFoundError(HFSMError, KeyError):
    """
    Raised when a requested state does not exist in the owning machine.
    """

    def __init__(self, name: Hashable, machine_name: Optional[Hashable] = None) -> None:
        self.name = name
        self.machine_name = machine_name
        where = f" in state machine '{machine_name}'" if machine_name is not None else ""
        super().__init__(f"State '{name}' not found{where}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class DuplicateStateError(HFSMError):
    """
    Raised when a state is added under a name that is already taken.
    """


class StateMachineNotInitializedError(HFSMError):
    """
    Raised when a state machine is ticked before it has been entered.
    """


class ConfigurationError(HFSMError):
    """
    Raised when a state machine is set up in a way that cannot run.
    """
