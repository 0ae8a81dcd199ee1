"""
State machine that owns, ticks and switches a set of named states.

Architecture:
- Owns named states and the transitions between them
- Ticks the active state once per on_logic() call
- Scans transitions every tick and switches state when one fires
- Negotiates with states that need exit time through a pending transition
- Is itself a StateBase, so machines nest inside machines and parallel states

Design Patterns:
- Composite Pattern: nested machines through the StateBase interface
- Mediator Pattern: the machine is the only place where states change
- Observer Pattern: transitions are notified around each switch

Responsibilities:
1. State management
   - Named states with a start state
   - Ghost states passed through on entry
2. Transition evaluation
   - Transitions from any state are checked before direct transitions
   - The first transition that fires wins the tick
3. Exit negotiation
   - Immediate switch unless the active state needs exit time
   - Pending transition completed when the state calls state_can_exit()
4. Event forwarding
   - Events forwarded to the active state when it handles events

Cross-cutting:
- Single-threaded; a switch completes before state_can_exit() returns
- Configuration errors raise HFSMError subclasses
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Hashable, List, Optional

from tickstate.core.base import Actionable, StateBase, owner_clock
from tickstate.core.errors import (
    ConfigurationError,
    DuplicateStateError,
    StateMachineNotInitializedError,
    StateNotFoundError,
)
from tickstate.core.transition import TransitionBase
from tickstate.core.types import Clock

logger = logging.getLogger(__name__)


@dataclass
class PendingTransition:
    """A switch waiting for the active state's permission to leave."""

    state: Hashable
    listener: Optional[TransitionBase] = None


class StateMachine(StateBase):
    """A hierarchical state machine.

    Used at the top level, the host calls ``init()`` once and ``on_logic()``
    every tick. Nested inside another machine or a ParallelState, the owner
    drives it like any other state.

    Class Invariants:
    1. At most one state is active at a time
    2. A pending transition exists only while the active state needs exit
       time and has not yet granted it
    3. Transitions of the active state are re-entered on every switch
    """

    def __init__(
        self,
        needs_exit_time: bool = False,
        is_ghost_state: bool = False,
        name: Optional[Hashable] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        """Initialize a StateMachine instance.

        Args:
            needs_exit_time: Whether this machine, nested in another owner,
                must grant permission to leave
            is_ghost_state: Whether the owner passes through without lingering
            name: Identifier; usually assigned by the owner
            clock: Time source shared with the timed transitions and
                states that were not given their own; inherited from the
                owner when omitted
        """
        super().__init__(needs_exit_time=needs_exit_time, is_ghost_state=is_ghost_state, name=name)
        self._states: Dict[Hashable, StateBase] = {}
        self._transitions_from: Dict[Hashable, List[TransitionBase]] = {}
        self._transitions_from_any: List[TransitionBase] = []
        self._start_state: Optional[Hashable] = None
        self._clock = clock

        self._active_state: Optional[StateBase] = None
        self._active_transitions: List[TransitionBase] = []
        self._pending: Optional[PendingTransition] = None
        # Set while our own owner waits for this machine to exit
        self._exit_requested = False

    @property
    def active_state(self) -> Optional[StateBase]:
        """Get the current active state."""
        return self._active_state

    @property
    def active_state_name(self) -> Optional[Hashable]:
        """Get the name of the current active state."""
        return self._active_state.name if self._active_state is not None else None

    @property
    def start_state(self) -> Optional[Hashable]:
        """Get the name of the start state."""
        return self._start_state

    @property
    def has_pending_transition(self) -> bool:
        """Whether a switch waits for the active state to allow leaving."""
        return self._pending is not None or self._exit_requested

    @property
    def clock(self) -> Optional[Clock]:
        """Get the clock shared with the states and transitions of this machine."""
        if self._clock is not None:
            return self._clock
        return owner_clock(self)

    @property
    def is_root(self) -> bool:
        """Whether this machine has no owner."""
        return self.fsm is None

    def get_state(self, name: Hashable) -> StateBase:
        """Look up a state by name.

        Raises:
            StateNotFoundError: If no state has that name
        """
        try:
            return self._states[name]
        except KeyError:
            raise StateNotFoundError(name, self.name) from None

    def add_state(self, name: Hashable, state: StateBase) -> "StateMachine":
        """Add a state. The first state added becomes the start state.

        Args:
            name: Identifier of the state within this machine
            state: The state

        Returns:
            This machine, for chaining

        Raises:
            DuplicateStateError: If the name is already taken
        """
        if name in self._states:
            raise DuplicateStateError(f"State '{name}' already exists in state machine '{self.name}'")

        state.fsm = self
        state.name = name
        state.init()

        self._states[name] = state
        if self._start_state is None:
            self._start_state = name
        return self

    def set_start_state(self, name: Hashable) -> "StateMachine":
        """Choose the state entered by on_enter(). Checked when entering."""
        self._start_state = name
        return self

    def add_transition(self, transition: TransitionBase) -> "StateMachine":
        """Add a transition checked while its from_state is active."""
        transition.fsm = self
        transition.init()
        self._transitions_from.setdefault(transition.from_state, []).append(transition)
        return self

    def add_transition_from_any(self, transition: TransitionBase) -> "StateMachine":
        """Add a transition checked from every state."""
        transition.fsm = self
        transition.init()
        self._transitions_from_any.append(transition)
        return self

    def init(self) -> None:
        for state in self._states.values():
            state.fsm = self

        if self.is_root:
            self.on_enter()

    def on_enter(self) -> None:
        if self._start_state is None:
            raise ConfigurationError(f"State machine '{self.name}' has no states to enter")

        self._exit_requested = False
        self._change_state(self._start_state)

    def on_logic(self) -> None:
        if self._active_state is None:
            raise StateMachineNotInitializedError(
                f"State machine '{self.name}' is not active; call init() (or on_enter()) before on_logic()"
            )

        if not self._try_all_global_transitions():
            self._try_all_direct_transitions()

        # A transition may have exited this machine from inside a child's hook
        if self._active_state is not None:
            self._active_state.on_logic()

    def on_exit(self) -> None:
        if self._active_state is not None:
            self._active_state.on_exit()
            self._active_state = None

        self._active_transitions = []
        self._pending = None
        self._exit_requested = False

    def on_exit_request(self) -> None:
        if self._active_state is not None and self._active_state.needs_exit_time:
            self._exit_requested = True
            self._active_state.on_exit_request()
        else:
            self.fsm.state_can_exit()

    def request_state_change(
        self, name: Hashable, force_instantly: bool = False, listener: Optional[TransitionBase] = None
    ) -> None:
        """Switch to another state, waiting for exit time if needed.

        Args:
            name: The state to switch to
            force_instantly: Switch now even if the active state needs exit time
            listener: Transition notified before and after the switch

        Raises:
            StateNotFoundError: If no state has that name
        """
        self.get_state(name)

        if self._active_state is None or not self._active_state.needs_exit_time or force_instantly:
            self._pending = None
            self._change_state(name, listener)
            return

        logger.debug("%r waits for %r to exit before switching to %r", self, self._active_state, name)
        self._pending = PendingTransition(name, listener)
        self._active_state.on_exit_request()

    def state_can_exit(self) -> None:
        """Called by the active state once it is ready to leave."""
        if self._pending is not None:
            pending = self._pending
            self._pending = None
            self._change_state(pending.state, pending.listener)
        elif self._exit_requested and self.fsm is not None:
            self._exit_requested = False
            self.fsm.state_can_exit()

    def on_action(self, trigger: Hashable, *args: Any) -> None:
        """Forward an event to the active state if it handles events."""
        if isinstance(self._active_state, Actionable):
            self._active_state.on_action(trigger, *args)

    def get_active_hierarchy_path(self) -> str:
        own_name = str(self.name) if self.name is not None else ""

        if self._active_state is None:
            return own_name

        return own_name + "/" + self._active_state.get_active_hierarchy_path()

    def _change_state(self, name: Hashable, listener: Optional[TransitionBase] = None) -> None:
        state = self.get_state(name)

        if listener is not None:
            listener.before_transition()

        if self._active_state is not None:
            self._active_state.on_exit()

        logger.debug("%r switching %r -> %r", self, self.active_state_name, name)
        self._active_state = state
        self._active_transitions = self._transitions_from.get(name, [])

        for transition in self._transitions_from_any:
            transition.on_enter()
        for transition in self._active_transitions:
            transition.on_enter()

        state.on_enter()

        if listener is not None:
            listener.after_transition()

        if state.is_ghost_state:
            self._try_all_direct_transitions()

    def _try_transition(self, transition: TransitionBase) -> bool:
        if not transition.should_transition():
            return False

        self.request_state_change(transition.to_state, transition.force_instantly, transition)
        return True

    def _try_all_global_transitions(self) -> bool:
        for transition in self._transitions_from_any:
            # Transitions from any state never re-enter the active state
            if transition.to_state == self.active_state_name:
                continue
            if self._try_transition(transition):
                return True
        return False

    def _try_all_direct_transitions(self) -> bool:
        for transition in self._active_transitions:
            if self._try_transition(transition):
                return True
        return False
