"""
Parallel (concurrent) composite state.

Architecture:
- Runs every child state on every tick, in attachment order
- Presents one exit decision to its own owner, negotiated among the children
- Acts as the owner of its children, so children talk to it exactly as they
  would talk to a state machine

Design Patterns:
- Composite Pattern: children are any StateBase, including other
  ParallelStates and nested StateMachines
- Mediator Pattern: relays exit readiness from children to the owner
- Strategy Pattern: optional can_exit predicate replaces the default
  "any child ready" policy

Responsibilities:
1. Lifecycle fan-out
   - on_enter / on_logic / on_exit forwarded to all children in order
   - No short-circuit; every child ticks every frame
2. Exit negotiation
   - Without can_exit: the first child that reports readiness wins
   - With can_exit: children's readiness is ignored, the predicate decides
   - Readiness reported while inactive is dropped
3. Event fan-out
   - Events broadcast to every child that is Actionable
4. Diagnostics
   - Active hierarchy path such as "Parallel/(Move & Attack)"

Cross-cutting:
- Single-threaded; all forwarding happens synchronously within a tick
- Dead-end configurations (no child ever ready) are silent, not errors
"""

import logging
from typing import Any, Callable, Hashable, List, Optional

from tickstate.core.base import Actionable, StateBase, StateMachineOwner, owner_clock
from tickstate.core.types import Clock

logger = logging.getLogger(__name__)


class ParallelState(StateBase):
    """A state that runs several child states at the same time.

    If needs_exit_time is set, the state may exit as soon as *any one* of its
    children calls ``state_can_exit()`` on it. Children that do not need exit
    time never make that call, so a parallel state whose children all leave
    instantly never asks to exit on its own. A ``can_exit`` predicate
    overrides this: children's readiness is then ignored and the predicate
    alone decides, the same way can_exit works for a plain State.

    Class Invariants:
    1. Children are entered, ticked and exited in attachment order
    2. is_active is True strictly between on_enter() and on_exit()
    3. Readiness from children is only forwarded while active and only
       without a can_exit predicate
    4. The parallel state owns its children exclusively
    """

    def __init__(
        self,
        *children: StateBase,
        can_exit: Optional[Callable[["ParallelState"], bool]] = None,
        needs_exit_time: bool = False,
        is_ghost_state: bool = False,
        name: Optional[Hashable] = None,
    ) -> None:
        """Initialize a ParallelState instance.

        Children may be given positionally, in which case they are named by
        their index ("0", "1", ...) and left out of the active hierarchy
        path. Otherwise attach them with ``add_state``.

        Args:
            *children: Child states to run in parallel
            can_exit: Optional predicate deciding when this state may exit
            needs_exit_time: Whether this state must grant permission to leave
            is_ghost_state: Whether the owner passes through without lingering
            name: Identifier; usually assigned by the owner
        """
        super().__init__(needs_exit_time=needs_exit_time, is_ghost_state=is_ghost_state, name=name)
        self.can_exit = can_exit
        self._children: List[StateBase] = []
        # Positional children have no meaningful names, so they cannot be
        # shown in the active hierarchy path
        self._are_children_nameless = False
        # Guards against readiness arriving from children after this state
        # was exited, which would otherwise trigger a second transition
        self._is_active = False

        if children:
            self._are_children_nameless = True
            for index, child in enumerate(children):
                self.add_state(str(index), child)

    @property
    def children(self) -> List[StateBase]:
        """Get a copy of the child list, in attachment order."""
        return list(self._children)

    @property
    def are_children_nameless(self) -> bool:
        """Whether the children were passed positionally."""
        return self._are_children_nameless

    @property
    def is_active(self) -> bool:
        """Check if the state is active."""
        return self._is_active

    @property
    def has_pending_transition(self) -> bool:
        """Whether the owner of this state is waiting for it to exit."""
        return self.fsm is not None and self.fsm.has_pending_transition

    @property
    def clock(self) -> Optional[Clock]:
        """Get the clock shared by the owner, if any."""
        return owner_clock(self)

    @property
    def parent_fsm(self) -> Optional[StateMachineOwner]:
        """Get the owner of this state."""
        return self.fsm

    def add_state(self, name: Hashable, state: StateBase) -> "ParallelState":
        """Attach a child state.

        The child is named, linked back to this state and initialized right
        away.

        Args:
            name: Identifier of the child
            state: The child state

        Returns:
            This state, for chaining
        """
        state.fsm = self
        state.name = name
        state.init()

        self._children.append(state)
        return self

    def init(self) -> None:
        # Children were initialized when attached; only refresh the links
        for child in self._children:
            child.fsm = self

    def on_enter(self) -> None:
        self._is_active = True

        for child in self._children:
            child.on_enter()

    def on_logic(self) -> None:
        for child in self._children:
            child.on_logic()

        if self.needs_exit_time and self.can_exit is not None and self.has_pending_transition and self.can_exit(self):
            logger.debug("%r may exit (can_exit after logic)", self)
            self.fsm.state_can_exit()

    def on_exit(self) -> None:
        self._is_active = False

        for child in self._children:
            child.on_exit()

    def on_exit_request(self) -> None:
        if self.can_exit is None:
            # Any child that is ready answers through state_can_exit()
            for child in self._children:
                child.on_exit_request()
            return

        if self.has_pending_transition and self.can_exit(self):
            logger.debug("%r may exit (can_exit on request)", self)
            self.fsm.state_can_exit()

    def state_can_exit(self) -> None:
        """Called by a child that is ready to exit.

        The first ready child lets this state exit, unless a can_exit
        predicate overrides the children.
        """
        if not self._is_active:
            logger.debug("%r ignored exit readiness while inactive", self)
            return

        # Nobody to tell at the top level
        if self.can_exit is None and self.fsm is not None:
            logger.debug("%r may exit (child ready)", self)
            self.fsm.state_can_exit()

    def on_action(self, trigger: Hashable, *args: Any) -> None:
        """Forward an event to every child that handles events."""
        for child in self._children:
            if isinstance(child, Actionable):
                child.on_action(trigger, *args)

    def get_active_hierarchy_path(self) -> str:
        # The name is None when used at the top level
        own_name = str(self.name) if self.name is not None else ""

        if self._are_children_nameless or not self._children:
            # "Parallel"
            return own_name

        if len(self._children) == 1:
            # "Parallel/Move"
            return own_name + "/" + self._children[0].get_active_hierarchy_path()

        # "Parallel/(Move & Attack/Shoot)"
        paths = " & ".join(child.get_active_hierarchy_path() for child in self._children)
        return f"{own_name}/({paths})"
