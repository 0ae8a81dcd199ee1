"""
Base state node and the capability contracts between nodes and owners.

Architecture:
- StateBase is the node every state derives from (leaf states, parallel
  states and nested state machines alike)
- StateMachineOwner is what a node sees above it: whoever ticks it and
  decides when it may leave
- Actionable is an optional capability for nodes that handle events

Design Patterns:
- Composite Pattern: nodes nest through the same StateBase interface
- Template Method: lifecycle hooks overridden by subclasses

Ownership:
- Parents own children; children only hold a weak reference to their owner,
  reassigned when attached and on init()
"""

from typing import Any, Hashable, Optional, Protocol, runtime_checkable
from weakref import ReferenceType, ref

from tickstate.core.types import Clock


@runtime_checkable
class StateMachineOwner(Protocol):
    """
    Protocol for the object that owns and ticks a state.

    Runtime Invariants:
    - has_pending_transition is only True while a switch waits for the
      active state's permission to leave
    - state_can_exit() is synchronous; any switch happens before it returns
    """

    @property
    def has_pending_transition(self) -> bool: ...

    def state_can_exit(self) -> None: ...


@runtime_checkable
class Actionable(Protocol):
    """
    Protocol for nodes that react to events (actions).

    Nodes that do not implement it are skipped when events are forwarded.
    """

    def on_action(self, trigger: Hashable, *args: Any) -> None: ...


class StateBase:
    """
    Base class of every state node.

    All lifecycle hooks are no-ops here. Subclasses override the ones they
    need; the owning machine calls them in the order init (once, on attach),
    then on_enter, on_logic (every tick), on_exit for each activation.
    """

    def __init__(self, needs_exit_time: bool = False, is_ghost_state: bool = False, name: Optional[Hashable] = None) -> None:
        """Initialize a state node.

        Args:
            needs_exit_time: Whether the node must be granted permission to
                leave instead of leaving as soon as a transition fires
            is_ghost_state: Whether the owner should pass through the node
                without lingering in it
            name: Identifier within the owning collection; assigned by the
                owner on attach when not given here
        """
        self.needs_exit_time = needs_exit_time
        self.is_ghost_state = is_ghost_state
        self.name = name
        self._fsm: Optional[ReferenceType] = None

    @property
    def fsm(self) -> Optional[StateMachineOwner]:
        """Get the owner of this node, or None if detached."""
        return self._fsm() if self._fsm is not None else None

    @fsm.setter
    def fsm(self, owner: Optional[StateMachineOwner]) -> None:
        self._fsm = ref(owner) if owner is not None else None

    def init(self) -> None:
        """Called once the node is attached to its owner."""

    def on_enter(self) -> None:
        """Called when the node becomes active."""

    def on_logic(self) -> None:
        """Called once per tick while the node is active."""

    def on_exit(self) -> None:
        """Called when the node stops being active."""

    def on_exit_request(self) -> None:
        """Called when the owner wants to leave this node and it needs exit time.

        A node that is ready answers by calling ``self.fsm.state_can_exit()``.
        """

    def get_active_hierarchy_path(self) -> str:
        """Return a slash-delimited path of the active nodes below and including this one."""
        return str(self.name) if self.name is not None else ""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


def owner_clock(node: Any) -> Optional[Clock]:
    """Return the clock shared by the owner of ``node``, or None if it has none."""
    return getattr(node.fsm, "clock", None)
