"""
Leaf state driven by user callbacks.

A State runs plain callables on enter, every tick and on exit, tracks how
long it has been active and reacts to events through registered actions.
When it needs exit time it decides for itself when it may leave, either
through a can_exit predicate or by calling ``self.fsm.state_can_exit()``
from its own logic.
"""

from typing import Any, Callable, Dict, Hashable, Optional

from tickstate.core.base import StateBase, owner_clock
from tickstate.core.types import ActionCallback, Clock
from tickstate.runtime.timers import Timer


class State(StateBase):
    """
    A leaf state whose behaviour is given by optional callbacks. Every
    callback receives the state itself.
    """

    def __init__(
        self,
        on_enter: Optional[Callable[["State"], None]] = None,
        on_logic: Optional[Callable[["State"], None]] = None,
        on_exit: Optional[Callable[["State"], None]] = None,
        can_exit: Optional[Callable[["State"], bool]] = None,
        needs_exit_time: bool = False,
        is_ghost_state: bool = False,
        name: Optional[Hashable] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        """
        :param on_enter: Called when the state becomes active.
        :param on_logic: Called every tick while the state is active.
        :param on_exit: Called when the state stops being active.
        :param can_exit: Predicate deciding whether the state may leave once a
            transition is pending. Only consulted when needs_exit_time is set.
        :param needs_exit_time: Whether the state must grant permission to leave.
        :param is_ghost_state: Whether the owner passes through without lingering.
        :param name: Identifier; usually assigned by the owner.
        :param clock: Time source of the state's timer. When omitted, the
            clock of the owning StateMachine is used, or the wall clock if it
            has none.
        """
        super().__init__(needs_exit_time=needs_exit_time, is_ghost_state=is_ghost_state, name=name)
        self._on_enter = on_enter
        self._on_logic = on_logic
        self._on_exit = on_exit
        self.can_exit = can_exit
        self.timer = Timer(clock) if clock is not None else Timer()
        self._follows_owner_clock = clock is None
        self._actions: Dict[Hashable, ActionCallback] = {}

    def on_enter(self) -> None:
        if self._follows_owner_clock:
            clock = owner_clock(self)
            if clock is not None and clock is not self.timer.clock:
                self.timer = Timer(clock)
        self.timer.reset()
        if self._on_enter is not None:
            self._on_enter(self)

    def on_logic(self) -> None:
        if self._on_logic is not None:
            self._on_logic(self)

        if self.needs_exit_time and self.can_exit is not None and self.fsm.has_pending_transition and self.can_exit(self):
            self.fsm.state_can_exit()

    def on_exit(self) -> None:
        if self._on_exit is not None:
            self._on_exit(self)

    def on_exit_request(self) -> None:
        if self.can_exit is not None and self.can_exit(self):
            self.fsm.state_can_exit()

    def add_action(self, trigger: Hashable, action: ActionCallback) -> "State":
        """
        Register an action run when the event ``trigger`` reaches this state.
        A later registration for the same trigger replaces the earlier one.

        :param trigger: Event identifier.
        :param action: Callable receiving the event's arguments, if any.
        :return: This state, for chaining.
        """
        self._actions[trigger] = action
        return self

    def on_action(self, trigger: Hashable, *args: Any) -> None:
        action = self._actions.get(trigger)
        if action is not None:
            action(*args)
