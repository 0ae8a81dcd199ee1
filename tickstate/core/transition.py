"""
Transition types evaluated by the owning state machine.

Architecture:
- TransitionBase defines what the machine asks of a transition: whether it
  should fire now, and hooks around the actual switch
- Transition fires when its condition holds
- TransitionAfterContinuous fires only after its condition has held without
  interruption for a minimum duration (debounce)

Design Patterns:
- Strategy Pattern: should_transition() per transition type
- Template Method: before/after hooks around the switch

Responsibilities:
1. Guard evaluation
   - Optional conditions receiving the transition itself
   - Pure delays when no condition is given
2. Switch hooks
   - Optional callbacks before and after the machine switches state

Cross-cutting:
- Callbacks are optional values checked for None before being called
- Exceptions raised by callbacks propagate to the caller
"""

import logging
from typing import Any, Callable, Hashable, Optional
from weakref import ReferenceType, ref

from tickstate.core.base import owner_clock
from tickstate.runtime.timers import Timer, TimerProtocol

logger = logging.getLogger(__name__)


class TransitionBase:
    """Base class of transitions between two states of one machine.

    The owning machine calls ``init()`` when the transition is added,
    ``on_enter()`` each time ``from_state`` becomes active, ``should_transition()``
    once per tick while it is, and ``before_transition()`` /
    ``after_transition()`` around the switch it triggers.
    """

    def __init__(self, from_state: Optional[Hashable], to_state: Hashable, force_instantly: bool = False) -> None:
        """Initialize a transition.

        Args:
            from_state: Name of the source state; None for transitions
                checked from any state
            to_state: Name of the target state
            force_instantly: Switch without waiting for the source state's
                exit time
        """
        self.from_state = from_state
        self.to_state = to_state
        self.force_instantly = force_instantly
        self._fsm: Optional[ReferenceType] = None

    @property
    def fsm(self) -> Any:
        """Get the machine this transition belongs to, or None."""
        return self._fsm() if self._fsm is not None else None

    @fsm.setter
    def fsm(self, machine: Any) -> None:
        self._fsm = ref(machine) if machine is not None else None

    def init(self) -> None:
        """Called once when the transition is added to a machine."""

    def on_enter(self) -> None:
        """Called when the source state becomes active."""

    def should_transition(self) -> bool:
        """Return True if the machine should switch to ``to_state`` now."""
        return True

    def before_transition(self) -> None:
        """Called right before the machine exits the source state."""

    def after_transition(self) -> None:
        """Called right after the machine entered the target state."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.from_state!r} -> {self.to_state!r})"


class Transition(TransitionBase):
    """A transition that fires as soon as its condition holds."""

    def __init__(
        self,
        from_state: Optional[Hashable],
        to_state: Hashable,
        condition: Optional[Callable[["Transition"], bool]] = None,
        on_transition: Optional[Callable[["Transition"], None]] = None,
        after_transition: Optional[Callable[["Transition"], None]] = None,
        force_instantly: bool = False,
    ) -> None:
        """Initialize a Transition instance.

        Args:
            from_state: Name of the source state
            to_state: Name of the target state
            condition: Optional predicate; the transition always fires without one
            on_transition: Optional hook called before the switch
            after_transition: Optional hook called after the switch
            force_instantly: Ignore the source state's exit time
        """
        super().__init__(from_state, to_state, force_instantly)
        self.condition = condition
        self.before_hook = on_transition
        self.after_hook = after_transition

    def should_transition(self) -> bool:
        if self.condition is None:
            return True
        return self.condition(self)

    def before_transition(self) -> None:
        if self.before_hook is not None:
            self.before_hook(self)

    def after_transition(self) -> None:
        if self.after_hook is not None:
            self.after_hook(self)


class TransitionAfterContinuous(TransitionBase):
    """A transition that fires once its condition held continuously long enough.

    The condition is read every time the machine evaluates the transition.
    Each false reading restarts the timer, so interrupted stretches never add
    up. Without a condition the transition is a plain delay: it fires once
    ``condition_total_time`` has passed since the source state was entered.

    Unless a timer is injected, time is read from the clock of the owning
    StateMachine (``StateMachine(clock=...)``), falling back to the wall clock
    when the machine has none.

    Class Invariants:
    1. should_transition() is True only if every reading since the last reset
       was true and the elapsed time is strictly greater than
       condition_total_time
    2. The timer is reset on every on_enter() and every false reading
    """

    def __init__(
        self,
        from_state: Optional[Hashable],
        to_state: Hashable,
        condition_total_time: float,
        condition: Optional[Callable[["TransitionAfterContinuous"], bool]] = None,
        on_transition: Optional[Callable[["TransitionAfterContinuous"], None]] = None,
        after_transition: Optional[Callable[["TransitionAfterContinuous"], None]] = None,
        force_instantly: bool = False,
        timer: Optional[TimerProtocol] = None,
    ) -> None:
        """Initialize a TransitionAfterContinuous instance.

        Args:
            from_state: Name of the source state
            to_state: Name of the target state
            condition_total_time: Seconds the condition must hold without
                interruption
            condition: Optional predicate read every evaluation
            on_transition: Optional hook called before the switch
            after_transition: Optional hook called after the switch
            force_instantly: Ignore the source state's exit time
            timer: Timer measuring how long the condition has held. When
                omitted, the transition times itself with the clock of its
                owning StateMachine, or the wall clock if the machine has
                none

        Raises:
            ValueError: If condition_total_time is negative
        """
        if condition_total_time < 0:
            raise ValueError("condition_total_time must be non-negative")

        super().__init__(from_state, to_state, force_instantly)
        self.condition_total_time = condition_total_time
        self.condition = condition
        self.before_hook = on_transition
        self.after_hook = after_transition
        self.timer: TimerProtocol = timer if timer is not None else Timer()
        self._follows_owner_clock = timer is None

    def on_enter(self) -> None:
        if self._follows_owner_clock:
            self._use_owner_clock()
        self.timer.reset()

    def _use_owner_clock(self) -> None:
        clock = owner_clock(self)
        if clock is not None and clock is not self.timer.clock:
            self.timer = Timer(clock)

    def should_transition(self) -> bool:
        if self.condition is None:
            # Pure delay
            return self.timer.elapsed > self.condition_total_time

        if self.condition(self):
            return self.timer.elapsed > self.condition_total_time

        if self.timer.elapsed > 0:
            logger.debug("Condition of %r interrupted after %.3fs, restarting", self, self.timer.elapsed)
        self.timer.reset()
        return False

    def before_transition(self) -> None:
        if self.before_hook is not None:
            self.before_hook(self)

    def after_transition(self) -> None:
        if self.after_hook is not None:
            self.after_hook(self)
