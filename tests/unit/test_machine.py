"""Unit tests for the StateMachine class.

Tests state management, transition scanning, exit-time negotiation and
nesting of state machines.
"""

import unittest
from unittest.mock import MagicMock

from tickstate.core.base import StateBase
from tickstate.core.errors import (
    ConfigurationError,
    DuplicateStateError,
    HFSMError,
    StateMachineNotInitializedError,
    StateNotFoundError,
)
from tickstate.core.machine import PendingTransition, StateMachine
from tickstate.core.state import State
from tickstate.core.transition import Transition


class TestStateMachineSetup(unittest.TestCase):
    """Test cases for building a state machine."""

    def setUp(self):
        self.fsm = StateMachine()

    def test_first_state_is_start_state(self):
        self.fsm.add_state("Idle", State()).add_state("Walk", State())
        self.assertEqual(self.fsm.start_state, "Idle")

    def test_set_start_state(self):
        self.fsm.add_state("Idle", State()).add_state("Walk", State()).set_start_state("Walk")
        self.fsm.init()
        self.assertEqual(self.fsm.active_state_name, "Walk")

    def test_add_state_links_names_and_initializes(self):
        state = MagicMock(spec=StateBase)
        self.fsm.add_state("Idle", state)

        self.assertEqual(state.name, "Idle")
        self.assertIs(state.fsm, self.fsm)
        state.init.assert_called_once_with()
        self.assertIs(self.fsm.get_state("Idle"), state)

    def test_duplicate_state_rejected(self):
        self.fsm.add_state("Idle", State())
        with self.assertRaises(DuplicateStateError):
            self.fsm.add_state("Idle", State())

    def test_unknown_state(self):
        with self.assertRaises(StateNotFoundError) as ctx:
            self.fsm.get_state("Nowhere")
        self.assertIsInstance(ctx.exception, KeyError)
        self.assertIsInstance(ctx.exception, HFSMError)
        self.assertIn("Nowhere", str(ctx.exception))

    def test_unknown_start_state(self):
        self.fsm.add_state("Idle", State()).set_start_state("Nowhere")
        with self.assertRaises(StateNotFoundError):
            self.fsm.init()

    def test_entering_empty_machine_fails(self):
        with self.assertRaises(ConfigurationError):
            self.fsm.init()

    def test_logic_before_init_fails(self):
        self.fsm.add_state("Idle", State())
        with self.assertRaises(StateMachineNotInitializedError):
            self.fsm.on_logic()

    def test_add_transition_initializes_and_links(self):
        transition = Transition("Idle", "Walk")
        transition.init = MagicMock()
        self.fsm.add_transition(transition)

        self.assertIs(transition.fsm, self.fsm)
        transition.init.assert_called_once_with()

    def test_root_init_enters_start_state(self):
        on_enter = MagicMock()
        self.fsm.add_state("Idle", State(on_enter=on_enter))

        self.assertTrue(self.fsm.is_root)
        self.fsm.init()

        on_enter.assert_called_once()
        self.assertEqual(self.fsm.active_state_name, "Idle")


class TestStateMachineTransitions(unittest.TestCase):
    """Test cases for transition scanning."""

    def setUp(self):
        self.trace = []
        self.go = {"Walk": False, "Run": False}
        self.fsm = StateMachine()
        for name in ("Idle", "Walk", "Run"):
            self.fsm.add_state(
                name,
                State(
                    on_enter=lambda s: self.trace.append(f"{s.name}:enter"),
                    on_logic=lambda s: self.trace.append(f"{s.name}:logic"),
                    on_exit=lambda s: self.trace.append(f"{s.name}:exit"),
                ),
            )

    def test_direct_transition_switches_before_logic(self):
        self.fsm.add_transition(Transition("Idle", "Walk", condition=lambda t: self.go["Walk"]))
        self.fsm.init()

        self.fsm.on_logic()
        self.go["Walk"] = True
        self.fsm.on_logic()

        self.assertEqual(
            self.trace,
            ["Idle:enter", "Idle:logic", "Idle:exit", "Walk:enter", "Walk:logic"],
        )
        self.assertEqual(self.fsm.active_state_name, "Walk")

    def test_only_transitions_of_active_state_are_checked(self):
        condition = MagicMock(return_value=False)
        self.fsm.add_transition(Transition("Walk", "Run", condition=condition))
        self.fsm.init()

        self.fsm.on_logic()

        condition.assert_not_called()

    def test_first_firing_transition_wins(self):
        self.fsm.add_transition(Transition("Idle", "Walk"))
        self.fsm.add_transition(Transition("Idle", "Run"))
        self.fsm.init()

        self.fsm.on_logic()

        self.assertEqual(self.fsm.active_state_name, "Walk")

    def test_transition_from_any_checked_first(self):
        self.fsm.add_transition(Transition("Idle", "Walk"))
        self.fsm.add_transition_from_any(Transition(None, "Run", condition=lambda t: self.go["Run"]))
        self.fsm.init()

        self.go["Run"] = True
        self.fsm.on_logic()

        self.assertEqual(self.fsm.active_state_name, "Run")

    def test_transition_from_any_does_not_reenter_active_state(self):
        self.fsm.add_transition_from_any(Transition(None, "Idle"))
        self.fsm.init()
        self.trace.clear()

        self.fsm.on_logic()

        self.assertEqual(self.trace, ["Idle:logic"])

    def test_hooks_surround_switch(self):
        self.fsm.add_transition(
            Transition(
                "Idle",
                "Walk",
                on_transition=lambda t: self.trace.append("before"),
                after_transition=lambda t: self.trace.append("after"),
            )
        )
        self.fsm.init()
        self.trace.clear()

        self.fsm.on_logic()

        self.assertEqual(self.trace, ["before", "Idle:exit", "Walk:enter", "after", "Walk:logic"])

    def test_transitions_entered_on_switch(self):
        leave_walk = Transition("Walk", "Idle", condition=lambda t: False)
        leave_walk.on_enter = MagicMock()
        self.fsm.add_transition(Transition("Idle", "Walk"))
        self.fsm.add_transition(leave_walk)
        self.fsm.init()
        leave_walk.on_enter.assert_not_called()

        self.fsm.on_logic()

        leave_walk.on_enter.assert_called_once_with()

    def test_request_state_change_unknown_state(self):
        self.fsm.init()
        with self.assertRaises(StateNotFoundError):
            self.fsm.request_state_change("Fly")

    def test_ghost_state_passed_through(self):
        fsm = StateMachine()
        fsm.add_state("Start", State())
        fsm.add_state("Ghost", State(is_ghost_state=True, on_enter=lambda s: self.trace.append("Ghost:enter")))
        fsm.add_state("End", State())
        fsm.add_transition(Transition("Start", "Ghost"))
        fsm.add_transition(Transition("Ghost", "End"))
        fsm.init()

        fsm.on_logic()

        self.assertEqual(self.trace, ["Ghost:enter"])
        self.assertEqual(fsm.active_state_name, "End")

    def test_exit_clears_active_state(self):
        self.fsm.init()
        self.fsm.on_exit()

        self.assertIsNone(self.fsm.active_state)
        self.assertIsNone(self.fsm.active_state_name)
        self.assertEqual(self.trace[-1], "Idle:exit")


class TestStateMachineExitTime(unittest.TestCase):
    """Test cases for negotiating with states that need exit time."""

    def setUp(self):
        self.ready = False
        self.fsm = StateMachine()
        self.fsm.add_state("Attack", State(needs_exit_time=True, can_exit=lambda s: self.ready))
        self.fsm.add_state("Idle", State())
        self.after = MagicMock()
        self.fsm.add_transition(Transition("Attack", "Idle", after_transition=self.after))
        self.fsm.init()

    def test_switch_waits_for_exit_time(self):
        self.fsm.on_logic()

        self.assertEqual(self.fsm.active_state_name, "Attack")
        self.assertTrue(self.fsm.has_pending_transition)

        self.ready = True
        self.fsm.on_logic()

        self.assertEqual(self.fsm.active_state_name, "Idle")
        self.assertFalse(self.fsm.has_pending_transition)
        self.after.assert_called_once()

    def test_state_can_exit_completes_pending_switch(self):
        self.fsm.on_logic()
        self.fsm.state_can_exit()

        self.assertEqual(self.fsm.active_state_name, "Idle")
        self.after.assert_called_once()

    def test_state_can_exit_without_pending_is_noop(self):
        self.fsm.state_can_exit()
        self.assertEqual(self.fsm.active_state_name, "Attack")

    def test_force_instantly_skips_exit_time(self):
        self.fsm.request_state_change("Idle", force_instantly=True)
        self.assertEqual(self.fsm.active_state_name, "Idle")
        self.assertFalse(self.fsm.has_pending_transition)

    def test_exit_clears_pending_transition(self):
        self.fsm.on_logic()
        self.fsm.on_exit()
        self.assertFalse(self.fsm.has_pending_transition)

    def test_pending_transition_record(self):
        pending = PendingTransition("Idle")
        self.assertEqual(pending.state, "Idle")
        self.assertIsNone(pending.listener)


class TestNestedStateMachine(unittest.TestCase):
    """Test cases for machines nested inside machines."""

    def setUp(self):
        self.finished = False
        self.inner = StateMachine(needs_exit_time=True)
        self.inner.add_state("Windup", State())
        self.inner.add_state("Swing", State(needs_exit_time=True, can_exit=lambda s: self.finished))
        self.inner.add_transition(Transition("Windup", "Swing"))

        self.root = StateMachine()
        self.root.add_state("Combat", self.inner)
        self.root.add_state("Rest", State())
        self.root.add_transition(Transition("Combat", "Rest", condition=lambda t: self.inner.active_state_name == "Swing"))
        self.root.init()

    def test_nested_start_state_entered(self):
        self.assertEqual(self.inner.active_state_name, "Windup")
        self.assertEqual(self.root.get_active_hierarchy_path(), "/Combat/Windup")

    def test_nested_exit_waits_for_inner_state(self):
        self.root.on_logic()
        self.assertEqual(self.root.get_active_hierarchy_path(), "/Combat/Swing")

        self.root.on_logic()
        self.assertEqual(self.root.active_state_name, "Combat")
        self.assertTrue(self.inner.has_pending_transition)

        self.finished = True
        self.root.on_logic()

        self.assertEqual(self.root.active_state_name, "Rest")
        self.assertIsNone(self.inner.active_state)

    def test_nested_exit_immediate_when_inner_state_needs_no_time(self):
        owner = MagicMock(clock=None)
        machine = StateMachine(needs_exit_time=True)
        machine.add_state("Only", State())
        machine.fsm = owner
        machine.on_enter()

        machine.on_exit_request()

        owner.state_can_exit.assert_called_once_with()

    def test_on_action_forwarded_to_active_state(self):
        hit = MagicMock()
        machine = StateMachine()
        machine.add_state("Idle", State().add_action("hit", hit))
        machine.add_state("Plain", StateBase())
        machine.init()

        machine.on_action("hit", 3)
        hit.assert_called_once_with(3)

        machine.request_state_change("Plain")
        machine.on_action("hit", 4)
        hit.assert_called_once_with(3)

    def test_path_of_inactive_machine(self):
        self.assertEqual(StateMachine(name="Root").get_active_hierarchy_path(), "Root")
