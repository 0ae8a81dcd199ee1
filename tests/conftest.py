# tests/conftest.py

import pytest

from tickstate.runtime.timers import ManualClock, Timer


def pytest_configure(config):
    """Register custom marks."""
    config.addinivalue_line("markers", "property: mark test as a property-based test")


class FakeOwner:
    """Stands in for a state machine owning the node under test."""

    def __init__(self, has_pending_transition: bool = True):
        self.has_pending_transition = has_pending_transition
        self.exit_calls = 0

    def state_can_exit(self):
        self.exit_calls += 1


class CallRecorder:
    """Collects 'name:hook' strings in call order."""

    def __init__(self):
        self.calls = []

    def hook(self, label):
        return lambda *args: self.calls.append(label)


@pytest.fixture
def clock():
    """A clock advanced explicitly by the test."""
    return ManualClock()


@pytest.fixture
def timer(clock):
    """A timer following the manual clock."""
    return Timer(clock)


@pytest.fixture
def owner():
    """A fake owner with a pending transition."""
    return FakeOwner(has_pending_transition=True)


@pytest.fixture
def idle_owner():
    """A fake owner with nothing pending."""
    return FakeOwner(has_pending_transition=False)


@pytest.fixture
def recorder():
    return CallRecorder()


@pytest.fixture(scope="session")
def make_owner():
    """Factory for additional fake owners."""
    return FakeOwner
