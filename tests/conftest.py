"""Shared fixtures"""
from datetime import datetime, timedelta, timezone

import pytest

from hunt import state
from hunt.core.events import ChangeNotifier
from hunt.core.store import ReferenceKeyStore, SubmissionStore
from hunt.core.submission import SubmissionStateMachine
from hunt.models import HuntSettings


T0 = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def at(seconds: float) -> datetime:
    """Timestamp `seconds` after the contest start"""
    return T0 + timedelta(seconds=seconds)


class FakeClock:
    """Advances one second per call"""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        self.now = self.now + timedelta(seconds=1)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifier():
    return ChangeNotifier()


@pytest.fixture
def store(notifier):
    return SubmissionStore(notifier)


@pytest.fixture
def key_store(notifier):
    return ReferenceKeyStore(notifier)


@pytest.fixture
def machine(store, clock):
    return SubmissionStateMachine(store, clock=clock)


@pytest.fixture
def fresh_state():
    state.init_state(HuntSettings())
    yield state
    state.init_state(HuntSettings())
