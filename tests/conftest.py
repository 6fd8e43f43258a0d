import pytest

from pairdraw.server.relay import Relay
from pairdraw.server.rooms import RoomStore
from pairdraw.server.sessions import SessionRegistry


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return RoomStore(clock=clock)


@pytest.fixture
def relay(store):
    return Relay(store, SessionRegistry())
