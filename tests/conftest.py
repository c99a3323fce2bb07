import pytest

from backend import RoomRegistry, SessionRouter
from lifecycle import ConnectionLifecycle
from relay import RelayChannel


class RecordingTransport:
    """Stands in for ConnectionManager; every send is delivered immediately."""

    def __init__(self):
        self.sent = []

    def send(self, connection_id, event, data=None, request_id=None, supersede=False):
        self.sent.append({
            "to": connection_id,
            "event": event,
            "data": data,
            "id": request_id,
            "supersede": supersede,
        })
        return True

    def events_for(self, connection_id):
        return [m["event"] for m in self.sent if m["to"] == connection_id]

    def messages_for(self, connection_id):
        return [m for m in self.sent if m["to"] == connection_id]


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class SequenceRandom:
    """Returns the given codes in order, then repeats the last one."""

    def __init__(self, *values):
        self.values = list(values)

    def randint(self, a, b):
        value = self.values.pop(0) if len(self.values) > 1 else self.values[0]
        assert a <= value <= b
        return value

    def choice(self, seq):
        return seq[0]


@pytest.fixture
def clock():
    return FakeClock(1_700_000_000.0)


@pytest.fixture
def registry(clock):
    return RoomRegistry(clock=clock)


@pytest.fixture
def router(registry):
    return SessionRouter(registry)


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def relay(router, transport):
    return RelayChannel(router, transport)


@pytest.fixture
def lifecycle(router, transport):
    return ConnectionLifecycle(router, transport)
