import pytest

from backend import RoomRegistry


class RecordingEmitter:
    """Stand-in for ConnectionManager that records every emitted event."""

    def __init__(self):
        self.sent = []

    def emit(self, connection_id, event, data=None):
        self.sent.append((connection_id, event, data))
        return True

    def events_for(self, connection_id):
        return [(event, data) for conn, event, data in self.sent if conn == connection_id]

    def names_for(self, connection_id):
        return [event for event, _ in self.events_for(connection_id)]


class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def emitter():
    return RecordingEmitter()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry(emitter, clock):
    return RoomRegistry(emitter, room_ttl=3600, clock=clock)
