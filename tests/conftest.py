import pytest

from dauximity.config import Settings
from dauximity.hub import SignalHub


class FakeSession:
    """Stands in for an aiohttp WebSocketResponse, recording what was sent"""

    def __init__(self, participant_id):
        self.id = participant_id
        self.sent = []
        self.closed = False

    async def send_json(self, data):
        if self.closed:
            raise ConnectionResetError("session closed")
        self.sent.append(data)

    async def close(self):
        self.closed = True

    def events(self, name):
        return [frame["data"] for frame in self.sent if frame["event"] == name]

    def clear(self):
        self.sent.clear()


@pytest.fixture
def settings():
    return Settings(demo_rooms=True)


@pytest.fixture
def hub(settings):
    return SignalHub(settings)


@pytest.fixture
def connect(hub):
    """Register a fake participant connection and return its session"""
    def _connect(participant_id):
        session = FakeSession(participant_id)
        hub.connect(participant_id, session)
        return session
    return _connect
