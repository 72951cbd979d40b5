"""
Process-wide signal server state, one instance per application
"""
from typing import Optional

from .chat import ChatRelay
from .config import Settings
from .lobby import LobbyBroadcaster
from .rooms import RoomController
from .signaling import SignalingRelay
from .state import ConnectionRegistry, RoomStore
from .utils import now_ms


class SignalHub:
    """Wires the registry, room store and relays together"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.registry = ConnectionRegistry()
        self.store = RoomStore()
        self.lobby = LobbyBroadcaster(self.registry, self.store)
        self.rooms = RoomController(
            self.registry, self.store, self.lobby,
            max_name_length=self.settings.max_name_length,
        )
        self.relay = SignalingRelay(self.registry, self.store)
        self.chat = ChatRelay(self.registry, self.store)

        if self.settings.demo_rooms:
            self.store.seed_demo_rooms(created_at=now_ms())

    def connect(self, participant_id: str, session) -> None:
        self.registry.register(participant_id, session)

    async def disconnect(self, participant_id: str):
        return await self.rooms.on_disconnect(participant_id)

    async def shutdown(self) -> None:
        await self.registry.close_all()
