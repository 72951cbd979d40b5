"""
Lobby broadcaster: pushes the room list to every subscribed participant
"""
import logging
from typing import Set

from .events import ROOM_LIST
from .state import ConnectionRegistry, RoomStore

logger = logging.getLogger("dauximity")


class LobbyBroadcaster:
    def __init__(self, registry: ConnectionRegistry, store: RoomStore):
        self.registry = registry
        self.store = store
        self.subscribers: Set[str] = set()

    async def subscribe(self, participant_id: str) -> int:
        """Add a subscriber and republish the list to everyone"""
        self.subscribers.add(participant_id)
        logger.info(f"📡 Lobby subscriber {participant_id} (total: {len(self.subscribers)})")
        return await self.publish()

    def unsubscribe(self, participant_id: str) -> None:
        self.subscribers.discard(participant_id)

    async def publish(self) -> int:
        """Broadcast the current room list to all lobby subscribers"""
        if not self.subscribers:
            return 0

        rooms_data = self.store.snapshots()
        dead = set()
        delivered = 0
        for participant_id in list(self.subscribers):
            if await self.registry.send(participant_id, ROOM_LIST, rooms_data):
                delivered += 1
            elif participant_id not in self.registry:
                dead.add(participant_id)

        # Remove subscribers without a live connection
        self.subscribers.difference_update(dead)
        return delivered
