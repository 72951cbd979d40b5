"""
In-memory state for the signal server
Live participant connections and the room store
"""
import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Set

from .utils import generate_room_id

logger = logging.getLogger("dauximity")

# Host ID of rooms owned by the server rather than a live participant
SYSTEM_HOST = "SYSTEM"

# Always-on stations: (room_id, name, stream_url)
DEMO_STATIONS = (
    ("demo-nts-1", "NTS Radio 1", "https://stream-relay-geo.ntslive.net/stream"),
    ("demo-soma-groove", "SomaFM Groove Salad", "https://ice2.somafm.com/groovesalad-128-mp3"),
    ("demo-soma-defcon", "SomaFM DEF CON Radio", "https://ice2.somafm.com/defcon-128-mp3"),
    ("demo-lofi", "Lofi Girl Radio", "https://play.streamafrica.net/lofiradio"),
)


class RoomStatus(str, Enum):
    ACTIVE = "active"
    WAITING = "waiting"


@dataclass
class Room:
    id: str
    name: str
    host_id: str
    created_at: int
    status: RoomStatus = RoomStatus.ACTIVE
    listeners: Set[str] = field(default_factory=set)
    is_demo: bool = False
    stream_url: Optional[str] = None

    @property
    def listener_count(self) -> int:
        return len(self.listeners)

    @property
    def has_live_host(self) -> bool:
        return self.host_id != SYSTEM_HOST

    def members(self):
        """Participants currently in the room: the live host (if any) and all listeners"""
        members = [self.host_id] if self.has_live_host else []
        members.extend(sorted(self.listeners))
        return members

    def is_member(self, participant_id):
        return participant_id in self.listeners or (
            self.has_live_host and participant_id == self.host_id
        )

    def snapshot(self) -> Dict[str, Any]:
        """Public view of the room; never exposes the listener set itself"""
        data = {
            "id": self.id,
            "name": self.name,
            "hostId": self.host_id,
            "listenerCount": self.listener_count,
            "createdAt": self.created_at,
            "status": self.status.value,
            "isDemo": self.is_demo,
        }
        if self.stream_url:
            data["streamUrl"] = self.stream_url
        return data


class Notification(NamedTuple):
    """One outbound event for one participant"""
    target: str
    event: str
    data: Any = None


class ConnectionRegistry:
    """Maps participant IDs to their live WebSocket sessions"""

    def __init__(self):
        self._sessions: Dict[str, Any] = {}

    def register(self, participant_id: str, session) -> None:
        self._sessions[participant_id] = session

    def unregister(self, participant_id: str) -> bool:
        return self._sessions.pop(participant_id, None) is not None

    def get(self, participant_id):
        return self._sessions.get(participant_id)

    def __contains__(self, participant_id):
        return participant_id in self._sessions

    def __len__(self):
        return len(self._sessions)

    def ids(self):
        return list(self._sessions)

    async def send(self, participant_id: str, event: str, data: Any = None) -> bool:
        """Send one event to a participant. Returns False if it could not be delivered."""
        session = self._sessions.get(participant_id)
        if session is None or session.closed:
            return False
        try:
            await session.send_json({"event": event, "data": data})
        except Exception as e:
            logger.debug(f"Failed to send {event} to {participant_id}: {e}")
            return False
        return True

    async def deliver(self, notifications: Iterable[Notification]) -> int:
        """Send a batch of notifications in order, returning how many landed"""
        delivered = 0
        for note in notifications:
            if await self.send(note.target, note.event, note.data):
                delivered += 1
        return delivered

    async def close_all(self) -> None:
        for participant_id, session in list(self._sessions.items()):
            try:
                await session.close()
            except Exception as e:
                logger.debug(f"Error closing session {participant_id}: {e}")


class RoomStore:
    """
    Room ID -> Room, in insertion order.

    All read-then-write sequences on rooms must hold ``lock``.
    """

    def __init__(self):
        self._rooms: Dict[str, Room] = {}
        self._issued_ids: Set[str] = set()
        self.lock = asyncio.Lock()

    def __contains__(self, room_id):
        return room_id in self._rooms

    def __len__(self):
        return len(self._rooms)

    def get(self, room_id) -> Optional[Room]:
        if not isinstance(room_id, str):
            return None
        return self._rooms.get(room_id)

    def values(self):
        return list(self._rooms.values())

    def new_room_id(self) -> str:
        """Allocate a room ID that this process has never handed out"""
        room_id = generate_room_id()
        while room_id in self._issued_ids:
            room_id = generate_room_id()
        self._issued_ids.add(room_id)
        return room_id

    def add(self, room: Room) -> None:
        if room.id in self._rooms:
            raise ValueError(f"room {room.id} already exists")
        self._issued_ids.add(room.id)
        self._rooms[room.id] = room

    def remove(self, room_id: str) -> Optional[Room]:
        room = self._rooms.get(room_id)
        if room is None:
            return None
        if room.is_demo:
            raise ValueError(f"system room {room_id} cannot be removed")
        return self._rooms.pop(room_id)

    def rooms_of(self, participant_id):
        """Every room the participant hosts or listens in"""
        return [room for room in self._rooms.values() if room.is_member(participant_id)]

    def snapshots(self) -> List[Dict[str, Any]]:
        return [room.snapshot() for room in self._rooms.values()]

    def seed_demo_rooms(self, created_at: int) -> None:
        for room_id, name, stream_url in DEMO_STATIONS:
            if room_id in self._rooms:
                continue
            self.add(Room(
                id=room_id,
                name=name,
                host_id=SYSTEM_HOST,
                created_at=created_at,
                is_demo=True,
                stream_url=stream_url,
            ))
        logger.info(f"📻 Initialized {len(DEMO_STATIONS)} demo rooms")
