"""
Room lifecycle: create, join, leave and disconnect transitions

Every mutation runs under the room store lock and finishes its reads and
writes before any notification is sent, so each transition is applied
completely or not at all.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .chat import system_notice
from .events import NEW_MESSAGE, USER_JOINED, USER_LEFT
from .lobby import LobbyBroadcaster
from .state import ConnectionRegistry, Notification, Room, RoomStatus, RoomStore
from .utils import generate_room_name, now_ms

logger = logging.getLogger("dauximity")

ROOM_NOT_FOUND = "Room not found or signal lost."
HOST_LOST = "HOST DISCONNECTED. SIGNAL LOST."


class Transition(str, Enum):
    LISTENER_LEFT = "listener_left"
    DESTROYED = "destroyed"
    NOOP = "noop"


@dataclass
class JoinResult:
    success: bool
    room: Optional[Dict[str, Any]] = None
    message: Optional[str] = None

    def to_ack(self) -> Dict[str, Any]:
        ack = {"success": self.success}
        if self.room is not None:
            ack["room"] = self.room
        if self.message is not None:
            ack["message"] = self.message
        return ack


@dataclass
class LeaveOutcome:
    room_id: str
    transition: Transition
    notified: List[str] = field(default_factory=list)


class RoomController:
    def __init__(self, registry: ConnectionRegistry, store: RoomStore,
                 lobby: LobbyBroadcaster, max_name_length: int = 64):
        self.registry = registry
        self.store = store
        self.lobby = lobby
        self.max_name_length = max_name_length

    # ------------------------------------------------------------
    # Transitions (caller holds store.lock)
    # ------------------------------------------------------------

    def _leave_locked(self, requester, room):
        if room.has_live_host and room.host_id == requester:
            # Host left: notify listeners, then drop the room
            notice = system_notice(HOST_LOST).to_dict()
            targets = sorted(room.listeners)
            self.store.remove(room.id)
            logger.info(f"💥 Room destroyed: {room.name} ({room.id}), {len(targets)} listeners dropped")
            notes = [Notification(target, NEW_MESSAGE, notice) for target in targets]
            return LeaveOutcome(room.id, Transition.DESTROYED, targets), notes

        if requester not in room.listeners:
            return LeaveOutcome(room.id, Transition.NOOP), []

        room.listeners.discard(requester)
        targets = room.members()
        notes = [Notification(target, USER_LEFT, {"userId": requester}) for target in targets]
        logger.info(f"👋 {requester} left {room.name} ({room.listener_count} listening)")
        return LeaveOutcome(room.id, Transition.LISTENER_LEFT, targets), notes

    def _detach_locked(self, requester, keep=None):
        """Leave every room the participant is in, except ``keep``"""
        outcomes = []
        notes = []
        for room in self.store.rooms_of(requester):
            if room.id == keep:
                continue
            outcome, room_notes = self._leave_locked(requester, room)
            outcomes.append(outcome)
            notes.extend(room_notes)
        return outcomes, notes

    # ------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------

    async def create_room(self, requester: str, name: Optional[str] = None) -> Room:
        """Create a room hosted by ``requester``. Any previous membership is left first."""
        if isinstance(name, str):
            name = name.strip()[:self.max_name_length]
        async with self.store.lock:
            _, notes = self._detach_locked(requester)
            room = Room(
                id=self.store.new_room_id(),
                name=name or generate_room_name(),
                host_id=requester,
                created_at=now_ms(),
                status=RoomStatus.ACTIVE,
            )
            self.store.add(room)

        logger.info(f"🎪 Room created: {room.name} by {requester} (ID: {room.id})")
        await self.registry.deliver(notes)
        await self.lobby.publish()
        return room

    async def join_room(self, requester: str, room_id: str) -> JoinResult:
        async with self.store.lock:
            room = self.store.get(room_id)
            if room is None:
                logger.info(f"🚫 {requester} tried to join missing room {room_id}")
                return JoinResult(False, message=ROOM_NOT_FOUND)

            if room.has_live_host and room.host_id == requester:
                # Host reopening its own room; never a listener of it
                return JoinResult(True, room=room.snapshot())

            _, notes = self._detach_locked(requester, keep=room.id)
            room.listeners.add(requester)
            if room.has_live_host:
                notes.append(Notification(room.host_id, USER_JOINED, {"userId": requester}))
            snapshot = room.snapshot()

        logger.info(f"✅ {requester} joined {room.name} ({snapshot['listenerCount']} listening)")
        await self.registry.deliver(notes)
        await self.lobby.publish()
        return JoinResult(True, room=snapshot)

    async def leave_room(self, requester: str, room_id: str) -> LeaveOutcome:
        async with self.store.lock:
            room = self.store.get(room_id)
            if room is None:
                outcome, notes = LeaveOutcome(str(room_id), Transition.NOOP), []
            else:
                outcome, notes = self._leave_locked(requester, room)

        await self.registry.deliver(notes)
        await self.lobby.publish()
        return outcome

    async def on_disconnect(self, requester: str) -> List[LeaveOutcome]:
        """
        Drop a participant's connection, lobby subscription and every room
        membership in one step. Safe to call more than once.
        """
        async with self.store.lock:
            self.registry.unregister(requester)
            self.lobby.unsubscribe(requester)
            outcomes, notes = self._detach_locked(requester)

        await self.registry.deliver(notes)
        if any(outcome.transition != Transition.NOOP for outcome in outcomes):
            await self.lobby.publish()
        return outcomes

    def list_rooms(self) -> List[Dict[str, Any]]:
        return self.store.snapshots()
