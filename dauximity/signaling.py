"""
Signaling relay: forwards WebRTC negotiation messages between participants

Payloads are passed through verbatim. Nothing here tracks whether a host is
streaming; the host answers that itself via the stream-status handshake.
"""
import logging
from enum import Enum
from typing import Any

from .events import (
    CHECK_STREAM_STATUS,
    HOST_START_STREAM,
    LISTENER_REQUEST_CONNECTION,
    WEBRTC_SIGNAL,
)
from .state import ConnectionRegistry, Notification, RoomStore

logger = logging.getLogger("dauximity")


class RelayOutcome(str, Enum):
    DELIVERED = "delivered"
    DROPPED = "dropped"


class SignalingRelay:
    def __init__(self, registry: ConnectionRegistry, store: RoomStore):
        self.registry = registry
        self.store = store

    async def _send(self, target: str, event: str, data: Any = None) -> RelayOutcome:
        if await self.registry.send(target, event, data):
            return RelayOutcome.DELIVERED
        logger.debug(f"Dropped {event} for unreachable participant {target}")
        return RelayOutcome.DROPPED

    async def forward(self, sender: str, kind: str, payload: Any, target_id: str) -> RelayOutcome:
        """Deliver an offer/answer/candidate to ``target_id``, stamped with the sender"""
        return await self._send(target_id, WEBRTC_SIGNAL, {
            "type": kind,
            "payload": payload,
            "senderId": sender,
        })

    async def host_start_stream(self, sender: str, room_id: str) -> int:
        """Tell every other member of the room that media is available"""
        room = self.store.get(room_id)
        if room is None or not room.is_member(sender):
            logger.debug(f"Ignoring host-start-stream from {sender} for {room_id}")
            return 0
        return await self.registry.deliver(
            Notification(member, HOST_START_STREAM)
            for member in room.members() if member != sender
        )

    async def request_connection(self, sender: str, room_id: str) -> RelayOutcome:
        """Ask the room's host to send an offer to ``sender``"""
        room = self.store.get(room_id)
        if room is None or not room.has_live_host:
            return RelayOutcome.DROPPED
        return await self._send(room.host_id, LISTENER_REQUEST_CONNECTION, {"listenerId": sender})

    async def check_stream_status(self, sender: str, room_id: str) -> RelayOutcome:
        """Ask the room's host whether it is currently streaming"""
        room = self.store.get(room_id)
        if room is None or not room.has_live_host:
            return RelayOutcome.DROPPED
        return await self._send(room.host_id, CHECK_STREAM_STATUS, {"requesterId": sender})

    async def stream_status_reply(self, sender: str, requester_id: str, is_streaming: bool) -> RelayOutcome:
        """A host's answer to check-stream-status; only a "yes" reaches the requester"""
        if not is_streaming:
            return RelayOutcome.DROPPED
        return await self._send(requester_id, HOST_START_STREAM)
