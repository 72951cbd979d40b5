"""
Chat relay: stamps text messages and fans them out to room members
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .events import NEW_MESSAGE
from .state import SYSTEM_HOST, ConnectionRegistry, Notification, RoomStore
from .utils import generate_message_id, now_ms

logger = logging.getLogger("dauximity")


@dataclass(frozen=True)
class ChatMessage:
    id: str
    user_id: str
    text: str
    timestamp: int
    system: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "userId": self.user_id,
            "text": self.text,
            "timestamp": self.timestamp,
        }
        if self.system:
            data["system"] = True
        return data


def system_notice(text: str) -> ChatMessage:
    """Build a server-generated notice"""
    return ChatMessage(
        id=generate_message_id("sys"),
        user_id=SYSTEM_HOST,
        text=text,
        timestamp=now_ms(),
        system=True,
    )


class ChatRelay:
    def __init__(self, registry: ConnectionRegistry, store: RoomStore):
        self.registry = registry
        self.store = store

    async def send_message(self, sender: str, room_id: str, text: str) -> Optional[ChatMessage]:
        """
        Fan a message out to everyone currently in the room, sender included.

        Returns the message, or None when the room is unknown or the sender
        is not one of its members.
        """
        room = self.store.get(room_id)
        if room is None or not room.is_member(sender):
            logger.debug(f"Dropping chat from {sender} to {room_id}: not a member")
            return None

        message = ChatMessage(
            id=generate_message_id(sender),
            user_id=sender,
            text=text,
            timestamp=now_ms(),
        )
        payload = message.to_dict()
        await self.registry.deliver(
            Notification(member, NEW_MESSAGE, payload) for member in room.members()
        )
        return message
