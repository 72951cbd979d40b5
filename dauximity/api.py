"""
HTTP and WebSocket handlers for the dAUXimity signal server
One WebSocket per participant carries lobby, room, signaling and chat events
"""
import hashlib
import json
import logging
from typing import Any, Callable, Dict

from aiohttp import web

from . import events
from .errors import MalformedEvent
from .hub import SignalHub
from .utils import generate_participant_id

logger = logging.getLogger("dauximity")

HEALTH_TEXT = "dAUXimity Signal Server Online. Status: NOMINAL."

# ============================================================
# PAYLOAD HELPERS
# ============================================================

def _fields(event: str, data: Any, *names: str) -> Dict[str, Any]:
    """Require an object payload with the given fields present"""
    if not isinstance(data, dict):
        raise MalformedEvent(event, "payload must be an object")
    missing = [name for name in names if data.get(name) is None]
    if missing:
        raise MalformedEvent(event, f"missing {', '.join(missing)}")
    return data


def _string(event: str, value: Any, name: str) -> str:
    if not isinstance(value, str) or not value:
        raise MalformedEvent(event, f"{name} must be a non-empty string")
    return value


def _room_id(event: str, data: Any) -> str:
    """Room-targeted events accept a bare ID or {roomId}"""
    if isinstance(data, dict):
        data = data.get("roomId")
    return _string(event, data, "roomId")

# ============================================================
# EVENT HANDLERS
# ============================================================

async def on_join_lobby(hub: SignalHub, sender: str, data: Any):
    await hub.lobby.subscribe(sender)


async def on_create_room(hub: SignalHub, sender: str, data: Any):
    name = data.get("name") if isinstance(data, dict) else data
    if name is not None and not isinstance(name, str):
        raise MalformedEvent(events.CREATE_ROOM, "name must be a string")
    room = await hub.rooms.create_room(sender, name)
    return room.snapshot()


async def on_join_room(hub: SignalHub, sender: str, data: Any):
    room_id = _room_id(events.JOIN_ROOM, data)
    result = await hub.rooms.join_room(sender, room_id)
    return result.to_ack()


async def on_leave_room(hub: SignalHub, sender: str, data: Any):
    room_id = _room_id(events.LEAVE_ROOM, data)
    outcome = await hub.rooms.leave_room(sender, room_id)
    return {"transition": outcome.transition.value}


async def on_webrtc_signal(hub: SignalHub, sender: str, data: Any):
    data = _fields(events.WEBRTC_SIGNAL, data, "type", "targetUserId")
    kind = _string(events.WEBRTC_SIGNAL, data["type"], "type")
    if kind not in events.SIGNAL_KINDS:
        raise MalformedEvent(events.WEBRTC_SIGNAL, f"unknown signal type {kind!r}")
    target = _string(events.WEBRTC_SIGNAL, data["targetUserId"], "targetUserId")
    outcome = await hub.relay.forward(sender, kind, data.get("payload"), target)
    return {"outcome": outcome.value}


async def on_host_start_stream(hub: SignalHub, sender: str, data: Any):
    room_id = _room_id(events.HOST_START_STREAM, data)
    notified = await hub.relay.host_start_stream(sender, room_id)
    return {"notified": notified}


async def on_listener_request_connection(hub: SignalHub, sender: str, data: Any):
    room_id = _room_id(events.LISTENER_REQUEST_CONNECTION, data)
    outcome = await hub.relay.request_connection(sender, room_id)
    return {"outcome": outcome.value}


async def on_check_stream_status(hub: SignalHub, sender: str, data: Any):
    room_id = _room_id(events.CHECK_STREAM_STATUS, data)
    outcome = await hub.relay.check_stream_status(sender, room_id)
    return {"outcome": outcome.value}


async def on_stream_status_reply(hub: SignalHub, sender: str, data: Any):
    data = _fields(events.STREAM_STATUS_REPLY, data, "requesterId")
    requester = _string(events.STREAM_STATUS_REPLY, data["requesterId"], "requesterId")
    outcome = await hub.relay.stream_status_reply(sender, requester, bool(data.get("isStreaming")))
    return {"outcome": outcome.value}


async def on_send_message(hub: SignalHub, sender: str, data: Any):
    data = _fields(events.SEND_MESSAGE, data, "roomId", "text")
    room_id = _string(events.SEND_MESSAGE, data["roomId"], "roomId")
    text = data["text"]
    if not isinstance(text, str) or not text.strip():
        raise MalformedEvent(events.SEND_MESSAGE, "text must be a non-empty string")
    if len(text) > hub.settings.max_message_length:
        raise MalformedEvent(events.SEND_MESSAGE, "text too long")
    message = await hub.chat.send_message(sender, room_id, text)
    return message.to_dict() if message else None


EVENT_HANDLERS: Dict[str, Callable] = {
    events.JOIN_LOBBY: on_join_lobby,
    events.CREATE_ROOM: on_create_room,
    events.JOIN_ROOM: on_join_room,
    events.LEAVE_ROOM: on_leave_room,
    events.WEBRTC_SIGNAL: on_webrtc_signal,
    events.HOST_START_STREAM: on_host_start_stream,
    events.LISTENER_REQUEST_CONNECTION: on_listener_request_connection,
    events.CHECK_STREAM_STATUS: on_check_stream_status,
    events.STREAM_STATUS_REPLY: on_stream_status_reply,
    events.SEND_MESSAGE: on_send_message,
}


async def dispatch(hub: SignalHub, sender: str, ws, raw: str) -> None:
    """Decode one client frame, run its handler and answer the ack if asked"""
    try:
        frame = json.loads(raw)
    except ValueError:
        raise MalformedEvent(None, "frame is not valid JSON")
    if not isinstance(frame, dict):
        raise MalformedEvent(None, "frame must be an object")

    event = frame.get("event")
    if not isinstance(event, str):
        raise MalformedEvent(None, "event name must be a string")
    handler = EVENT_HANDLERS.get(event)
    if handler is None:
        raise MalformedEvent(event, "unknown event")

    result = await handler(hub, sender, frame.get("data"))

    ack_id = frame.get("ack")
    if ack_id is not None and not ws.closed:
        await ws.send_json({"event": events.ACK, "ack": ack_id, "data": result})

# ============================================================
# WEBSOCKET ENDPOINT
# ============================================================

async def ws_signal(request: web.Request) -> web.WebSocketResponse:
    """WebSocket endpoint: one participant per connection"""
    hub: SignalHub = request.app["hub"]
    ws = web.WebSocketResponse(heartbeat=hub.settings.ws_heartbeat)
    await ws.prepare(request)

    participant_id = generate_participant_id()
    hub.connect(participant_id, ws)
    logger.info(f"🔌 Participant connected: {participant_id} (total: {len(hub.registry)})")

    try:
        await ws.send_json({"event": events.CONNECTED, "data": {"id": participant_id}})
        async for msg in ws:
            if msg.type == web.WSMsgType.TEXT:
                try:
                    await dispatch(hub, participant_id, ws, msg.data)
                except MalformedEvent as e:
                    logger.warning(f"Ignoring malformed event from {participant_id}: {e}")
            elif msg.type == web.WSMsgType.ERROR:
                logger.debug(f"WebSocket error for {participant_id}: {ws.exception()}")
    except Exception as e:
        logger.error(f"WebSocket handler failed for {participant_id}: {e}", exc_info=True)
    finally:
        outcomes = await hub.disconnect(participant_id)
        logger.info(
            "🔌 Participant disconnected: %s (rooms left: %d, remaining: %d)",
            participant_id, len(outcomes), len(hub.registry),
        )

    return ws

# ============================================================
# HTTP ROUTES
# ============================================================

async def health(request: web.Request) -> web.Response:
    return web.Response(text=HEALTH_TEXT)


async def api_rooms(request: web.Request) -> web.Response:
    """List all rooms with ETag caching"""
    hub: SignalHub = request.app["hub"]
    items = hub.rooms.list_rooms()

    content = json.dumps(items, sort_keys=True)
    etag = hashlib.md5(content.encode()).hexdigest()

    if request.headers.get("If-None-Match") == etag:
        return web.Response(status=304)

    response = web.json_response({"ok": True, "rooms": items})
    response.headers["ETag"] = etag
    response.headers["Cache-Control"] = "max-age=5"
    return response
