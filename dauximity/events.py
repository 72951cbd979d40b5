"""
Event names carried over the participant WebSocket
"""

# Lobby
JOIN_LOBBY = "join-lobby"
ROOM_LIST = "room-list"

# Room lifecycle
CREATE_ROOM = "create-room"
JOIN_ROOM = "join-room"
LEAVE_ROOM = "leave-room"
USER_JOINED = "user-joined"
USER_LEFT = "user-left"

# Signaling
WEBRTC_SIGNAL = "webrtc-signal"
HOST_START_STREAM = "host-start-stream"
LISTENER_REQUEST_CONNECTION = "listener-request-connection"
CHECK_STREAM_STATUS = "check-stream-status"
STREAM_STATUS_REPLY = "stream-status-reply"

# Chat
SEND_MESSAGE = "send-message"
NEW_MESSAGE = "new-message"

# Transport
CONNECTED = "connected"
ACK = "ack"

SIGNAL_KINDS = frozenset({"offer", "answer", "candidate"})
