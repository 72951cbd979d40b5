from dauximity.events import (
    CHECK_STREAM_STATUS,
    HOST_START_STREAM,
    LISTENER_REQUEST_CONNECTION,
    WEBRTC_SIGNAL,
)
from dauximity.signaling import RelayOutcome


async def test_forward_delivers_payload_verbatim(hub, connect):
    connect("x")
    y = connect("y")
    payload = {"sdp": "v=0\r\no=- 1 2 IN IP4 127.0.0.1", "type": "offer"}

    outcome = await hub.relay.forward("x", "offer", payload, "y")

    assert outcome == RelayOutcome.DELIVERED
    assert y.events(WEBRTC_SIGNAL) == [{"type": "offer", "payload": payload, "senderId": "x"}]


async def test_forward_to_unknown_target_is_dropped(hub, connect):
    x = connect("x")

    outcome = await hub.relay.forward("x", "candidate", {"candidate": "c"}, "ghost")

    assert outcome == RelayOutcome.DROPPED
    assert x.sent == []


async def test_forward_to_departed_target_is_dropped(hub, connect):
    connect("x")
    connect("y")
    await hub.disconnect("y")

    assert await hub.relay.forward("x", "answer", {}, "y") == RelayOutcome.DROPPED


async def test_host_start_stream_reaches_other_members(hub, connect):
    x = connect("x")
    y = connect("y")
    z = connect("z")
    outsider = connect("o")
    room = await hub.rooms.create_room("x", "Test")
    await hub.rooms.join_room("y", room.id)
    await hub.rooms.join_room("z", room.id)

    notified = await hub.relay.host_start_stream("x", room.id)

    assert notified == 2
    assert y.events(HOST_START_STREAM) == [None]
    assert z.events(HOST_START_STREAM) == [None]
    assert x.events(HOST_START_STREAM) == []
    assert outsider.sent == []


async def test_host_start_stream_from_outsider_is_ignored(hub, connect):
    connect("x")
    y = connect("y")
    connect("o")
    room = await hub.rooms.create_room("x", "Test")
    await hub.rooms.join_room("y", room.id)

    assert await hub.relay.host_start_stream("o", room.id) == 0
    assert await hub.relay.host_start_stream("x", "room-missing") == 0
    assert y.events(HOST_START_STREAM) == []


async def test_listener_request_connection_asks_host(hub, connect):
    x = connect("x")
    connect("y")
    room = await hub.rooms.create_room("x", "Test")
    await hub.rooms.join_room("y", room.id)

    outcome = await hub.relay.request_connection("y", room.id)

    assert outcome == RelayOutcome.DELIVERED
    assert x.events(LISTENER_REQUEST_CONNECTION) == [{"listenerId": "y"}]


async def test_request_connection_without_live_host_is_dropped(hub, connect):
    connect("y")
    assert await hub.relay.request_connection("y", "demo-lofi") == RelayOutcome.DROPPED
    assert await hub.relay.request_connection("y", "room-missing") == RelayOutcome.DROPPED


async def test_stream_status_handshake_when_streaming(hub, connect):
    x = connect("x")
    y = connect("y")
    room = await hub.rooms.create_room("x", "Test")
    await hub.rooms.join_room("y", room.id)

    assert await hub.relay.check_stream_status("y", room.id) == RelayOutcome.DELIVERED
    assert x.events(CHECK_STREAM_STATUS) == [{"requesterId": "y"}]

    assert await hub.relay.stream_status_reply("x", "y", True) == RelayOutcome.DELIVERED
    assert y.events(HOST_START_STREAM) == [None]


async def test_stream_status_reply_not_streaming_sends_nothing(hub, connect):
    connect("x")
    y = connect("y")

    assert await hub.relay.stream_status_reply("x", "y", False) == RelayOutcome.DROPPED
    assert y.sent == []


async def test_check_stream_status_on_demo_room_is_dropped(hub, connect):
    connect("y")
    assert await hub.relay.check_stream_status("y", "demo-nts-1") == RelayOutcome.DROPPED
