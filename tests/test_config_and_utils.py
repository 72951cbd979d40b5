import re

import pytest

from dauximity.api import _room_id
from dauximity.config import Settings
from dauximity.errors import MalformedEvent
from dauximity.state import RoomStore
from dauximity.utils import generate_participant_id, generate_room_id


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("PORT", "4000")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("DAUX_DEMO_ROOMS", "0")
    monkeypatch.setenv("DAUX_RATE_LIMIT", "")

    settings = Settings.from_env()

    assert settings.port == 4000
    assert settings.log_level == "DEBUG"
    assert settings.demo_rooms is False
    assert settings.rate_limit == 100


def test_id_formats():
    assert re.fullmatch(r"room-\d{6}-[0-9a-f]{4}", generate_room_id())
    assert generate_participant_id().startswith("peer_")
    assert generate_participant_id() != generate_participant_id()


def test_store_never_reissues_ids(monkeypatch):
    store = RoomStore()
    issued = iter(["room-000001-aaaa", "room-000001-aaaa", "room-000002-bbbb"])
    monkeypatch.setattr("dauximity.state.generate_room_id", lambda: next(issued))

    assert store.new_room_id() == "room-000001-aaaa"
    assert store.new_room_id() == "room-000002-bbbb"


def test_demo_rooms_cannot_be_removed():
    store = RoomStore()
    store.seed_demo_rooms(created_at=0)
    with pytest.raises(ValueError):
        store.remove("demo-lofi")


@pytest.mark.parametrize("data", [None, 5, "", {"roomId": None}, {"other": "x"}])
def test_room_id_rejects_bad_payloads(data):
    with pytest.raises(MalformedEvent):
        _room_id("join-room", data)
