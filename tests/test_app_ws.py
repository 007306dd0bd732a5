from __future__ import annotations

import random
import time

from fastapi.testclient import TestClient

from dragon_relay.server.app import create_app
from dragon_relay.server.config import Settings
from dragon_relay.server.router import RoomRouter


def _client() -> TestClient:
    settings = Settings(palette=["#FF0000", "#00FF00"])
    return TestClient(create_app(settings, router=RoomRouter(settings, rng=random.Random(5))))


def _wait_for_display(client: TestClient, room: str, count: int = 1) -> None:
    deadline = time.monotonic() + 5.0
    while time.monotonic() < deadline:
        if client.get("/rooms").json()["displays"].get(room) == count:
            return
        time.sleep(0.01)
    raise AssertionError(f"display room {room!r} never reached {count} members")


def test_healthz() -> None:
    assert _client().get("/healthz").json() == {"ok": True}


def test_rooms_lists_mapping() -> None:
    body = _client().get("/rooms").json()
    assert body["rooms"]["room1"] == ["display1"]
    assert body["displays"]["display"] == 0


def test_cursor_is_routed_to_display_and_removed_on_disconnect() -> None:
    # entering the client keeps every socket on one event loop, as under uvicorn
    with _client() as client, client.websocket_connect("/ws") as display:
        display.send_json({"t": "join-display-room", "room": "display1"})
        _wait_for_display(client, "display1")

        with client.websocket_connect("/ws") as drawer:
            drawer.send_json({"t": "cursor-position", "x": 0.9, "y": 0.9})  # dropped: no room yet
            drawer.send_json({"t": "join-room", "room": "room1"})
            identity = drawer.receive_json()
            assert identity["t"] == "assigned-identity"
            assert identity["color"] in ("#FF0000", "#00FF00")

            drawer.send_json({"t": "cursor-position", "x": 0.5, "y": 0.25})
            routed = display.receive_json()
            assert routed["t"] == "cursor-position"
            assert (routed["x"], routed["y"]) == (0.5, 0.25)
            assert routed["color"] == identity["color"]
            assert routed["colorIndex"] == identity["colorIndex"]
            sender = routed["senderId"]

        gone = display.receive_json()
        assert gone == {"t": "client-disconnected", "senderId": sender}
