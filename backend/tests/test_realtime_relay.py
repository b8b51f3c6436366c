"""Tests for chat fan-out and voice signalling in the realtime relay."""

from __future__ import annotations

from typing import Any

import pytest
from fastapi.websockets import WebSocketState

from app.monitoring.metrics import realtime_connections, realtime_events_total
from parley.realtime import RealtimeRelay, RoomPresenceRegistry, parse_client_event


class DummyWebSocket:
    def __init__(self) -> None:
        self.application_state = WebSocketState.CONNECTED
        self.sent: list[dict[str, Any]] = []

    async def send_json(self, payload: dict[str, Any]) -> None:
        self.sent.append(payload)

    def of_type(self, event_type: str) -> list[dict[str, Any]]:
        return [frame for frame in self.sent if frame["type"] == event_type]


class ClosedWebSocket(DummyWebSocket):
    async def send_json(self, payload: dict[str, Any]) -> None:
        raise RuntimeError("socket already closed")


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_realtime_metrics() -> None:
    realtime_connections.clear()
    realtime_events_total.clear()
    yield
    realtime_connections.clear()
    realtime_events_total.clear()


async def _connect(relay: RealtimeRelay, count: int) -> list[tuple[str, DummyWebSocket]]:
    sessions = []
    for _ in range(count):
        websocket = DummyWebSocket()
        sessions.append((await relay.connect(websocket), websocket))
    return sessions


@pytest.mark.anyio("asyncio")
async def test_connect_greets_with_session_id():
    relay = RealtimeRelay()
    websocket = DummyWebSocket()

    session_id = await relay.connect(websocket, user_id=7)

    assert websocket.sent == [{"type": "connected", "sessionId": session_id}]
    assert await relay.session_ids() == [session_id]
    assert realtime_connections.value("sessions") == 1


@pytest.mark.anyio("asyncio")
async def test_send_message_reaches_room_members_including_sender():
    relay = RealtimeRelay()
    (alice, alice_ws), (bob, bob_ws), (_, outsider_ws) = await _connect(relay, 3)
    await relay.dispatch(alice, parse_client_event({"type": "join_chat", "roomId": "room-1"}))
    await relay.dispatch(bob, parse_client_event({"type": "join_chat", "roomId": "room-1"}))

    await relay.dispatch(
        alice,
        parse_client_event(
            {
                "type": "send_message",
                "roomId": "room-1",
                "text": "hello",
                "translatedText": "hola",
                "messageId": 12,
            }
        ),
    )

    expected = {
        "type": "receive_message",
        "roomId": "room-1",
        "text": "hello",
        "translatedText": "hola",
        "messageId": 12,
    }
    assert alice_ws.of_type("receive_message") == [expected]
    assert bob_ws.of_type("receive_message") == [expected]
    assert outsider_ws.of_type("receive_message") == []
    assert realtime_events_total.value("send_message", "in") == 1
    assert realtime_events_total.value("receive_message", "out") == 2


@pytest.mark.anyio("asyncio")
async def test_send_message_to_empty_room_is_a_noop():
    relay = RealtimeRelay()
    [(alice, alice_ws)] = await _connect(relay, 1)

    await relay.dispatch(
        alice, parse_client_event({"type": "send_message", "roomId": "nobody", "text": "hi"})
    )

    assert alice_ws.of_type("receive_message") == []


@pytest.mark.anyio("asyncio")
async def test_join_voice_room_announces_peers():
    relay = RealtimeRelay()
    (alice, alice_ws), (bob, bob_ws), (carol, carol_ws) = await _connect(relay, 3)

    await relay.dispatch(alice, parse_client_event({"type": "join_voice_room", "roomId": 5}))
    await relay.dispatch(bob, parse_client_event({"type": "join_voice_room", "roomId": 5}))
    await relay.dispatch(carol, parse_client_event({"type": "join_voice_room", "roomId": "5"}))

    assert alice_ws.of_type("room_users") == [{"type": "room_users", "users": []}]
    assert carol_ws.of_type("room_users") == [{"type": "room_users", "users": [alice, bob]}]
    assert alice_ws.of_type("user_joined") == [
        {"type": "user_joined", "userId": bob},
        {"type": "user_joined", "userId": carol},
    ]
    assert bob_ws.of_type("user_joined") == [{"type": "user_joined", "userId": carol}]
    assert await relay.registry.members("voice_5") == [alice, bob, carol]


@pytest.mark.anyio("asyncio")
async def test_signal_is_delivered_to_target_only():
    relay = RealtimeRelay()
    (alice, alice_ws), (bob, bob_ws), (_, carol_ws) = await _connect(relay, 3)
    offer = {"type": "offer", "sdp": "v=0"}

    await relay.dispatch(alice, parse_client_event({"type": "signal", "to": bob, "signal": offer}))

    assert bob_ws.of_type("signal") == [{"type": "signal", "from": alice, "signal": offer}]
    assert alice_ws.of_type("signal") == []
    assert carol_ws.of_type("signal") == []


@pytest.mark.anyio("asyncio")
async def test_signal_to_unknown_session_is_dropped():
    relay = RealtimeRelay()
    [(alice, alice_ws)] = await _connect(relay, 1)

    await relay.signal(alice, "missing", {"candidate": "x"})

    assert alice_ws.of_type("signal") == []


@pytest.mark.anyio("asyncio")
async def test_ping_is_answered_with_pong():
    relay = RealtimeRelay()
    [(alice, alice_ws)] = await _connect(relay, 1)

    await relay.dispatch(alice, parse_client_event({"type": "ping"}))

    assert alice_ws.sent[-1] == {"type": "pong"}


@pytest.mark.anyio("asyncio")
async def test_disconnect_notifies_every_other_session_by_default():
    relay = RealtimeRelay(RoomPresenceRegistry())
    (alice, alice_ws), (bob, bob_ws), (_, carol_ws) = await _connect(relay, 3)
    await relay.join_chat(alice, "room-1")
    await relay.join_chat(bob, "room-1")

    await relay.disconnect(alice)

    notice = {"type": "user_disconnected", "userId": alice}
    assert bob_ws.of_type("user_disconnected") == [notice]
    assert carol_ws.of_type("user_disconnected") == [notice]
    assert alice_ws.of_type("user_disconnected") == []
    assert await relay.registry.members("room-1") == [bob]
    assert alice not in await relay.session_ids()
    assert realtime_connections.value("sessions") == 2


@pytest.mark.anyio("asyncio")
async def test_scoped_disconnect_only_reaches_shared_rooms():
    relay = RealtimeRelay(scoped_disconnect=True)
    (alice, _), (bob, bob_ws), (_, carol_ws) = await _connect(relay, 3)
    await relay.join_voice_room(alice, "9")
    await relay.join_voice_room(bob, "9")

    await relay.disconnect(alice)

    assert bob_ws.of_type("user_disconnected") == [{"type": "user_disconnected", "userId": alice}]
    assert carol_ws.of_type("user_disconnected") == []


@pytest.mark.anyio("asyncio")
async def test_disconnect_twice_is_harmless():
    relay = RealtimeRelay()
    (alice, _), (_, bob_ws) = await _connect(relay, 2)

    await relay.disconnect(alice)
    await relay.disconnect(alice)

    assert len(bob_ws.of_type("user_disconnected")) == 1


@pytest.mark.anyio("asyncio")
async def test_closed_sockets_do_not_break_fan_out():
    relay = RealtimeRelay()
    closed = ClosedWebSocket()
    closed_id = await relay.connect(closed)
    [(bob, bob_ws)] = await _connect(relay, 1)
    await relay.join_chat(closed_id, "room-1")
    await relay.join_chat(bob, "room-1")

    await relay.dispatch(
        bob, parse_client_event({"type": "send_message", "roomId": "room-1", "text": "still here"})
    )

    assert bob_ws.of_type("receive_message")[0]["text"] == "still here"
    assert closed.sent == []
