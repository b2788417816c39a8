"""
Tests for the WebSocket transport and server.
"""

import json
import random
from unittest.mock import AsyncMock, MagicMock

import pytest
import websockets
from websockets.exceptions import ConnectionClosed

from twentyone.config import ServerConfig
from twentyone.events import EventEmitter
from twentyone.rooms import RoomRegistry
from twentyone.server import GameHub, ServerMessage, WebSocketServer, WebSocketTransport
from twentyone.server.websocket import ERR_MALFORMED, encode_message


class FakeWebSocket:
    """Minimal stand-in for a server-side connection: yields frames, records sends."""

    def __init__(self, frames=()):
        self.frames = list(frames)
        self.send = AsyncMock()

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self.frames:
            raise StopAsyncIteration
        return self.frames.pop(0)

    def sent_messages(self):
        return [json.loads(call.args[0]) for call in self.send.call_args_list]


@pytest.fixture
def server():
    transport = WebSocketTransport()
    hub = GameHub(RoomRegistry(event_bus=EventEmitter(), rng=random.Random(4)), transport)
    return WebSocketServer(ServerConfig(host="127.0.0.1", port=0), hub=hub, transport=transport)


def test_encode_message():
    frame = json.loads(encode_message("error", {"message": "nope"}))
    assert frame["type"] == "error"
    assert frame["data"] == {"message": "nope"}
    assert isinstance(frame["timestamp"], float)


@pytest.mark.asyncio
async def test_send_to_unknown_connection():
    transport = WebSocketTransport()
    assert not await transport.send("ghost", ServerMessage.ERROR, {})


@pytest.mark.asyncio
async def test_send_failure_does_not_stop_broadcast():
    transport = WebSocketTransport()
    broken = MagicMock()
    broken.send = AsyncMock(side_effect=ConnectionClosed(None, None))
    healthy = FakeWebSocket()
    transport.register("broken", broken)
    transport.register("healthy", healthy)
    await transport.add_to_group("broken", "table")
    await transport.add_to_group("healthy", "table")

    count = await transport.broadcast("table", ServerMessage.TURN_NOTICE, {"player_name": "alice"})

    assert count == 1
    assert healthy.sent_messages()[0]["data"] == {"player_name": "alice"}


@pytest.mark.asyncio
async def test_unregister_leaves_groups():
    transport = WebSocketTransport()
    transport.register("c1", FakeWebSocket())
    transport.register("c2", FakeWebSocket())
    await transport.add_to_group("c1", "table")
    await transport.add_to_group("c2", "table")

    transport.unregister("c1")
    assert transport.groups["table"] == {"c2"}
    transport.unregister("c2")
    assert "table" not in transport.groups
    assert transport.connections == {}


@pytest.mark.asyncio
async def test_transport_shutdown_closes_connections():
    transport = WebSocketTransport()
    first, second = FakeWebSocket(), FakeWebSocket()
    first.close = AsyncMock()
    second.close = AsyncMock(side_effect=RuntimeError("already gone"))
    transport.register("c1", first)
    transport.register("c2", second)
    await transport.add_to_group("c1", "table")

    await transport.shutdown()

    first.close.assert_awaited_once()
    second.close.assert_awaited_once()
    assert transport.connections == {}
    assert transport.groups == {}


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", ["not json", "[1, 2]", '{"data": {}}', '{"type": 5}'])
async def test_malformed_frames_get_error(server, raw):
    websocket = FakeWebSocket()
    server.transport.register("c1", websocket)

    await server.handle_message("c1", raw)

    messages = websocket.sent_messages()
    assert [m["type"] for m in messages] == [ServerMessage.ERROR]
    assert messages[0]["data"] == {"message": ERR_MALFORMED}


@pytest.mark.asyncio
async def test_heartbeat_is_answered(server):
    websocket = FakeWebSocket()
    server.transport.register("c1", websocket)

    await server.handle_message("c1", json.dumps({"type": "heartbeat", "data": {}}))

    assert [m["type"] for m in websocket.sent_messages()] == [ServerMessage.HEARTBEAT]


@pytest.mark.asyncio
async def test_frames_are_dispatched_to_hub(server):
    server.hub.dispatch = AsyncMock()
    frame = {"type": "join_room", "data": {"room_id": "table", "player_name": "alice"}}

    await server.handle_message("c1", json.dumps(frame))

    server.hub.dispatch.assert_awaited_once_with("c1", "join_room", frame["data"])


@pytest.mark.asyncio
async def test_handle_client_lifecycle(server):
    join = {"type": "join_room", "data": {"room_id": "table", "player_name": "alice"}}
    websocket = FakeWebSocket([json.dumps(join)])

    await server.handle_client(websocket)

    types = [m["type"] for m in websocket.sent_messages()]
    assert types == [
        ServerMessage.CONNECTED,
        ServerMessage.PLAYER_JOINED,
        ServerMessage.STATE_UPDATED,
    ]
    connection_id = websocket.sent_messages()[0]["data"]["connection_id"]
    # after the socket closes the connection is forgotten, the seat is kept
    assert server.transport.connections == {}
    assert server.hub.connection_for("table", "alice") is None
    assert connection_id
    assert list(server.hub.registry.occupants("table")) == ["alice"]


@pytest.mark.asyncio
async def test_end_to_end_round_over_websockets(server):
    server.transport.initialize = AsyncMock()
    await server.start()
    server.transport.initialize.assert_awaited_once()
    try:
        port = list(server.server.sockets)[0].getsockname()[1]
        uri = f"ws://127.0.0.1:{port}"

        async with websockets.connect(uri) as alice, websockets.connect(uri) as bob:
            for client in (alice, bob):
                hello = json.loads(await client.recv())
                assert hello["type"] == ServerMessage.CONNECTED

            await alice.send(json.dumps(
                {"type": "join_room", "data": {"room_id": "table", "player_name": "alice"}}
            ))
            assert json.loads(await alice.recv())["type"] == ServerMessage.PLAYER_JOINED
            assert json.loads(await alice.recv())["type"] == ServerMessage.STATE_UPDATED

            await bob.send(json.dumps(
                {"type": "join_room", "data": {"room_id": "table", "player_name": "bob"}}
            ))
            bob_types = [json.loads(await bob.recv())["type"] for _ in range(4)]
            assert bob_types == [
                ServerMessage.PLAYER_JOINED,
                ServerMessage.STATE_UPDATED,
                ServerMessage.STATE_UPDATED,
                ServerMessage.TURN_NOTICE,
            ]

            await bob.send(json.dumps(
                {"type": "submit_action", "data": {"room_id": "table", "player_name": "bob", "action": "hit"}}
            ))
            reply = json.loads(await bob.recv())
            assert reply["type"] == ServerMessage.ERROR
            assert reply["data"]["message"].startswith("Invalid action.")
    finally:
        await server.shutdown()
    assert server.server is None
    assert server.transport.connections == {}
