"""
WebSocket transport and server for the Twenty-One server.

This module connects the hub to real clients over WebSockets using the
`websockets` library. Frames are JSON text:

- inbound:  {"type": <ClientMessage>, "data": {...}}
- outbound: {"type": <ServerMessage>, "data": {...}, "timestamp": <float>}
"""

import asyncio
import json
import logging
import signal
import time
import uuid
from collections import defaultdict
from typing import Any, Dict, Optional, Set

import websockets
from websockets.exceptions import ConnectionClosed

from twentyone.config import ServerConfig
from twentyone.rooms import RoomRegistry
from twentyone.server.hub import GameHub
from twentyone.server.transport import ClientMessage, ServerMessage, Transport

# Setup logging
logger = logging.getLogger("twentyone.server.websocket")

ERR_MALFORMED = "Malformed message."


def encode_message(message_type: str, data: Dict[str, Any]) -> str:
    """Serialize an outbound message to a JSON text frame."""
    return json.dumps({"type": message_type, "data": data, "timestamp": time.time()})


class WebSocketTransport(Transport):
    """
    Transport over live WebSocket connections.

    Tracks connections by id and group (room) membership. A failed send to
    one connection is logged and does not affect the others.
    """

    def __init__(self):
        self.connections: Dict[str, Any] = {}
        self.groups: Dict[str, Set[str]] = defaultdict(set)

    def register(self, connection_id: str, websocket: Any) -> None:
        self.connections[connection_id] = websocket

    def unregister(self, connection_id: str) -> None:
        self.connections.pop(connection_id, None)
        for group in list(self.groups):
            members = self.groups[group]
            members.discard(connection_id)
            if not members:
                del self.groups[group]

    async def send(
        self, connection_id: str, message_type: str, data: Dict[str, Any]
    ) -> bool:
        websocket = self.connections.get(connection_id)
        if websocket is None:
            logger.debug(f"Dropping {message_type} for unknown connection {connection_id}")
            return False

        try:
            await websocket.send(encode_message(message_type, data))
            return True
        except ConnectionClosed:
            logger.info(f"Connection {connection_id} closed before {message_type} was sent")
        except Exception as e:
            logger.warning(f"Error sending message to client {connection_id}: {e}")
        return False

    async def broadcast(
        self, group: str, message_type: str, data: Dict[str, Any]
    ) -> int:
        count = 0
        for connection_id in list(self.groups.get(group, ())):
            if await self.send(connection_id, message_type, data):
                count += 1
        return count

    async def add_to_group(self, connection_id: str, group: str) -> None:
        self.groups[group].add(connection_id)

    async def remove_from_group(self, connection_id: str, group: str) -> None:
        members = self.groups.get(group)
        if members is not None:
            members.discard(connection_id)
            if not members:
                del self.groups[group]

    async def shutdown(self) -> None:
        """Close every open connection."""
        for connection_id, websocket in list(self.connections.items()):
            try:
                await websocket.close()
            except Exception as e:
                logger.warning(f"Error closing client {connection_id}: {e}")
        self.connections.clear()
        self.groups.clear()


class WebSocketServer:
    """
    WebSocket server for the Twenty-One hub.

    Each accepted connection gets a generated id, a `connected` frame, and then
    every frame it sends is routed through the hub.
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        hub: Optional[GameHub] = None,
        transport: Optional[WebSocketTransport] = None,
    ):
        """
        Initialize the WebSocket server.

        Args:
            config: Server configuration
            hub: Hub to route messages to (built from the config if omitted)
            transport: Transport the hub sends through (built if omitted)
        """
        self.config = config or ServerConfig()
        self.transport = transport or WebSocketTransport()
        self.hub = hub or GameHub(
            RoomRegistry(),
            self.transport,
            remove_on_disconnect=self.config.remove_on_disconnect,
        )
        self.server = None
        self._stop: Optional[asyncio.Future] = None

    async def start(self) -> None:
        """Start listening."""
        await self.transport.initialize()
        self.server = await websockets.serve(
            self.handle_client, self.config.host, self.config.port
        )
        logger.info(
            f"WebSocket server started on ws://{self.config.host}:{self.config.port}"
        )

    async def run(self) -> None:
        """Start the server and block until SIGINT/SIGTERM or `stop()`."""
        loop = asyncio.get_running_loop()
        self._stop = loop.create_future()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.stop)
            except NotImplementedError:
                # Signal handlers are unavailable on some platforms
                pass

        await self.start()
        try:
            await self._stop
        finally:
            await self.shutdown()

    def stop(self) -> None:
        if self._stop is not None and not self._stop.done():
            self._stop.set_result(None)

    async def shutdown(self) -> None:
        """Close the listening socket and every open connection."""
        if self.server is None:
            return
        logger.info("Shutting down WebSocket server...")
        await self.transport.shutdown()
        self.server.close()
        await self.server.wait_closed()
        self.server = None

    async def handle_client(self, websocket) -> None:
        """
        Serve one WebSocket connection until it closes.

        Args:
            websocket: WebSocket connection
        """
        connection_id = str(uuid.uuid4())
        self.transport.register(connection_id, websocket)
        logger.info(f"Client {connection_id} connected")
        await self.transport.send(
            connection_id, ServerMessage.CONNECTED, {"connection_id": connection_id}
        )

        try:
            async for raw in websocket:
                await self.handle_message(connection_id, raw)
        except ConnectionClosed:
            pass
        finally:
            await self.hub.on_disconnect(connection_id)
            self.transport.unregister(connection_id)
            logger.info(f"Client {connection_id} disconnected")

    async def handle_message(self, connection_id: str, raw: Any) -> None:
        """
        Decode one frame and route it. Bad frames get an error reply.
        """
        try:
            message = json.loads(raw)
        except (TypeError, ValueError):
            message = None

        if not isinstance(message, dict) or not isinstance(message.get("type"), str):
            logger.warning(f"Malformed message from client {connection_id}")
            await self.transport.send(
                connection_id, ServerMessage.ERROR, {"message": ERR_MALFORMED}
            )
            return

        message_type = message["type"]
        if message_type == ClientMessage.HEARTBEAT:
            await self.transport.send(
                connection_id, ServerMessage.HEARTBEAT, {"timestamp": time.time()}
            )
            return

        await self.hub.dispatch(connection_id, message_type, message.get("data"))
