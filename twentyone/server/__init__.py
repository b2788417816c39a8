"""
Server side of the Twenty-One game: the hub and the transports it talks through.

This package translates between the room registry and connection
technologies (WebSocket, in-memory test transport).
"""

from twentyone.server.transport import ClientMessage, ServerMessage, Transport
from twentyone.server.dummy import DummyTransport
from twentyone.server.hub import GameHub
from twentyone.server.websocket import WebSocketServer, WebSocketTransport

__all__ = [
    "ClientMessage",
    "ServerMessage",
    "Transport",
    "DummyTransport",
    "GameHub",
    "WebSocketServer",
    "WebSocketTransport",
]
