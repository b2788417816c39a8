"""
Transport interface for the Twenty-One server.

This module defines the boundary between the hub and whatever actually moves
messages (WebSocket, in-memory test double, ...). A transport delivers named
messages either to one connection or to every connection in a room group.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class ClientMessage:
    """Message types that clients can send to the server."""

    JOIN_ROOM = "join_room"
    SUBMIT_ACTION = "submit_action"
    RESTART_ROOM = "restart_room"
    HEARTBEAT = "heartbeat"


class ServerMessage:
    """Message types that the server can send to clients."""

    CONNECTED = "connected"
    STATE_UPDATED = "state_updated"
    PLAYER_JOINED = "player_joined"
    ROUND_ENDED = "round_ended"
    TURN_NOTICE = "turn_notice"
    ERROR = "error"
    HEARTBEAT = "heartbeat"


class Transport(ABC):
    """
    Base interface for message transports.

    Implementations bridge the platform-agnostic hub and a concrete
    connection technology. Sending to a connection that is gone is not an
    error: the transport logs it and reports False.
    """

    @abstractmethod
    async def send(
        self, connection_id: str, message_type: str, data: Dict[str, Any]
    ) -> bool:
        """
        Send a message to one connection.

        Args:
            connection_id: Target connection
            message_type: One of the ServerMessage names
            data: Message payload

        Returns:
            Whether the message was handed to the connection
        """
        pass

    @abstractmethod
    async def broadcast(
        self, group: str, message_type: str, data: Dict[str, Any]
    ) -> int:
        """
        Send a message to every connection in a group.

        Returns:
            Number of connections the message was sent to
        """
        pass

    @abstractmethod
    async def add_to_group(self, connection_id: str, group: str) -> None:
        """Add a connection to a group."""
        pass

    @abstractmethod
    async def remove_from_group(self, connection_id: str, group: str) -> None:
        """Remove a connection from a group."""
        pass

    # The following methods have default implementations but can be overridden

    async def initialize(self) -> None:
        """Set up resources before the first message."""
        pass

    async def shutdown(self) -> None:
        """Release resources."""
        pass
