"""
Game hub for the Twenty-One server.

The hub turns inbound requests (join, action, restart, disconnect) into room
mutations and fans the results out through a Transport. It owns the
connection <-> player bookkeeping; game rules live in the engine and seat
bookkeeping lives in the registry.

Every room mutation and the projections that follow it are computed while the
room's lock is held. Delivery happens after the lock is released.
"""

import logging
import threading
from typing import Any, Dict, List, Optional, Set, Tuple

from twentyone.rooms import Room, RoomRegistry
from twentyone.server.transport import ClientMessage, ServerMessage, Transport
from twentyone.state import GameStatus, PlayerAction, project_for

logger = logging.getLogger("twentyone.server.hub")

ERR_IDENTIFIERS_REQUIRED = "Room ID and player name are required."
ERR_ROOM_ID_REQUIRED = "Room ID is required."
ERR_ROOM_FULL = "Room is full. Maximum 2 players allowed."
ERR_INVALID_ACTION = (
    "Invalid action. It may not be your turn or the game is not in progress."
)
ERR_ROOM_NOT_FOUND = "Room not found."
ERR_UNKNOWN_MESSAGE = "Unknown message type."

# (connection_id, message_type, data)
Delivery = Tuple[str, str, Dict[str, Any]]


def _clean(value: Any) -> str:
    """Strip an identifier; anything that is not a string counts as empty."""
    return value.strip() if isinstance(value, str) else ""


class GameHub:
    """
    Routes inbound events to rooms and sends personalized state back out.
    """

    def __init__(
        self,
        registry: RoomRegistry,
        transport: Transport,
        remove_on_disconnect: bool = False,
    ):
        """
        Initialize the hub.

        Args:
            registry: Room registry shared by all handlers
            transport: Transport used for every outbound message
            remove_on_disconnect: Vacate a player's seat when their connection drops

        With remove_on_disconnect off, seats outlive their connections so a
        player can re-join by name, and a room whose players have all gone
        stays in the registry until the process exits.
        """
        self.registry = registry
        self.transport = transport
        self.remove_on_disconnect = remove_on_disconnect

        # One connection may speak for several (room, name) pairs
        self._connection_to_player: Dict[str, Set[Tuple[str, str]]] = {}
        self._player_to_connection: Dict[Tuple[str, str], str] = {}
        self._connection_lock = threading.RLock()

    # ---- inbound ----

    async def dispatch(
        self, connection_id: str, message_type: str, data: Optional[Dict[str, Any]]
    ) -> None:
        """
        Route a decoded client message to its handler.

        Args:
            connection_id: Connection the message came from
            message_type: One of the ClientMessage names
            data: Message payload
        """
        data = data if isinstance(data, dict) else {}

        if message_type == ClientMessage.JOIN_ROOM:
            await self.join_room(
                connection_id, data.get("room_id"), data.get("player_name")
            )
        elif message_type == ClientMessage.SUBMIT_ACTION:
            await self.submit_action(
                connection_id,
                data.get("room_id"),
                data.get("player_name"),
                data.get("action"),
            )
        elif message_type == ClientMessage.RESTART_ROOM:
            await self.restart_room(connection_id, data.get("room_id"))
        else:
            logger.warning(
                f"Unknown message type from connection {connection_id}: {message_type}"
            )
            await self._error(connection_id, ERR_UNKNOWN_MESSAGE)

    async def join_room(
        self, connection_id: str, room_id: Any, player_name: Any
    ) -> Optional[str]:
        """
        Seat a player in a room and start the round once both seats are taken.

        Returns:
            The seat name on success, None if the join was rejected
        """
        room_id, player_name = _clean(room_id), _clean(player_name)
        if not room_id or not player_name:
            await self._error(connection_id, ERR_IDENTIFIERS_REQUIRED)
            return None

        seat = self.registry.add_occupant(room_id, player_name)
        if seat is None:
            await self._error(connection_id, ERR_ROOM_FULL)
            return None

        self._bind(connection_id, room_id, player_name)
        await self.transport.add_to_group(connection_id, room_id)
        logger.info(f"{player_name!r} joined room {room_id!r} as {seat.name}")

        room = self.registry.get_or_create(room_id)
        with room.lock:
            own_state = project_for(room.game, player_name).to_dict()
            started = room.game.can_start() and room.game.start()
            deliveries = self._state_deliveries(room) if started else []
            turn_name = self._current_player(room)

        await self.transport.broadcast(
            room_id,
            ServerMessage.PLAYER_JOINED,
            {"player_name": player_name, "seat": seat.name},
        )
        await self.transport.send(
            connection_id, ServerMessage.STATE_UPDATED, {"state": own_state}
        )
        if started:
            await self._deliver(deliveries)
            await self._turn_notice(room_id, turn_name)
        return seat.name

    async def submit_action(
        self, connection_id: str, room_id: Any, player_name: Any, action: Any
    ) -> bool:
        """
        Apply a player's Hit or Stand and broadcast the result.

        Returns:
            Whether the action was accepted
        """
        room_id, player_name = _clean(room_id), _clean(player_name)
        if not room_id or not player_name:
            await self._error(connection_id, ERR_IDENTIFIERS_REQUIRED)
            return False

        parsed = PlayerAction.parse(action)
        room = self.registry.get(room_id)
        if parsed is None or room is None:
            await self._error(connection_id, ERR_INVALID_ACTION)
            return False

        with room.lock:
            seat = room.seats.get(player_name)
            accepted = seat is not None and room.game.process_action(seat, parsed)
            if accepted:
                deliveries = self._state_deliveries(room)
                finished = room.game.is_finished
                summary = room.game.summary_text()
                if finished:
                    deliveries += self._state_deliveries(
                        room, ServerMessage.ROUND_ENDED, summary=summary
                    )
                turn_name = self._current_player(room)

        if not accepted:
            await self._error(connection_id, ERR_INVALID_ACTION)
            return False

        await self._deliver(deliveries)
        if finished:
            logger.info(f"Round ended in room {room_id!r}: {summary}")
        else:
            await self._turn_notice(room_id, turn_name)
        return True

    async def restart_room(self, connection_id: str, room_id: Any) -> bool:
        """
        Reset a room's game, re-seat its occupants and deal a new round.

        Returns:
            Whether the room existed
        """
        room_id = _clean(room_id)
        if not room_id:
            await self._error(connection_id, ERR_ROOM_ID_REQUIRED)
            return False

        room = self.registry.get(room_id)
        if room is None:
            await self._error(connection_id, ERR_ROOM_NOT_FOUND)
            return False

        with room.lock:
            room.restart()
            deliveries = self._state_deliveries(room)
            turn_name = self._current_player(room)

        logger.info(f"Room {room_id!r} restarted")
        await self._deliver(deliveries)
        await self._turn_notice(room_id, turn_name)
        return True

    async def on_disconnect(self, connection_id: str) -> None:
        """
        Forget a dropped connection.

        The seat is kept for a re-join by name unless the hub was configured
        with remove_on_disconnect.
        """
        with self._connection_lock:
            bindings = self._connection_to_player.pop(connection_id, set())
            for binding in bindings:
                if self._player_to_connection.get(binding) == connection_id:
                    del self._player_to_connection[binding]

        for room_id, player_name in sorted(bindings):
            await self.transport.remove_from_group(connection_id, room_id)
            logger.info(
                f"Connection {connection_id} for {player_name!r} in {room_id!r} closed"
            )
            if self.remove_on_disconnect:
                await self._vacate(room_id, player_name)

    async def _vacate(self, room_id: str, player_name: str) -> None:
        """Free a seat and show the remaining player the reset room."""
        if not self.registry.remove_occupant(room_id, player_name):
            return

        room = self.registry.get(room_id)
        if room is None:
            return
        with room.lock:
            deliveries = self._state_deliveries(room)
        await self._deliver(deliveries)

    def connection_for(self, room_id: str, player_name: str) -> Optional[str]:
        """The live connection of a seated player, if any."""
        with self._connection_lock:
            return self._player_to_connection.get((room_id, player_name))

    # ---- helpers ----

    def _bind(self, connection_id: str, room_id: str, player_name: str) -> None:
        """Record which player a connection speaks for; a re-join replaces the old connection."""
        key = (room_id, player_name)
        with self._connection_lock:
            old = self._player_to_connection.get(key)
            if old is not None and old != connection_id:
                old_bindings = self._connection_to_player.get(old, set())
                old_bindings.discard(key)
                if not old_bindings:
                    self._connection_to_player.pop(old, None)
            self._connection_to_player.setdefault(connection_id, set()).add(key)
            self._player_to_connection[key] = connection_id

    def _state_deliveries(
        self,
        room: Room,
        message_type: str = ServerMessage.STATE_UPDATED,
        summary: Optional[str] = None,
    ) -> List[Delivery]:
        """
        Build one personalized message per connected seated player.

        Caller holds room.lock.
        """
        deliveries = []
        for player_name in room.seats:
            connection_id = self.connection_for(room.room_id, player_name)
            if connection_id is None:
                continue
            data = {"state": project_for(room.game, player_name).to_dict()}
            if summary is not None:
                data["summary"] = summary
            deliveries.append((connection_id, message_type, data))
        return deliveries

    @staticmethod
    def _current_player(room: Room) -> Optional[str]:
        game = room.game
        if game.status is not GameStatus.PLAYER_TURN or game.current_turn is None:
            return None
        return game.player_name(game.current_turn)

    async def _deliver(self, deliveries: List[Delivery]) -> None:
        for connection_id, message_type, data in deliveries:
            await self.transport.send(connection_id, message_type, data)

    async def _turn_notice(self, room_id: str, player_name: Optional[str]) -> None:
        if player_name is not None:
            await self.transport.broadcast(
                room_id, ServerMessage.TURN_NOTICE, {"player_name": player_name}
            )

    async def _error(self, connection_id: str, message: str) -> None:
        logger.info(f"Error to connection {connection_id}: {message}")
        await self.transport.send(connection_id, ServerMessage.ERROR, {"message": message})
