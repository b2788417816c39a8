"""
Room registry for the Twenty-One server.

The registry maps a room identifier to a Room: one TwentyOneGame plus the
player-name to seat mapping for that room. It is shared by every inbound
event, so all of it is thread-safe:

- the registry's own mapping is guarded by one coarse lock held only for
  dictionary operations;
- each room carries its own lock, which callers hold while mutating that
  room's game so unrelated rooms never wait on each other.

Lock order: a room lock may be held while taking the registry lock, never the
other way round.
"""

import logging
import random
import threading
import time
from typing import Callable, Dict, List, Optional

from twentyone.engine.game import TwentyOneGame
from twentyone.events import EventBus, EventEmitter, EngineEventType
from twentyone.state.models import Seat

logger = logging.getLogger("twentyone.rooms")

MAX_PLAYERS = len(Seat)


class Room:
    """
    One room: its game, its occupants and its lock.

    Hold `lock` around any read or write of `game` or `seats`.
    """

    def __init__(self, room_id: str, game: TwentyOneGame):
        self.room_id = room_id
        self.game = game
        self.seats: Dict[str, Seat] = {}
        self.lock = threading.RLock()
        self.closed = False

    @property
    def is_empty(self) -> bool:
        return not self.seats

    def next_free_seat(self) -> Optional[Seat]:
        """First seat nobody holds, in seat order."""
        taken = set(self.seats.values())
        for seat in Seat:
            if seat not in taken:
                return seat
        return None

    def reseat(self) -> None:
        """Seat every recorded occupant in the game again, e.g. after a reset."""
        for name, seat in sorted(self.seats.items(), key=lambda item: item[1].value):
            self.game.add_player(name, seat)

    def restart(self) -> bool:
        """
        Reset the game in place, re-seat the known occupants and start a new
        round if both seats are filled.

        Returns:
            Whether a new round was started
        """
        self.game.reset()
        self.reseat()
        if self.game.can_start():
            return self.game.start()
        return False

    def __repr__(self) -> str:
        seats = {name: seat.name for name, seat in self.seats.items()}
        return f"Room({self.room_id!r}, seats={seats})"


class RoomRegistry:
    """
    Concurrency-safe mapping from room identifier to Room.

    The registry is created once and passed explicitly to whatever handles
    inbound events.
    """

    def __init__(
        self,
        game_factory: Optional[Callable[[str], TwentyOneGame]] = None,
        event_bus: Optional[EventEmitter] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize an empty registry.

        Args:
            game_factory: Builds the game for a new room (defaults to TwentyOneGame)
            event_bus: Emitter shared with the games this registry creates
            rng: Random source handed to default-built games
        """
        self.event_bus = event_bus or EventBus.get_instance()
        self._rng = rng
        self._game_factory = game_factory or self._default_game
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.Lock()

    def _default_game(self, room_id: str) -> TwentyOneGame:
        return TwentyOneGame(room_id, rng=self._rng, event_bus=self.event_bus)

    def get(self, room_id: str) -> Optional[Room]:
        with self._lock:
            return self._rooms.get(room_id)

    def get_or_create(self, room_id: str) -> Room:
        """
        Return the room, creating it with a fresh game on first use.
        """
        created = False
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                room = Room(room_id, self._game_factory(room_id))
                self._rooms[room_id] = room
                created = True

        if created:
            logger.info(f"Room {room_id!r} created")
            self.event_bus.emit(
                EngineEventType.ROOM_CREATED,
                {"room_id": room_id, "timestamp": time.time()},
            )
        return room

    def add_occupant(self, room_id: str, player_name: str) -> Optional[Seat]:
        """
        Seat a player in a room, creating the room if needed.

        The first name gets PLAYER1 and the second PLAYER2. A name that is
        already seated gets its existing seat back without being added twice.

        Args:
            room_id: Room to join
            player_name: Name of the joining player

        Returns:
            The player's seat, or None if the room is full
        """
        while True:
            room = self.get_or_create(room_id)
            with room.lock:
                if room.closed:
                    # Removed between lookup and lock; use its replacement
                    continue

                seat = room.seats.get(player_name)
                if seat is not None:
                    return seat

                seat = room.next_free_seat()
                if seat is None:
                    logger.info(f"Room {room_id!r} is full; rejected {player_name!r}")
                    return None

                room.seats[player_name] = seat
                room.game.add_player(player_name, seat)

            self.event_bus.emit(
                EngineEventType.PLAYER_JOINED,
                {
                    "room_id": room_id,
                    "player_name": player_name,
                    "seat": seat.name,
                    "timestamp": time.time(),
                },
            )
            return seat

    def seat_of(self, room_id: str, player_name: str) -> Optional[Seat]:
        """The seat a player holds in a room, or None."""
        room = self.get(room_id)
        if room is None:
            return None
        with room.lock:
            return room.seats.get(player_name)

    def occupants(self, room_id: str) -> Dict[str, Seat]:
        """A copy of the room's name to seat mapping (empty for unknown rooms)."""
        room = self.get(room_id)
        if room is None:
            return {}
        with room.lock:
            return dict(room.seats)

    def remove_occupant(self, room_id: str, player_name: str) -> bool:
        """
        Vacate a player's seat.

        An emptied room is removed. A room that still has a player is reset
        with the remaining occupant re-seated, since a round cannot continue
        with one seat empty.

        Returns:
            Whether the player was seated in the room
        """
        room = self.get(room_id)
        if room is None:
            return False

        with room.lock:
            if room.seats.pop(player_name, None) is None:
                return False

            if room.is_empty:
                self._discard(room)
            else:
                room.game.reset()
                room.reseat()

        self.event_bus.emit(
            EngineEventType.PLAYER_LEFT,
            {"room_id": room_id, "player_name": player_name, "timestamp": time.time()},
        )
        return True

    def remove(self, room_id: str) -> bool:
        """Remove a room entirely. Returns whether it existed."""
        room = self.get(room_id)
        if room is None:
            return False
        with room.lock:
            return self._discard(room)

    def room_ids(self) -> List[str]:
        with self._lock:
            return list(self._rooms)

    def _discard(self, room: Room) -> bool:
        """Drop a room from the mapping. Caller holds room.lock."""
        with self._lock:
            if self._rooms.get(room.room_id) is not room:
                return False
            del self._rooms[room.room_id]
        room.closed = True

        logger.info(f"Room {room.room_id!r} removed")
        self.event_bus.emit(
            EngineEventType.ROOM_REMOVED,
            {"room_id": room.room_id, "timestamp": time.time()},
        )
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    def __contains__(self, room_id: str) -> bool:
        with self._lock:
            return room_id in self._rooms
