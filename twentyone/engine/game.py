"""
Twenty-One game engine.

This module provides the TwentyOneGame class, the authoritative state machine
for one room: it owns the deck, both players' hands and the dealer's hand,
sequences turns and resolves the round. It performs no I/O; callers read its
state (usually through a projection) and hand the result to a transport.

A round moves through WAITING_FOR_PLAYERS -> DEALING -> PLAYER_TURN ->
DEALER_TURN -> FINISHED, and `reset` brings the same object back to
WAITING_FOR_PLAYERS.
"""

import logging
import random
import time
from typing import Dict, Optional

from twentyone.common.deck import Deck
from twentyone.common.hand import Hand
from twentyone.engine.resolution import resolve_outcome, summary_text as format_summary
from twentyone.events import EventBus, EventEmitter, EngineEventType
from twentyone.state.models import GameStatus, Outcome, PlayerAction, Seat

logger = logging.getLogger("twentyone.engine")

DEALER_STANDS_ON = 17


class TwentyOneGame:
    """
    State machine for a single two-seat Twenty-One table.

    Seating is first come first served, but the engine only enforces that a
    seat holds one name; choosing the seat is the caller's job.
    """

    def __init__(
        self,
        room_id: str = "",
        rng: Optional[random.Random] = None,
        event_bus: Optional[EventEmitter] = None,
    ):
        """
        Initialize the engine with a fresh shuffled deck and empty seats.

        Args:
            room_id: Identifier of the room this game belongs to
            rng: Random source for shuffling (optional, for reproducible tests)
            event_bus: Emitter for observability events (defaults to the EventBus)
        """
        self.room_id = room_id
        self.rng = rng or random.Random()
        self.event_bus = event_bus or EventBus.get_instance()

        # Number of times the Player1 -> dealer skip fired; stays 0 in normal play
        self.turn_skips = 0

        self.initialize()

        self.event_bus.emit(
            EngineEventType.GAME_CREATED,
            {"room_id": self.room_id, "timestamp": time.time()},
        )

    def initialize(self) -> None:
        """
        Reset every piece of state: fresh shuffled deck, no seats, empty hands.
        """
        self._deck = Deck(rng=self.rng)
        self._names: Dict[Seat, str] = {}
        self._hands: Dict[Seat, Hand] = {}
        self._dealer = Hand()
        self._status = GameStatus.WAITING_FOR_PLAYERS
        self._current_turn: Optional[Seat] = None
        self._outcomes: Dict[Seat, Outcome] = {}

        self.event_bus.emit(
            EngineEventType.SHUFFLE,
            {
                "room_id": self.room_id,
                "cards_remaining": self._deck.size,
                "timestamp": time.time(),
            },
        )

    def reset(self) -> None:
        """
        Reset the game for a new round.

        Seats are cleared too; the caller re-seats known occupants.
        """
        self.initialize()
        logger.info(f"Room {self.room_id!r} reset")
        self.event_bus.emit(
            EngineEventType.GAME_RESET,
            {"room_id": self.room_id, "timestamp": time.time()},
        )

    # ---- read-only state ----

    @property
    def status(self) -> GameStatus:
        return self._status

    @property
    def current_turn(self) -> Optional[Seat]:
        return self._current_turn

    @property
    def dealer(self) -> Hand:
        return self._dealer

    @property
    def deck(self) -> Deck:
        return self._deck

    @property
    def is_finished(self) -> bool:
        return self._status is GameStatus.FINISHED

    @property
    def players(self) -> Dict[Seat, str]:
        """Occupied seats mapped to player names."""
        return dict(self._names)

    def player(self, seat: Seat) -> Optional[Hand]:
        """The hand held in a seat, or None if the seat is empty."""
        return self._hands.get(seat)

    def player_name(self, seat: Seat) -> Optional[str]:
        return self._names.get(seat)

    # ---- seating ----

    def add_player(self, name: str, seat: Seat) -> bool:
        """
        Seat a player.

        Args:
            name: Name of the player
            seat: Seat to occupy

        Returns:
            False if the seat is held by a different name, True otherwise.
            Re-adding the same name to its own seat is a no-op.
        """
        occupant = self._names.get(seat)
        if occupant is not None:
            return occupant == name

        self._names[seat] = name
        self._hands[seat] = Hand()
        logger.info(f"{name!r} seated as {seat.name} in room {self.room_id!r}")
        return True

    def can_start(self) -> bool:
        """Both seats are occupied and the game is waiting for players."""
        return (
            Seat.PLAYER1 in self._names
            and Seat.PLAYER2 in self._names
            and self._status is GameStatus.WAITING_FOR_PLAYERS
        )

    # ---- round flow ----

    def start(self) -> bool:
        """
        Deal the opening cards and hand the turn to Player1.

        Each player gets two face-up cards (Player1 first), then the dealer
        gets one face-up card and one face-down hole card. All three naturals
        are settled before anyone acts, from face-up cards only, so the
        dealer cannot hold one while its hole card is down.

        Returns:
            False (and no change) if the round cannot start
        """
        if not self.can_start():
            return False

        self._status = GameStatus.DEALING
        self.event_bus.emit(
            EngineEventType.ROUND_STARTED,
            {
                "room_id": self.room_id,
                "players": {seat.name: name for seat, name in self._names.items()},
                "timestamp": time.time(),
            },
        )

        for seat in Seat:
            self._deal(seat)
            self._deal(seat)

        self._deal(None)
        self._deal(None, face_up=False)

        for hand in [self._hands[seat] for seat in Seat] + [self._dealer]:
            hand.natural = hand.is_two_card_21()

        self._status = GameStatus.PLAYER_TURN
        self._set_turn(Seat.PLAYER1)
        return True

    def process_action(self, seat: Seat, action: PlayerAction) -> bool:
        """
        Apply a player's Hit or Stand.

        A Hit that busts ends the player's turn immediately.

        Args:
            seat: Seat of the acting player
            action: Action to perform

        Returns:
            False (and no change) unless it is this seat's turn during
            PLAYER_TURN and the action is Hit or Stand
        """
        if (
            self._status is not GameStatus.PLAYER_TURN
            or seat is not self._current_turn
            or action not in (PlayerAction.HIT, PlayerAction.STAND)
        ):
            logger.info(
                f"Rejected {getattr(action, 'name', action)} from {getattr(seat, 'name', seat)} "
                f"in room {self.room_id!r} (status={self._status.name}, "
                f"turn={self._current_turn.name if self._current_turn else None})"
            )
            self.event_bus.emit(
                EngineEventType.ACTION_REJECTED,
                {
                    "room_id": self.room_id,
                    "seat": getattr(seat, "name", seat),
                    "action": getattr(action, "name", action),
                    "status": self._status.name,
                    "timestamp": time.time(),
                },
            )
            return False

        hand = self._hands[seat]
        self.event_bus.emit(
            EngineEventType.PLAYER_ACTION,
            {
                "room_id": self.room_id,
                "seat": seat.name,
                "player_name": self._names[seat],
                "action": action.name,
                "timestamp": time.time(),
            },
        )

        if action is PlayerAction.HIT:
            self._deal(seat)
            if hand.busted:
                self.event_bus.emit(
                    EngineEventType.HAND_BUSTED,
                    {
                        "room_id": self.room_id,
                        "seat": seat.name,
                        "player_name": self._names[seat],
                        "value": hand.value,
                        "timestamp": time.time(),
                    },
                )
                self._advance_turn()
        else:
            self._advance_turn()

        return True

    def outcomes(self) -> Dict[Seat, Outcome]:
        """Per-seat results of the finished round; empty before that."""
        return dict(self._outcomes)

    def summary_text(self) -> str:
        """The round summary once finished, otherwise an empty string."""
        if not self.is_finished:
            return ""
        return format_summary(
            (self._names[seat], self._outcomes[seat])
            for seat in Seat
            if seat in self._outcomes
        )

    # ---- internals ----

    def _deal(self, seat: Optional[Seat], face_up: bool = True) -> None:
        """Deal one card from the front of the deck to a seat, or the dealer when seat is None."""
        reshuffles = self._deck.reshuffle_count
        card = self._deck.deal(face_up=face_up)
        if self._deck.reshuffle_count != reshuffles:
            self.event_bus.emit(
                EngineEventType.SHUFFLE,
                {
                    "room_id": self.room_id,
                    "cards_remaining": self._deck.size,
                    "timestamp": time.time(),
                },
            )

        hand = self._dealer if seat is None else self._hands[seat]
        hand.add_card(card)

        logger.debug(
            f"Dealt {card if face_up else 'hole card'} to "
            f"{'dealer' if seat is None else seat.name} in room {self.room_id!r}"
        )
        self.event_bus.emit(
            EngineEventType.CARD_DEALT,
            {
                "room_id": self.room_id,
                "is_dealer": seat is None,
                "seat": seat.name if seat else None,
                "card": str(card) if face_up else "hidden",
                "is_hole_card": not face_up,
                "timestamp": time.time(),
            },
        )

    def _set_turn(self, seat: Seat) -> None:
        self._current_turn = seat
        self.event_bus.emit(
            EngineEventType.TURN_CHANGED,
            {
                "room_id": self.room_id,
                "seat": seat.name,
                "player_name": self._names[seat],
                "timestamp": time.time(),
            },
        )

    def _advance_turn(self) -> None:
        """
        Move the turn from Player1 to Player2, or from Player2 to the dealer.
        """
        if self._current_turn is Seat.PLAYER1:
            # Player2 cannot have acted yet under normal sequencing, so this
            # skip never fires in practice; it guards against reordered calls.
            if self._hands[Seat.PLAYER2].busted:
                self.turn_skips += 1
                logger.warning(
                    f"Player2 already busted in room {self.room_id!r}; skipping to dealer"
                )
                self._play_dealer_turn()
                return
            self._set_turn(Seat.PLAYER2)
        elif self._current_turn is Seat.PLAYER2:
            self._play_dealer_turn()

    def _play_dealer_turn(self) -> None:
        """
        Reveal the hole card, then draw until the dealer reaches 17 or busts.
        """
        self._status = GameStatus.DEALER_TURN
        self._current_turn = None

        flipped = self._dealer.reveal_all()
        self.event_bus.emit(
            EngineEventType.HOLE_CARD_REVEALED,
            {
                "room_id": self.room_id,
                "cards_flipped": flipped,
                "dealer_cards": [str(card) for card in self._dealer.cards],
                "dealer_value": self._dealer.value,
                "dealer_natural": self._dealer.natural,
                "timestamp": time.time(),
            },
        )

        while self._dealer.value < DEALER_STANDS_ON and not self._dealer.busted:
            self._deal(None)
            self.event_bus.emit(
                EngineEventType.DEALER_ACTION,
                {
                    "room_id": self.room_id,
                    "action": "HIT",
                    "dealer_value": self._dealer.value,
                    "timestamp": time.time(),
                },
            )

        self._finish()

    def _finish(self) -> None:
        """Resolve every seat against the dealer and finish the round."""
        self._status = GameStatus.FINISHED
        self._outcomes = {
            seat: resolve_outcome(self._hands[seat], self._dealer) for seat in Seat
        }

        for seat, outcome in self._outcomes.items():
            self.event_bus.emit(
                EngineEventType.HAND_RESULT,
                {
                    "room_id": self.room_id,
                    "seat": seat.name,
                    "player_name": self._names[seat],
                    "value": self._hands[seat].value,
                    "result": outcome.name,
                    "timestamp": time.time(),
                },
            )

        summary = self.summary_text()
        logger.info(f"Round finished in room {self.room_id!r}: {summary}")
        self.event_bus.emit(
            EngineEventType.ROUND_ENDED,
            {
                "room_id": self.room_id,
                "dealer_value": self._dealer.value,
                "summary": summary,
                "timestamp": time.time(),
            },
        )
