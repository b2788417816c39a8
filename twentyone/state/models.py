"""
State models for the Twenty-One server.

This module provides the enums that tag game state (status, seats, actions,
outcomes) and the frozen dataclasses used for recipient-specific snapshots.
Snapshots are value copies: they never alias the engine's mutable cards or
hands, so they can be serialized while the engine keeps changing.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional
from enum import Enum, auto

from twentyone.common.card import Rank, Suit


class GameStatus(Enum):
    """
    Possible stages of a Twenty-One round.
    """

    WAITING_FOR_PLAYERS = auto()
    DEALING = auto()
    PLAYER_TURN = auto()
    DEALER_TURN = auto()
    FINISHED = auto()


class Seat(Enum):
    """A fixed player slot within one room."""

    PLAYER1 = auto()
    PLAYER2 = auto()


class PlayerAction(Enum):
    """Actions a player can take during their turn."""

    NONE = "none"
    HIT = "hit"
    STAND = "stand"

    @classmethod
    def parse(cls, value: Any) -> Optional["PlayerAction"]:
        """Parse an action from an enum, its value or its name; None if unknown."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        text = value.strip().lower()
        for action in cls:
            if action.value == text:
                return action
        return None


class Outcome(Enum):
    """Per-player round outcome, valued by its display text."""

    NATURAL_WIN = "Wins (Natural Blackjack!)"
    BUSTED = "Loses (Busted)"
    DEALER_BUSTED = "Wins (Dealer Busted)"
    WIN = "Wins"
    LOSE = "Loses"
    PUSH = "Push (Tie)"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class CardView:
    """
    Immutable view of a single card as seen by one recipient.

    Attributes:
        suit: Suit of the card
        rank: Rank of the card
        face_up: Whether the recipient may treat the card as visible
    """

    suit: Suit
    rank: Rank
    face_up: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"suit": self.suit.name, "rank": self.rank.name, "face_up": self.face_up}


@dataclass(frozen=True)
class PlayerView:
    """
    Immutable view of a player's (or the dealer's) hand.

    Attributes:
        name: Display name of the hand's owner
        seat: Seat of the owner, None for the dealer
        hand: Cards in deal order
        value: Visible hand value
        busted: Whether the hand is over 21
        natural: Whether the hand was dealt a natural
    """

    name: str
    seat: Optional[Seat] = None
    hand: List[CardView] = field(default_factory=list)
    value: int = 0
    busted: bool = False
    natural: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "seat": self.seat.name if self.seat else None,
            "hand": [card.to_dict() for card in self.hand],
            "value": self.value,
            "busted": self.busted,
            "natural": self.natural,
        }


@dataclass(frozen=True)
class GameSnapshot:
    """
    Immutable representation of the game as seen by one recipient.

    Attributes:
        room_id: Room the game belongs to
        status: Current stage of the round
        player1: View of the first seat, if occupied
        player2: View of the second seat, if occupied
        dealer: View of the dealer's hand
        current_turn: Seat whose turn it is, only during PLAYER_TURN
        winner_message: Round summary once finished, otherwise empty
        is_game_over: Whether the round is finished
    """

    room_id: str
    status: GameStatus
    dealer: PlayerView
    player1: Optional[PlayerView] = None
    player2: Optional[PlayerView] = None
    current_turn: Optional[Seat] = None
    winner_message: str = ""
    is_game_over: bool = False

    def player(self, seat: Seat) -> Optional[PlayerView]:
        return self.player1 if seat is Seat.PLAYER1 else self.player2

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the snapshot to a dictionary suitable for JSON serialization.

        Returns:
            Dictionary representation of the snapshot
        """
        return {
            "room_id": self.room_id,
            "status": self.status.name,
            "player1": self.player1.to_dict() if self.player1 else None,
            "player2": self.player2.to_dict() if self.player2 else None,
            "dealer": self.dealer.to_dict(),
            "current_turn": self.current_turn.name if self.current_turn else None,
            "winner_message": self.winner_message,
            "is_game_over": self.is_game_over,
        }
