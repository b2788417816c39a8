"""
This module defines the `Suit`, `Rank`, and `Card` classes, which are used to represent playing cards.

- `Suit`: An enum representing the four suits of a standard deck of playing
cards, in canonical deck order: Hearts, Diamonds, Clubs, and Spades.

- `Rank`: An enum representing the thirteen ranks of a standard deck of playing
cards, with ordinals Ace (1) through King (13).

- `Card`: A class representing a playing card. A card has a suit, a rank and a
face-up flag. Suit and rank never change once a card is dealt; only the
face-up flag may be flipped (the dealer's hole card).

This module is part of the `twentyone` package, a two-player Twenty-One game server.
"""

from enum import Enum, unique


@unique
class Suit(Enum):
    """
    Enum for suits in a card deck.
    """

    HEARTS = "♥"
    DIAMONDS = "♦"
    CLUBS = "♣"
    SPADES = "♠"

    def __str__(self) -> str:
        return self.value


@unique
class Rank(Enum):
    """
    Enum for ranks in a card deck, valued by ordinal.
    """

    ACE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13

    @property
    def base_value(self) -> int:
        """The scoring value of the rank with an Ace counted as 1."""
        match self:
            case Rank.JACK | Rank.QUEEN | Rank.KING:
                return 10
            case _:
                return self.value

    @property
    def rank_str(self) -> str:
        """A string representation of the rank."""
        if self in (Rank.ACE, Rank.JACK, Rank.QUEEN, Rank.KING):
            return self.name[0]
        return str(self.value)

    def __str__(self) -> str:
        return self.rank_str


class Card:
    """
    Class representing a playing card. This class is a member of a card deck.

    >>> card = Card(Suit.HEARTS, Rank.TWO)
    >>> print(card)
    2 of ♥
    >>> card.face_up
    True
    """

    __slots__ = ("suit", "rank", "face_up")

    def __init__(self, suit: Suit, rank: Rank, face_up: bool = True):
        """
        Initialize a Card instance.

        :param suit: Suit of the card (one of the Suit enums)
        :param rank: Rank of the card (one of the Rank enums)
        :param face_up: Whether the card is visible to the table
        """
        if not isinstance(suit, Suit):
            raise TypeError(f"Invalid suit: {suit}")
        if not isinstance(rank, Rank):
            raise TypeError(f"Invalid rank: {rank}")
        self.suit = suit
        self.rank = rank
        self.face_up = face_up

    def copy(self) -> "Card":
        """Return an independent copy of this card, face-up flag included."""
        return Card(self.suit, self.rank, self.face_up)

    def __eq__(self, other):
        """
        Checks if this card is equal to another card.

        The face-up flag is not part of a card's identity.

        :param other: The other card to compare to.
        :return: True if the cards have the same rank and suit, False otherwise.
        """
        if isinstance(other, Card):
            return self.rank == other.rank and self.suit == other.suit
        return NotImplemented

    def __hash__(self):
        return hash((self.suit, self.rank))

    def __repr__(self) -> str:
        """
        Provide a machine-readable representation of the card.

        :return: A string representation of the card.
        """
        if self.face_up:
            return f"Card(Suit.{self.suit.name}, Rank.{self.rank.name})"
        return f"Card(Suit.{self.suit.name}, Rank.{self.rank.name}, face_up=False)"

    def __str__(self) -> str:
        """
        Provide a human-readable representation of the card.

        :return: A string representation of the card.
        """
        return f"{self.rank.rank_str} of {self.suit}"
