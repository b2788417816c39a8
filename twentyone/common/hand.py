"""
This module contains the Hand class used for both players and the dealer.

A hand keeps its cards in deal order. Its value is recomputed after every
change and only counts face-up cards, so a face-down hole card contributes
nothing until it is flipped.
"""

from typing import List

from twentyone.common.card import Card, Rank


def hand_value(cards: List[Card]) -> int:
    """
    Calculate the best value of the face-up cards.

    Aces count as 1, then each Ace is upgraded to 11 while that keeps the
    total at or below 21. If even all-Aces-as-1 busts, the minimal total is
    returned.
    """
    value = 0
    num_aces = 0
    for card in cards:
        if not card.face_up:
            continue
        value += card.rank.base_value
        if card.rank == Rank.ACE:
            num_aces += 1

    for _ in range(num_aces):
        if value + 10 <= 21:
            value += 10

    return value


class Hand:
    """A hand of cards in Twenty-One."""

    __slots__ = ("_cards", "_value", "natural")

    def __init__(self):
        self._cards: List[Card] = []
        self._value = 0
        # Set once by the engine, never re-derived
        self.natural = False

    @property
    def cards(self) -> List[Card]:
        """Returns the cards in the hand."""
        return self._cards

    @property
    def value(self) -> int:
        """The best value of the face-up cards."""
        return self._value

    @property
    def busted(self) -> bool:
        """Whether the face-up value is over 21."""
        return self._value > 21

    def add_card(self, card: Card) -> None:
        """
        Adds a card to the hand and recomputes its value.

        Args:
            card: The card to add.
        """
        self._cards.append(card)
        self._recompute()

    def reveal_all(self) -> int:
        """Flip every card face-up and return the number of cards flipped."""
        flipped = 0
        for card in self._cards:
            if not card.face_up:
                card.face_up = True
                flipped += 1
        self._recompute()
        return flipped

    def is_two_card_21(self) -> bool:
        """True when the hand holds exactly two cards worth 21."""
        return len(self._cards) == 2 and self._value == 21

    def clear(self) -> None:
        """Remove all cards and flags."""
        self._cards.clear()
        self._value = 0
        self.natural = False

    def _recompute(self) -> None:
        self._value = hand_value(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    def __repr__(self) -> str:
        return f"Hand({self._cards!r})"

    def __str__(self) -> str:
        return ", ".join(str(card) if card.face_up else "??" for card in self._cards)
