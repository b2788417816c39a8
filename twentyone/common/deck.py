"""
This module contains the Deck class, which represents a standard 52-card deck.

Cards are dealt from the front of the deck. A fresh deck is built in canonical
order (suit-major, Ace through King within each suit) and then shuffled with
Fisher-Yates.

>>> deck = Deck(shuffle=False)
>>> deck.size
52
>>> deck.deal()
Card(Suit.HEARTS, Rank.ACE)
>>> deck.size
51
"""

import logging
import random
from typing import List, Optional

from twentyone.common.card import Card, Rank, Suit

logger = logging.getLogger("twentyone.deck")


class Deck:
    """
    A class representing a deck of cards.
    """

    # Canonical (suit, rank) order, precomputed once
    _canonical_order = [(suit, rank) for suit in Suit for rank in Rank]

    def __init__(
        self,
        cards: Optional[List[Card]] = None,
        rng: Optional[random.Random] = None,
        shuffle: bool = True,
    ):
        """
        Initialize a Deck instance.

        :param cards: A list of Card instances to populate the deck (optional).
                      If not provided, a canonical deck is built and shuffled.
        :param rng: Random source used for shuffling (optional).
        :param shuffle: Whether to shuffle a freshly built deck.
        """
        self.rng = rng or random.Random()
        self.reshuffle_count = 0
        if cards is None:
            self.cards: List[Card] = self.initialize_default_deck()
            if shuffle:
                self.shuffle()
        else:
            self.cards = list(cards)

    @classmethod
    def initialize_default_deck(cls) -> List[Card]:
        """
        Construct a deck with every (suit, rank) pair exactly once, in canonical order.

        :return: A list of Card instances representing the default deck.
        """
        return [Card(suit, rank) for suit, rank in cls._canonical_order]

    def shuffle(self) -> "Deck":
        """
        Shuffle the cards in place using Fisher-Yates.

        For i from the last index down to 1, swap position i with a uniformly
        random position in [0, i].
        """
        cards = self.cards
        for i in range(len(cards) - 1, 0, -1):
            j = self.rng.randint(0, i)
            cards[i], cards[j] = cards[j], cards[i]
        return self

    def deal(self, face_up: bool = True) -> Card:
        """
        Remove and return the card at the front of the deck.

        An exhausted deck is silently replaced by a fresh shuffled one first.

        :param face_up: Face-up flag for the dealt card.
        :return: The dealt card.
        """
        if not self.cards:
            self.reset()
            self.reshuffle_count += 1
            logger.warning("Deck exhausted; rebuilt and reshuffled a fresh deck")
        card = self.cards.pop(0)
        card.face_up = face_up
        return card

    @property
    def size(self) -> int:
        """Return the number of remaining cards in the deck."""
        return len(self.cards)

    def is_empty(self) -> bool:
        """
        Check if the deck is empty.

        :return: True if the deck is empty, False otherwise.
        """
        return len(self.cards) == 0

    def reset(self) -> None:
        """
        Reset the deck to a full, freshly shuffled set of 52 cards.
        """
        self.cards = self.initialize_default_deck()
        self.shuffle()

    def __repr__(self) -> str:
        return f"Deck({[repr(card) for card in self.cards]})"

    def __str__(self) -> str:
        return f"Deck of {len(self.cards)} cards"
