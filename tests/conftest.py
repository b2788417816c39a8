"""
Pytest configuration shared by all tests.

Provides an EventBus reset and helpers for building games whose deck is
stacked in a known order, so card-by-card behavior can be asserted.
"""

import random

import pytest

from twentyone.common.card import Card, Rank, Suit
from twentyone.common.hand import Hand
from twentyone.engine.game import TwentyOneGame
from twentyone.events import EventBus, EventEmitter
from twentyone.state.models import Seat

RANK_CODES = {
    "A": Rank.ACE,
    "2": Rank.TWO,
    "3": Rank.THREE,
    "4": Rank.FOUR,
    "5": Rank.FIVE,
    "6": Rank.SIX,
    "7": Rank.SEVEN,
    "8": Rank.EIGHT,
    "9": Rank.NINE,
    "10": Rank.TEN,
    "J": Rank.JACK,
    "Q": Rank.QUEEN,
    "K": Rank.KING,
}
SUIT_CODES = {"H": Suit.HEARTS, "D": Suit.DIAMONDS, "C": Suit.CLUBS, "S": Suit.SPADES}


def parse_card(code: str) -> Card:
    """Build a card from a short code such as "AS", "10H" or "KD"."""
    return Card(SUIT_CODES[code[-1]], RANK_CODES[code[:-1]])


@pytest.fixture(scope="function", autouse=True)
def reset_event_bus():
    """Reset the event bus singleton before each test."""
    EventBus._instance = None
    yield
    EventBus._instance = None


@pytest.fixture
def cards():
    """Factory turning card codes into a list of cards."""

    def _cards(*codes):
        return [parse_card(code) for code in codes]

    return _cards


@pytest.fixture
def make_hand():
    """Factory building a Hand from card codes, optionally flagged as a natural."""

    def _hand(*codes, natural=False):
        hand = Hand()
        for code in codes:
            hand.add_card(parse_card(code))
        hand.natural = natural
        return hand

    return _hand


@pytest.fixture
def stacked_game():
    """
    Factory for a seated game whose deck deals the given codes first.

    Deal order is P1, P1, P2, P2, dealer up-card, dealer hole card, then hits.
    """

    def _make(*codes, names=("alice", "bob"), event_bus=None):
        game = TwentyOneGame(
            "room-1", rng=random.Random(7), event_bus=event_bus or EventEmitter()
        )
        game.add_player(names[0], Seat.PLAYER1)
        game.add_player(names[1], Seat.PLAYER2)
        game.deck.cards = [parse_card(code) for code in codes]
        return game

    return _make
