"""
Tests for round resolution and summary formatting.
"""

import pytest

from twentyone.engine.resolution import resolve_outcome, summary_text
from twentyone.state.models import Outcome

NATURAL = ("AH", "KH")


@pytest.mark.parametrize(
    "player,dealer,expected",
    [
        (NATURAL, ("10C", "9C"), Outcome.NATURAL_WIN),
        (("10H", "9H", "5H"), ("10C", "9C"), Outcome.BUSTED),
        (("10H", "2H"), ("10C", "6C", "9C"), Outcome.DEALER_BUSTED),
        (("10H", "9H"), ("10C", "8C"), Outcome.WIN),
        (("10H", "7H"), ("10C", "8C"), Outcome.LOSE),
        (("10H", "8H"), ("10C", "8C"), Outcome.PUSH),
    ],
)
def test_priority_chain(make_hand, player, dealer, expected):
    player_hand = make_hand(*player, natural=player == NATURAL)
    assert resolve_outcome(player_hand, make_hand(*dealer)) is expected


def test_player_bust_beats_dealer_bust(make_hand):
    player = make_hand("10H", "9H", "5H")
    dealer = make_hand("10C", "6C", "9C")
    assert resolve_outcome(player, dealer) is Outcome.BUSTED


def test_natural_beats_dealer_three_card_21(make_hand):
    player = make_hand("AH", "QH", natural=True)
    dealer = make_hand("7C", "4C", "KC")
    assert dealer.value == 21
    assert resolve_outcome(player, dealer) is Outcome.NATURAL_WIN


def test_three_card_21_pushes_dealer_21(make_hand):
    player = make_hand("7H", "4H", "KH")
    dealer = make_hand("10C", "5C", "6C")
    assert resolve_outcome(player, dealer) is Outcome.PUSH


@pytest.mark.parametrize(
    "player,expected",
    [
        (NATURAL, Outcome.PUSH),
        (("10H", "9H", "5H"), Outcome.BUSTED),
        (("10H", "9H"), Outcome.LOSE),
        (("7H", "4H", "KH"), Outcome.LOSE),
    ],
)
def test_dealer_natural(make_hand, player, expected):
    player_hand = make_hand(*player, natural=player == NATURAL)
    dealer = make_hand("AC", "KC", natural=True)
    assert resolve_outcome(player_hand, dealer) is expected


def test_outcome_text():
    assert str(Outcome.NATURAL_WIN) == "Wins (Natural Blackjack!)"
    assert str(Outcome.BUSTED) == "Loses (Busted)"
    assert str(Outcome.DEALER_BUSTED) == "Wins (Dealer Busted)"
    assert str(Outcome.WIN) == "Wins"
    assert str(Outcome.LOSE) == "Loses"
    assert str(Outcome.PUSH) == "Push (Tie)"


def test_summary_text():
    results = [("alice", Outcome.DEALER_BUSTED), ("bob", Outcome.BUSTED)]
    assert summary_text(results) == "alice: Wins (Dealer Busted) | bob: Loses (Busted)"


def test_summary_text_single_and_empty():
    assert summary_text([("alice", Outcome.WIN)]) == "alice: Wins"
    assert summary_text([]) == ""
