"""
Round resolution for Twenty-One.

Resolution is a pure function of the final hands: no cards are drawn here.
Each player is settled against the dealer independently of the other.
"""

from typing import Iterable, Tuple

from twentyone.common.hand import Hand
from twentyone.state.models import Outcome

SUMMARY_SEPARATOR = " | "


def resolve_outcome(player: Hand, dealer: Hand) -> Outcome:
    """
    Settle one player's hand against the dealer's.

    When the dealer holds a natural, a player natural pushes and everything
    else loses. Otherwise the checks run in priority order: player natural,
    player bust, dealer bust, then a straight value comparison.

    Args:
        player: The player's final hand
        dealer: The dealer's final hand

    Returns:
        The player's outcome
    """
    if dealer.natural:
        if player.natural:
            return Outcome.PUSH
        if player.busted:
            return Outcome.BUSTED
        return Outcome.LOSE

    if player.natural:
        return Outcome.NATURAL_WIN
    if player.busted:
        return Outcome.BUSTED
    if dealer.busted:
        return Outcome.DEALER_BUSTED
    if player.value > dealer.value:
        return Outcome.WIN
    if player.value < dealer.value:
        return Outcome.LOSE
    return Outcome.PUSH


def summary_text(results: Iterable[Tuple[str, Outcome]]) -> str:
    """
    Format round results as "<name>: <outcome>" clauses joined by " | ".

    >>> summary_text([("ann", Outcome.WIN), ("bob", Outcome.PUSH)])
    'ann: Wins | bob: Push (Tie)'
    """
    return SUMMARY_SEPARATOR.join(f"{name}: {outcome}" for name, outcome in results)
