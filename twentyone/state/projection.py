"""
Per-recipient projection of the canonical game state.

The recipient's own hand is shown as-is. The opponent's hand is shown with
every card face-down, a zero value and no natural; its busted flag passes
through. The dealer's hand follows its stored face-up flags, so the hole
card stays hidden from everyone until the engine flips it.

Projections are built fresh on every call and copy every card.
"""

from typing import TYPE_CHECKING, Optional

from twentyone.common.hand import Hand
from twentyone.state.models import CardView, GameSnapshot, PlayerView, Seat

if TYPE_CHECKING:
    from twentyone.engine.game import TwentyOneGame

DEALER_NAME = "Dealer"


def project_hand(
    name: str, seat: Optional[Seat], hand: Hand, hidden: bool = False
) -> PlayerView:
    """
    Copy a hand into an immutable view.

    Args:
        name: Owner's display name
        seat: Owner's seat, None for the dealer
        hand: Canonical hand to copy
        hidden: Force every card face-down and redact value and natural

    Returns:
        A PlayerView that shares no objects with the hand
    """
    if hidden:
        return PlayerView(
            name=name,
            seat=seat,
            hand=[CardView(card.suit, card.rank, False) for card in hand.cards],
            value=0,
            busted=hand.busted,
            natural=False,
        )
    return PlayerView(
        name=name,
        seat=seat,
        hand=[CardView(card.suit, card.rank, card.face_up) for card in hand.cards],
        value=hand.value,
        busted=hand.busted,
        natural=hand.natural,
    )


def project_for(game: "TwentyOneGame", recipient: Optional[str]) -> GameSnapshot:
    """
    Build the snapshot one recipient is allowed to see.

    A recipient that is not seated (or None) sees both players hidden.
    """
    views = {}
    for seat in Seat:
        name = game.player_name(seat)
        if name is None:
            views[seat] = None
            continue
        views[seat] = project_hand(
            name, seat, game.player(seat), hidden=(name != recipient)
        )

    return GameSnapshot(
        room_id=game.room_id,
        status=game.status,
        dealer=project_hand(DEALER_NAME, None, game.dealer),
        player1=views[Seat.PLAYER1],
        player2=views[Seat.PLAYER2],
        current_turn=game.current_turn,
        winner_message=game.summary_text(),
        is_game_over=game.is_finished,
    )
