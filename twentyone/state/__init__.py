"""
State models and projection for the Twenty-One server.

This package provides the enums that tag game state, the immutable snapshot
classes handed to the transport, and the per-recipient projection.
"""

from twentyone.state.models import (
    CardView,
    GameSnapshot,
    GameStatus,
    Outcome,
    PlayerAction,
    PlayerView,
    Seat,
)
from twentyone.state.projection import project_for, project_hand

__all__ = [
    "CardView",
    "GameSnapshot",
    "GameStatus",
    "Outcome",
    "PlayerAction",
    "PlayerView",
    "Seat",
    "project_for",
    "project_hand",
]
