"""
Core engine for the Twenty-One server.

This package provides the per-room game state machine and round resolution,
implemented without any I/O.
"""

from twentyone.engine.game import TwentyOneGame
from twentyone.engine.resolution import resolve_outcome, summary_text

__all__ = ["TwentyOneGame", "resolve_outcome", "summary_text"]
