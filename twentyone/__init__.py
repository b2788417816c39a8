"""
Two-player Twenty-One game server.

A server holds the authoritative game for each room and sends every
participant a personalized snapshot in which the opponent's cards and the
dealer's hole card stay hidden.
"""

__version__ = "0.1.0"
