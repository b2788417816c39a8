"""
Room bookkeeping for the Twenty-One server.
"""

from twentyone.rooms.registry import MAX_PLAYERS, Room, RoomRegistry

__all__ = ["MAX_PLAYERS", "Room", "RoomRegistry"]
