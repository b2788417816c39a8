"""
Event system for the Twenty-One server.

This package provides the in-process event bus that engines and the hub
publish to.
"""

from twentyone.events.emitter import (
    EventEmitter,
    EventBus,
    EventPriority,
    EngineEventType,
)

__all__ = ["EventEmitter", "EventBus", "EventPriority", "EngineEventType"]
