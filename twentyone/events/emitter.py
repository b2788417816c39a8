"""
In-process event system for the Twenty-One server.

Engines publish lifecycle events (deals, turns, busts, round results) here so
that logging, statistics or tests can observe a game without the engine
knowing about any of them. Delivery is synchronous and never touches the
network; the transport layer is fed by the hub, not by this bus.
"""

from collections import defaultdict
from typing import Any, Dict, Callable, Optional, Union
import threading
import logging
from enum import Enum

# Create a logger for the event system
logger = logging.getLogger("twentyone.events")


class EventPriority(Enum):
    """Priority levels for event handlers."""

    LOW = 0
    NORMAL = 1
    HIGH = 2
    CRITICAL = 3


class EventEmitter:
    """
    Event emitter with priority-ordered subscriptions.

    Features:
    - Supports event subscription with priorities
    - Allows once-only subscriptions
    - Supports subscribing to all events with event type filtering in handler
    - Thread-safe event emission
    """

    def __init__(self):
        """Initialize the event emitter."""
        self._listeners = defaultdict(list)
        self._global_listeners = []
        self._listener_lock = threading.RLock()

    def on(
        self,
        event_type: Union[str, Enum],
        callback: Callable,
        priority: EventPriority = EventPriority.NORMAL,
    ) -> Callable:
        """
        Subscribe to an event type.

        Args:
            event_type: The event type to subscribe to (string or enum)
            callback: Function to call when event occurs, signature: fn(event_data)
            priority: Priority level for this handler

        Returns:
            Unsubscribe function that can be called to remove this subscription
        """
        if isinstance(event_type, Enum):
            event_type = event_type.name

        handler = {"callback": callback, "priority": priority.value}

        with self._listener_lock:
            # Higher priority handlers run first
            handlers = self._listeners[event_type]
            for i, existing in enumerate(handlers):
                if existing["priority"] < priority.value:
                    handlers.insert(i, handler)
                    break
            else:
                handlers.append(handler)

        def unsubscribe():
            with self._listener_lock:
                handlers = self._listeners[event_type]
                for i, existing in enumerate(handlers):
                    if existing["callback"] == callback:
                        handlers.pop(i)
                        break

        return unsubscribe

    def once(
        self,
        event_type: Union[str, Enum],
        callback: Callable,
        priority: EventPriority = EventPriority.NORMAL,
    ) -> Callable:
        """
        Subscribe to an event type for a single occurrence.

        Args:
            event_type: The event type to subscribe to (string or enum)
            callback: Function to call when event occurs
            priority: Priority level for this handler

        Returns:
            Unsubscribe function that can be called to remove this subscription
        """
        unsubscribe_ref = []

        def one_time_handler(event_data):
            try:
                callback(event_data)
            finally:
                if unsubscribe_ref and callable(unsubscribe_ref[0]):
                    unsubscribe_ref[0]()

        unsubscribe_ref.append(self.on(event_type, one_time_handler, priority))
        return unsubscribe_ref[0]

    def on_any(
        self, callback: Callable, priority: EventPriority = EventPriority.NORMAL
    ) -> Callable:
        """
        Subscribe to all events.

        Args:
            callback: Function to call for any event, signature: fn((event_type, event_data))
            priority: Priority level for this handler

        Returns:
            Unsubscribe function that can be called to remove this subscription
        """
        handler = {"callback": callback, "priority": priority.value}

        with self._listener_lock:
            for i, existing in enumerate(self._global_listeners):
                if existing["priority"] < priority.value:
                    self._global_listeners.insert(i, handler)
                    break
            else:
                self._global_listeners.append(handler)

        def unsubscribe():
            with self._listener_lock:
                for i, existing in enumerate(self._global_listeners):
                    if existing["callback"] == callback:
                        self._global_listeners.pop(i)
                        break

        return unsubscribe

    def emit(self, event_type: Union[str, Enum], data: Dict[str, Any]) -> None:
        """
        Emit an event to all registered listeners.

        A failing handler is logged and does not stop delivery to the others.

        Args:
            event_type: The type of event to emit
            data: The data to include with the event
        """
        if isinstance(event_type, Enum):
            event_type = event_type.name

        handlers_to_call = []

        with self._listener_lock:
            for handler in self._listeners.get(event_type, []):
                handlers_to_call.append((handler["callback"], data))

            for handler in self._global_listeners:
                handlers_to_call.append((handler["callback"], (event_type, data)))

        # Call handlers outside of the lock to avoid deadlocks
        for callback, args in handlers_to_call:
            try:
                callback(args)
            except Exception as e:
                logger.error(
                    f"Error in event handler for {event_type}: {e}", exc_info=True
                )

    def remove_all_listeners(
        self, event_type: Optional[Union[str, Enum]] = None
    ) -> None:
        """
        Remove all listeners for a specific event type or all events.

        Args:
            event_type: Optional event type. If None, removes all listeners for all events.
        """
        with self._listener_lock:
            if event_type is None:
                self._listeners.clear()
                self._global_listeners.clear()
            else:
                if isinstance(event_type, Enum):
                    event_type = event_type.name
                self._listeners[event_type].clear()


class EventBus:
    """
    Process-wide default event bus.

    Components accept an explicit EventEmitter and fall back to this one.
    """

    _instance = None
    _lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> EventEmitter:
        """
        Get the singleton instance of the EventBus.

        Returns:
            EventEmitter instance
        """
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = EventEmitter()
        return cls._instance


class EngineEventType(Enum):
    """
    Event types published by the game engine and the hub.
    """

    # Game lifecycle
    GAME_CREATED = "game_created"
    GAME_RESET = "game_reset"
    ROUND_STARTED = "round_started"
    ROUND_ENDED = "round_ended"

    # Player events
    PLAYER_JOINED = "player_joined"
    PLAYER_LEFT = "player_left"
    PLAYER_ACTION = "player_action"
    ACTION_REJECTED = "action_rejected"
    TURN_CHANGED = "turn_changed"

    # Card events
    CARD_DEALT = "card_dealt"
    HOLE_CARD_REVEALED = "hole_card_revealed"
    SHUFFLE = "shuffle"

    # Hand events
    HAND_BUSTED = "hand_busted"
    HAND_RESULT = "hand_result"

    # Dealer events
    DEALER_ACTION = "dealer_action"

    # Room events
    ROOM_CREATED = "room_created"
    ROOM_REMOVED = "room_removed"
