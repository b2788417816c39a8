"""
Tests for the in-process event system.
"""

import logging
import threading
from unittest.mock import MagicMock

from twentyone.events import EventBus, EventEmitter, EventPriority, EngineEventType


def test_subscribe_and_unsubscribe():
    emitter = EventEmitter()
    callback = MagicMock()

    unsubscribe = emitter.on("turn_changed", callback)
    emitter.emit("turn_changed", {"seat": "PLAYER1"})
    callback.assert_called_once_with({"seat": "PLAYER1"})

    unsubscribe()
    emitter.emit("turn_changed", {"seat": "PLAYER2"})
    assert callback.call_count == 1


def test_enum_and_name_are_the_same_event():
    emitter = EventEmitter()
    callback = MagicMock()

    emitter.on(EngineEventType.CARD_DEALT, callback)
    emitter.emit("CARD_DEALT", {"card": "hidden"})
    emitter.emit(EngineEventType.CARD_DEALT, {"card": "A of ♠"})

    assert [c.args[0]["card"] for c in callback.call_args_list] == ["hidden", "A of ♠"]


def test_once_fires_a_single_time():
    emitter = EventEmitter()
    callback = MagicMock()

    emitter.once(EngineEventType.ROUND_ENDED, callback)
    emitter.emit(EngineEventType.ROUND_ENDED, {"round": 1})
    emitter.emit(EngineEventType.ROUND_ENDED, {"round": 2})

    callback.assert_called_once_with({"round": 1})


def test_on_any_receives_type_and_data():
    emitter = EventEmitter()
    callback = MagicMock()

    unsubscribe = emitter.on_any(callback)
    emitter.emit(EngineEventType.SHUFFLE, {"cards_remaining": 52})
    emitter.emit("custom", {"id": 2})

    assert callback.call_args_list[0].args[0] == ("SHUFFLE", {"cards_remaining": 52})
    assert callback.call_args_list[1].args[0] == ("custom", {"id": 2})

    unsubscribe()
    emitter.emit("custom", {"id": 3})
    assert callback.call_count == 2


def test_handlers_run_in_priority_order():
    emitter = EventEmitter()
    order = []

    emitter.on("hand_result", lambda _: order.append("normal"), EventPriority.NORMAL)
    emitter.on("hand_result", lambda _: order.append("low"), EventPriority.LOW)
    emitter.on("hand_result", lambda _: order.append("critical"), EventPriority.CRITICAL)
    emitter.on("hand_result", lambda _: order.append("high"), EventPriority.HIGH)

    emitter.emit("hand_result", {})

    assert order == ["critical", "high", "normal", "low"]


def test_remove_all_listeners():
    emitter = EventEmitter()
    dealt = MagicMock()
    busted = MagicMock()
    everything = MagicMock()
    emitter.on(EngineEventType.CARD_DEALT, dealt)
    emitter.on(EngineEventType.HAND_BUSTED, busted)
    emitter.on_any(everything)

    emitter.remove_all_listeners(EngineEventType.CARD_DEALT)
    emitter.emit(EngineEventType.CARD_DEALT, {})
    emitter.emit(EngineEventType.HAND_BUSTED, {})
    dealt.assert_not_called()
    busted.assert_called_once()

    emitter.remove_all_listeners()
    everything.reset_mock()
    emitter.emit(EngineEventType.HAND_BUSTED, {})
    assert busted.call_count == 1
    everything.assert_not_called()


def test_failing_handler_is_logged_and_isolated(caplog):
    emitter = EventEmitter()

    def broken(_):
        raise ValueError("boom")

    after = MagicMock()
    emitter.on("player_action", broken, EventPriority.HIGH)
    emitter.on("player_action", after)

    with caplog.at_level(logging.ERROR, logger="twentyone.events"):
        emitter.emit("player_action", {})

    after.assert_called_once()
    assert "Error in event handler for player_action" in caplog.text


def test_event_bus_singleton():
    bus = EventBus.get_instance()
    assert bus is EventBus.get_instance()
    assert isinstance(bus, EventEmitter)


def test_concurrent_emits():
    emitter = EventEmitter()
    count = {"value": 0}
    lock = threading.Lock()

    def increment(_):
        with lock:
            count["value"] += 1

    emitter.on("card_dealt", increment)
    threads = [
        threading.Thread(target=lambda: emitter.emit("card_dealt", {})) for _ in range(10)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert count["value"] == 10
