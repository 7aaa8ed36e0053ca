from tickdebounce.core.engine.commands import (
    AddData,
    ChangeCallback,
    ChangeInterval,
    ChangeOptions,
    Command,
    ShutdownAfterCurrentIteration,
    ShutdownNow,
)
from tickdebounce.core.engine.engine import DebounceEngine
from tickdebounce.core.engine.state import MISSING, EngineState, TickPhase
from tickdebounce.core.engine.strategy import ChangeStrategy
from tickdebounce.core.errors import InvalidParameterError
from tickdebounce.core.events.bus import EventBus, Subscription
from tickdebounce.core.events.debounce import DebounceEvent
from tickdebounce.core.options import DEFAULT_EVENTS, DebounceOptions, EventKind
from tickdebounce.debouncer import Debouncer

__all__ = [
    "AddData",
    "ChangeCallback",
    "ChangeInterval",
    "ChangeOptions",
    "ChangeStrategy",
    "Command",
    "DEFAULT_EVENTS",
    "DebounceEngine",
    "DebounceEvent",
    "DebounceOptions",
    "Debouncer",
    "EngineState",
    "EventBus",
    "EventKind",
    "InvalidParameterError",
    "MISSING",
    "ShutdownAfterCurrentIteration",
    "ShutdownNow",
    "Subscription",
    "TickPhase",
]
