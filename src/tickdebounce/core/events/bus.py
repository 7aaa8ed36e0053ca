from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, DefaultDict, Iterable, TypeAlias

import structlog

from tickdebounce.core.events.debounce import DebounceEvent

log = structlog.get_logger()

EventHandler: TypeAlias = Callable[[DebounceEvent], None]


@dataclass(frozen=True)
class Subscription:
    """
    Represents a subscription of a handler to a specific event_type.
    """

    event_type: str
    handler: EventHandler


class EventBus:
    """
    Synchronous event bus.

    - publish(event) dispatches to handlers subscribed to event.event_type
    - dispatch order is subscription order
    - failures are fail-fast (raises to the publisher)
    """

    def __init__(self) -> None:
        self._handlers: DefaultDict[str, list[EventHandler]] = defaultdict(list)

    def subscribe(self, *, event_type: str, handler: EventHandler) -> Subscription:
        if not event_type:
            raise ValueError("event_type must be non-empty")
        self._handlers[event_type].append(handler)
        log.debug("bus.subscribed", event_type=event_type, handler=getattr(handler, "__name__", "handler"))
        return Subscription(event_type=event_type, handler=handler)

    def unsubscribe(self, subscription: Subscription) -> bool:
        handlers = self._handlers.get(subscription.event_type)
        if not handlers:
            return False
        # remove one registration; the same handler may be subscribed twice
        for i, h in enumerate(handlers):
            if h is subscription.handler:
                del handlers[i]
                break
        else:
            return False
        if not handlers:
            del self._handlers[subscription.event_type]
        log.debug("bus.unsubscribed", event_type=subscription.event_type)
        return True

    def clear(self, event_type: str | None = None) -> None:
        if event_type is None:
            self._handlers.clear()
        else:
            self._handlers.pop(event_type, None)

    def publish(self, event: DebounceEvent) -> None:
        # snapshot: handlers may (un)subscribe while being dispatched
        handlers = tuple(self._handlers.get(event.event_type, ()))
        log.debug(
            "bus.publish",
            event_type=event.event_type,
            event_id=str(event.event_id),
            handlers=len(handlers),
        )
        for handler in handlers:
            handler(event)

    def subscribers_for(self, event_type: str) -> Iterable[EventHandler]:
        return tuple(self._handlers.get(event_type, []))

    def event_types(self) -> tuple[str, ...]:
        return tuple(self._handlers)
