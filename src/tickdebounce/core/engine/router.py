from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol, Sequence

from tickdebounce.core.events.bus import EventBus, EventHandler, Subscription


class EventComponent(Protocol):
    """
    Anything that listens to debounce events by name.

    The façade's control channel and the test collectors implement this.
    """

    def subscriptions(self) -> Sequence[tuple[str, EventHandler]]:
        ...


@dataclass(frozen=True, slots=True)
class WiredSubscription:
    component: str
    subscription: Subscription


@dataclass(frozen=True, slots=True)
class RouterWiring:
    """
    Handle returned by ``EngineRouter.register``.

    The debouncer keeps it so that renaming the event names through
    ``change_options`` can drop the old control listeners in one call.
    """

    subscriptions: tuple[WiredSubscription, ...]

    def event_types(self) -> tuple[str, ...]:
        return tuple(w.subscription.event_type for w in self.subscriptions)


class EngineRouter:
    """
    Attaches listener components to a debouncer's EventBus.

    Listeners are subscribed in component order, then in the order each
    component lists them, so dispatch order on the bus is reproducible.
    A component naming an empty event or listing the same handler twice
    for one name is a wiring bug and fails the whole registration.
    """

    def __init__(self, *, bus: EventBus) -> None:
        self._bus = bus

    def register(self, components: Iterable[EventComponent]) -> RouterWiring:
        pairs: list[tuple[str, str, EventHandler]] = []
        for component in components:
            pairs.extend(self._collect(component))

        seen: set[tuple[str, int]] = set()
        for name, event_type, handler in pairs:
            if (event_type, id(handler)) in seen:
                raise RuntimeError(f"duplicate subscription detected: component={name} event_type={event_type}")
            seen.add((event_type, id(handler)))

        # nothing touches the bus until every pair checked out
        wired = tuple(
            WiredSubscription(component=name, subscription=self._bus.subscribe(event_type=event_type, handler=handler))
            for name, event_type, handler in pairs
        )
        return RouterWiring(subscriptions=wired)

    def unregister(self, wiring: RouterWiring) -> None:
        for w in wiring.subscriptions:
            self._bus.unsubscribe(w.subscription)

    @staticmethod
    def _collect(component: EventComponent) -> list[tuple[str, str, EventHandler]]:
        name = type(component).__name__
        subs = component.subscriptions()
        if not isinstance(subs, Sequence):
            raise TypeError(f"{name}.subscriptions() must return a Sequence")

        out: list[tuple[str, str, EventHandler]] = []
        for event_type, handler in subs:
            if not event_type:
                raise ValueError(f"{name} produced empty event_type")
            out.append((name, event_type, handler))
        return out
