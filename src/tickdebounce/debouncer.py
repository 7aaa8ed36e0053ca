from __future__ import annotations

import asyncio
import itertools
from typing import Any, Callable, Mapping, Sequence

import structlog

from tickdebounce.core.config.settings import settings
from tickdebounce.core.engine.engine import DebounceEngine
from tickdebounce.core.engine.router import EngineRouter, RouterWiring
from tickdebounce.core.engine.strategy import ChangeStrategy
from tickdebounce.core.events.bus import EventBus, EventHandler, Subscription
from tickdebounce.core.events.debounce import DebounceEvent
from tickdebounce.core.options import DebounceOptions, EventKind
from tickdebounce.core.validation import validate_callback, validate_interval, validate_options, validate_params

log = structlog.get_logger()


def _noop(data: Any) -> None:
    return None


class ControlChannel:
    """
    Bus component turning the shutdown / deferred-shutdown / reboot event
    names back into commands on the owning debouncer.
    """

    def __init__(self, debouncer: "Debouncer") -> None:
        self._debouncer = debouncer

    def subscriptions(self) -> Sequence[tuple[str, EventHandler]]:
        opts = self._debouncer.options
        return [
            (opts.event_name(EventKind.SHUTDOWN), self._on_shutdown),
            (opts.event_name(EventKind.SHUTDOWN_AFTER_CURRENT_ITERATION), self._on_shutdown_after_current_iteration),
            (opts.event_name(EventKind.REBOOT), self._on_reboot),
        ]

    def _on_shutdown(self, e: DebounceEvent) -> None:
        self._debouncer.shutdown_now()

    def _on_shutdown_after_current_iteration(self, e: DebounceEvent) -> None:
        self._debouncer.shutdown_after_current_iteration()

    def _on_reboot(self, e: DebounceEvent) -> None:
        self._debouncer.reboot()


class Debouncer:
    """
    Public entry point.

    Maps named operations onto engine commands and owns the EventBus the
    engine publishes to, so listeners registered with ``on`` survive reboots.

    Example:
        d = Debouncer(0.1, handle_latest, {"nullIterationsToShutdown": 0})
        d.on("responseFromCallback", lambda e: print(e.payload))
        d.debounce({"a": 1})
    """

    def __init__(
        self,
        interval: float | None = None,
        callback: Callable[[Any], Any] | None = None,
        options: DebounceOptions | Mapping[str, Any] | None = None,
        *,
        strategy: ChangeStrategy | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
        bus: EventBus | None = None,
    ) -> None:
        interval = settings.default_interval if interval is None else interval
        callback = _noop if callback is None else callback
        interval, callback, self._options = validate_params(interval, callback, options)

        self._bus = bus or EventBus()
        self._router = EngineRouter(bus=self._bus)
        self._strategy = strategy
        self._loop = loop
        self._sequence = itertools.count(1)

        self._engine = self._build_engine(interval, callback)

        self._control = ControlChannel(self)
        self._wiring: RouterWiring = self._router.register([self._control])

    # ---------------- Properties ----------------

    @property
    def engine(self) -> DebounceEngine:
        return self._engine

    @property
    def bus(self) -> EventBus:
        return self._bus

    @property
    def options(self) -> DebounceOptions:
        return self._options

    @property
    def events(self) -> tuple[str, ...]:
        return self._options.events

    # ---------------- Listeners ----------------

    def on(self, event_type: str, handler: EventHandler) -> Subscription:
        return self._bus.subscribe(event_type=event_type, handler=handler)

    def off(self, subscription: Subscription) -> bool:
        return self._bus.unsubscribe(subscription)

    def emit(self, event_type: str, payload: Any = None) -> None:
        """
        Publish a named event on the debouncer's bus.

        Emitting the shutdown, deferred-shutdown or reboot name also runs
        the matching operation.
        """
        self._bus.publish(
            DebounceEvent.create(
                event_type=event_type,
                kind=self._options.kind_of(event_type),
                payload=payload,
                engine_id=self._engine.engine_id,
                sequence=next(self._sequence),
            )
        )

    # ---------------- Operations ----------------

    def debounce(self, data: Any) -> bool:
        return self._engine.add_data(data)

    def shutdown_now(self) -> bool:
        return self._engine.shutdown_now()

    def shutdown_after_current_iteration(self) -> bool:
        return self._engine.shutdown_after_current_iteration()

    def change_interval(self, interval: float) -> bool:
        return self._engine.change_interval(validate_interval(interval))

    def change_callback(self, callback: Callable[[Any], Any]) -> bool:
        return self._engine.change_callback(validate_callback(callback))

    def change_options(self, options: DebounceOptions | Mapping[str, Any] | None = None) -> bool:
        """
        Replace the option snapshot without restarting the engine.

        A mapping is layered over the defaults, not over the current options.
        A terminated engine leaves everything untouched and returns False.
        """
        if self._engine.terminated:
            return False
        self._options = validate_options(options)
        self._rewire()
        return self._engine.change_options(self._options)

    def reboot(
        self,
        interval: float | None = None,
        callback: Callable[[Any], Any] | None = None,
        options: DebounceOptions | Mapping[str, Any] | None = None,
    ) -> bool:
        """
        Shut the current engine down immediately and start over with a fresh one.

        Omitted arguments keep the current interval, callback and options.
        """
        interval = self._engine.interval if interval is None else interval
        callback = self._engine.state.callback if callback is None else callback
        options = self._options if options is None else options
        interval, callback, opts = validate_params(interval, callback, options)

        previous = self._engine
        previous.shutdown_now()

        self._options = opts
        self._engine = self._build_engine(interval, callback)
        self._rewire()

        log.info("debouncer.rebooted", previous_engine_id=previous.engine_id, engine_id=self._engine.engine_id)
        return True

    async def wait_stopped(self, timeout: float | None = None) -> None:
        await self._engine.wait_stopped(timeout)

    # ---------------- Internals ----------------

    def _build_engine(self, interval: float, callback: Callable[[Any], Any]) -> DebounceEngine:
        return DebounceEngine(
            interval,
            callback,
            self._options,
            bus=self._bus,
            strategy=self._strategy,
            loop=self._loop,
        )

    def _rewire(self) -> None:
        if self._wiring.event_types() == (
            self._options.event_name(EventKind.SHUTDOWN),
            self._options.event_name(EventKind.SHUTDOWN_AFTER_CURRENT_ITERATION),
            self._options.event_name(EventKind.REBOOT),
        ):
            return
        self._router.unregister(self._wiring)
        self._wiring = self._router.register([self._control])
