from __future__ import annotations

import asyncio
import inspect
import secrets
from typing import Any, Callable, Mapping

import structlog

from tickdebounce.core.engine.commands import (
    AddData,
    ChangeCallback,
    ChangeInterval,
    ChangeOptions,
    Command,
    ShutdownAfterCurrentIteration,
    ShutdownNow,
)
from tickdebounce.core.engine.lifecycle import TickLifecycle
from tickdebounce.core.engine.state import MISSING, EngineState, TickPhase
from tickdebounce.core.engine.strategy import ChangeStrategy
from tickdebounce.core.engine.tick_driver import TickDriver
from tickdebounce.core.events.bus import EventBus
from tickdebounce.core.events.debounce import DebounceEvent
from tickdebounce.core.options import DebounceOptions, EventKind
from tickdebounce.core.validation import validate_callback, validate_interval, validate_options, validate_params

log = structlog.get_logger()


class DebounceEngine:
    """
    Command-driven debounce state machine.

    Holds one "latest data" cell and a snapshot of the data last acted upon.
    Every ``interval`` seconds a tick compares the two; only a genuine change
    invokes the callback. Ticks never overlap: the next timer is armed only
    after the current tick, including an awaited callback, has settled.

    All commands go through ``dispatch`` and return True while the engine is
    addressable, False once the tick loop has stopped.
    """

    def __init__(
        self,
        interval: float,
        callback: Callable[[Any], Any],
        options: DebounceOptions | Mapping[str, Any] | None = None,
        *,
        bus: EventBus,
        strategy: ChangeStrategy | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
        driver: TickDriver | None = None,
        engine_id: str | None = None,
    ) -> None:
        interval, callback, opts = validate_params(interval, callback, options)

        self._engine_id = engine_id or secrets.token_hex(4)
        self._bus = bus
        self._options = opts
        self._strategy = strategy or ChangeStrategy()
        self._driver = driver or TickDriver(loop=loop)
        self._state = EngineState(interval=interval, callback=callback)
        self._lifecycle = TickLifecycle(state=self._state, engine_id=self._engine_id)
        self._stopped = asyncio.Event()
        self._stop_reason = "shutdown_after_current_iteration"

        self._handlers: dict[type, Callable[[Any], bool]] = {
            AddData: self._on_add_data,
            ShutdownNow: self._on_shutdown_now,
            ShutdownAfterCurrentIteration: self._on_shutdown_after_current_iteration,
            ChangeInterval: self._on_change_interval,
            ChangeCallback: self._on_change_callback,
            ChangeOptions: self._on_change_options,
        }

    # ---------------- Introspection ----------------

    @property
    def engine_id(self) -> str:
        return self._engine_id

    @property
    def bus(self) -> EventBus:
        return self._bus

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def phase(self) -> TickPhase:
        return self._state.phase

    @property
    def options(self) -> DebounceOptions:
        return self._options

    @property
    def interval(self) -> float:
        return self._state.interval

    @property
    def alive(self) -> bool:
        return self._state.alive

    @property
    def started(self) -> bool:
        return self._state.started

    @property
    def terminated(self) -> bool:
        return self._state.terminated

    @property
    def null_streak(self) -> int:
        return self._state.null_streak

    async def wait_stopped(self, timeout: float | None = None) -> None:
        await asyncio.wait_for(self._stopped.wait(), timeout)

    # ---------------- Command protocol ----------------

    def dispatch(self, command: Command) -> bool:
        if self._state.terminated:
            log.debug("engine.command_rejected", engine_id=self._engine_id, command=command.command_type)
            return False

        handler = self._handlers.get(type(command))
        if handler is None:
            raise TypeError(f"unsupported command: {type(command).__name__}")
        return handler(command)

    def add_data(self, data: Any) -> bool:
        return self.dispatch(AddData(data))

    def shutdown_now(self) -> bool:
        return self.dispatch(ShutdownNow())

    def shutdown_after_current_iteration(self) -> bool:
        return self.dispatch(ShutdownAfterCurrentIteration())

    def change_interval(self, interval: float) -> bool:
        return self.dispatch(ChangeInterval(interval))

    def change_callback(self, callback: Callable[[Any], Any]) -> bool:
        return self.dispatch(ChangeCallback(callback))

    def change_options(self, options: DebounceOptions | Mapping[str, Any] | None) -> bool:
        if self._state.terminated:
            return False
        return self.dispatch(ChangeOptions(validate_options(options)))

    def _on_add_data(self, command: AddData) -> bool:
        if not self._state.started:
            self._start()
        self._state.pending_data = command.data
        return True

    def _on_shutdown_now(self, command: ShutdownNow) -> bool:
        self._driver.cancel(self._state.timer)
        self._state.timer = None
        self._finish(reason="shutdown_now")
        return False

    def _on_shutdown_after_current_iteration(self, command: ShutdownAfterCurrentIteration) -> bool:
        if not self._state.started:
            self._start()
        self._stop_reason = "shutdown_after_current_iteration"
        self._state.alive = False
        log.info("engine.shutdown_requested", engine_id=self._engine_id, phase=self._state.phase.value)
        return True

    def _on_change_interval(self, command: ChangeInterval) -> bool:
        self._state.interval = validate_interval(command.interval)
        log.debug("engine.interval_changed", engine_id=self._engine_id, interval=self._state.interval)
        return True

    def _on_change_callback(self, command: ChangeCallback) -> bool:
        self._state.callback = validate_callback(command.callback)
        log.debug("engine.callback_changed", engine_id=self._engine_id)
        return True

    def _on_change_options(self, command: ChangeOptions) -> bool:
        self._options = validate_options(command.options)
        log.debug("engine.options_changed", engine_id=self._engine_id, events=self._options.events)
        return True

    # ---------------- Tick loop ----------------

    def _start(self) -> None:
        # resolve the loop before touching any state
        _ = self._driver.loop
        self._lifecycle.start()
        self._arm()

    def _arm(self) -> None:
        self._state.timer = self._driver.arm(self._state.interval, self._fire)

    def _fire(self) -> None:
        self._state.timer = None
        if self._state.terminated:
            return
        self._lifecycle.begin_tick()
        tick = self._state.next_tick()
        self._driver.spawn(self._run_tick(tick), name=f"tickdebounce-{self._engine_id}-{tick}")

    async def _run_tick(self, tick: int) -> None:
        try:
            if not self._state.terminated:
                await self._evaluate(tick)
        except asyncio.CancelledError:
            self._finish(reason="cancelled")
            raise
        finally:
            self._settle()

    async def _evaluate(self, tick: int) -> None:
        state = self._state
        data = state.pending_data
        callback = state.callback

        try:
            if self._changed(data, state.last_acted_on):
                log.debug("engine.tick", engine_id=self._engine_id, tick=tick, changed=True)
                self._publish(EventKind.ACTIVE_ITERATION, tick=tick)

                state.last_acted_on = self._clone(data)
                state.active_iterations += 1
                if self._options.only_count_contiguous_iterations:
                    state.null_streak = 0

                result = callback(data)
                if inspect.isawaitable(result):
                    result = await result

                if state.terminated:
                    log.info("engine.response_dropped", engine_id=self._engine_id, tick=tick)
                    return
                self._publish(EventKind.CALLBACK_RESPONSE, payload=result, tick=tick)
            else:
                log.debug("engine.tick", engine_id=self._engine_id, tick=tick, changed=False)
                self._publish(EventKind.NULL_ITERATION, tick=tick)
                state.null_streak += 1

        except Exception as exc:
            state.failed_iterations += 1
            log.warning(
                "engine.callback_failed",
                engine_id=self._engine_id,
                tick=tick,
                error_type=type(exc).__name__,
                error_message=str(exc),
            )
            if state.terminated:
                return

            # a raising error listener propagates out of the tick; the policy
            # still applies and the tick still settles in _run_tick
            try:
                self._publish(EventKind.ERROR_IN_ITERATION, payload=exc, tick=tick)
            except Exception:
                log.exception("engine.error_listener_failed", engine_id=self._engine_id, tick=tick)
                raise
            finally:
                if self._options.shutdown_after_error:
                    self._stop_reason = "error"
                    state.alive = False

    def _settle(self) -> None:
        state = self._state
        if state.terminated:
            return

        threshold = self._options.shutdown_threshold
        if not state.alive:
            self._finish(reason=self._stop_reason)
        elif threshold is not None and state.null_streak == threshold:
            self._finish(reason="null_iterations")
        else:
            self._lifecycle.rearm()
            self._arm()

    def _finish(self, *, reason: str) -> None:
        if self._lifecycle.stop(reason=reason):
            self._driver.cancel(self._state.timer)
            self._state.timer = None
            self._stopped.set()

    # ---------------- Helpers ----------------

    def _changed(self, current: Any, last: Any) -> bool:
        if current is MISSING or last is MISSING:
            return current is not last
        return not self._strategy.same(current, last)

    def _clone(self, value: Any) -> Any:
        if value is MISSING:
            return MISSING
        return self._strategy.clone(value)

    def _publish(self, kind: EventKind, *, payload: Any = None, tick: int = 0) -> None:
        self._bus.publish(
            DebounceEvent.create(
                event_type=self._options.event_name(kind),
                kind=kind,
                payload=payload,
                engine_id=self._engine_id,
                tick=tick,
                sequence=self._state.next_sequence(),
            )
        )
