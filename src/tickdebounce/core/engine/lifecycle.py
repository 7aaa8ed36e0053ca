from __future__ import annotations

import structlog

from tickdebounce.core.engine.state import EngineState, TickPhase
from tickdebounce.core.logging.setup import bind_context

log = structlog.get_logger()


class TickLifecycle:
    """
    Explicit tick-loop phase controller.

    Ensures IDLE -> SCHEDULED <-> RUNNING -> STOPPED transitions are legal
    and audited in the logs. STOPPED is terminal.
    """

    def __init__(self, *, state: EngineState, engine_id: str) -> None:
        self._state = state
        self._engine_id = engine_id

    @property
    def state(self) -> EngineState:
        return self._state

    def start(self) -> None:
        if self._state.phase is not TickPhase.IDLE:
            raise RuntimeError(f"tick loop already started (phase={self._state.phase.value})")

        bind_context(engine_id=self._engine_id, component="engine")

        self._state.started = True
        self._state.phase = TickPhase.SCHEDULED

        log.info("engine.started", engine_id=self._engine_id, interval=self._state.interval)

    def begin_tick(self) -> None:
        if self._state.phase is not TickPhase.SCHEDULED:
            raise RuntimeError(f"tick fired outside SCHEDULED (phase={self._state.phase.value})")
        self._state.phase = TickPhase.RUNNING

    def rearm(self) -> None:
        if self._state.phase is not TickPhase.RUNNING:
            raise RuntimeError(f"cannot re-arm outside RUNNING (phase={self._state.phase.value})")
        self._state.phase = TickPhase.SCHEDULED

    def stop(self, *, reason: str) -> bool:
        """
        Enter STOPPED. Returns False when the loop was already stopped.
        """
        if self._state.phase is TickPhase.STOPPED:
            return False

        self._state.alive = False
        self._state.phase = TickPhase.STOPPED

        log.info(
            "engine.stopped",
            engine_id=self._engine_id,
            reason=reason,
            ticks=self._state.tick,
            null_streak=self._state.null_streak,
        )
        return True
