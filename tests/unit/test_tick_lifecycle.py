from __future__ import annotations

import copy

import pytest

from tickdebounce.core.engine.lifecycle import TickLifecycle
from tickdebounce.core.engine.state import MISSING, EngineState, TickPhase
from tickdebounce.core.engine.strategy import ChangeStrategy, structural_equals
from tickdebounce.core.logging.setup import clear_context


def _lifecycle() -> TickLifecycle:
    return TickLifecycle(state=EngineState(interval=0.1, callback=print), engine_id="test")


def teardown_function() -> None:
    clear_context()


def test_full_phase_cycle() -> None:
    lc = _lifecycle()
    s = lc.state
    assert s.phase is TickPhase.IDLE
    assert s.started is False

    lc.start()
    assert s.started is True
    assert s.phase is TickPhase.SCHEDULED

    lc.begin_tick()
    assert s.phase is TickPhase.RUNNING
    lc.rearm()
    assert s.phase is TickPhase.SCHEDULED

    assert lc.stop(reason="test") is True
    assert s.phase is TickPhase.STOPPED
    assert s.alive is False
    assert lc.stop(reason="again") is False


def test_illegal_transitions_raise() -> None:
    lc = _lifecycle()

    with pytest.raises(RuntimeError):
        lc.begin_tick()
    with pytest.raises(RuntimeError):
        lc.rearm()

    lc.start()
    with pytest.raises(RuntimeError):
        lc.start()
    with pytest.raises(RuntimeError):
        lc.rearm()


def test_stop_from_idle_is_terminal() -> None:
    lc = _lifecycle()

    assert lc.stop(reason="shutdown_now") is True
    with pytest.raises(RuntimeError):
        lc.start()


def test_counters_refuse_to_advance_after_stop() -> None:
    lc = _lifecycle()
    s = lc.state
    lc.start()

    assert s.next_tick() == 1
    assert s.next_sequence() == 1
    assert s.next_sequence() == 2

    lc.stop(reason="test")
    with pytest.raises(RuntimeError):
        s.next_tick()
    with pytest.raises(RuntimeError):
        s.next_sequence()


def test_missing_marker() -> None:
    assert repr(MISSING) == "MISSING"
    assert not MISSING
    assert copy.copy(MISSING) is MISSING
    assert copy.deepcopy(EngineState(interval=1, callback=print)).pending_data is MISSING


def test_default_change_strategy_is_structural() -> None:
    strategy = ChangeStrategy()
    original = {"a": [1, {"b": 2}]}
    clone = strategy.clone(original)

    assert strategy.same(original, clone)
    assert clone is not original
    assert clone["a"] is not original["a"]

    clone["a"][1]["b"] = 3
    assert not strategy.same(original, clone)


def test_structural_equals_treats_nan_as_unchanged() -> None:
    nan = float("nan")

    assert structural_equals(nan, nan)
    assert structural_equals(nan, float("nan"))
    assert structural_equals({"x": nan}, ChangeStrategy().clone({"x": nan}))
    assert not structural_equals(nan, 1.0)
    assert not structural_equals(1, 2)
