"""Integration tests running a full store with reducers, middleware and subscribers."""

from typing import Optional

import pytest
from pydantic import BaseModel

from slicestore import (
    LoggerMiddleware,
    PerformanceMonitorMiddleware,
    StoreModule,
    ThunkMiddleware,
    create_action,
    create_reducer,
    on,
    to_dict,
)


@pytest.mark.integration
def test_number_store_end_to_end(store, received, add, subtract):
    """Changing dispatches notify once each, no-op dispatches notify nobody"""
    store.subscribe(received)

    store.dispatch(add(5))
    assert store.get_state()["number"] == 5
    assert len(received.states) == 1

    store.dispatch(add(5))
    assert store.get_state()["number"] == 10
    assert len(received.states) == 2

    store.dispatch(subtract(7))
    assert store.get_state()["number"] == 3
    assert len(received.states) == 3

    store.dispatch({"type": "no change"})
    assert store.get_state()["number"] == 3
    assert len(received.states) == 3

    store.dispatch(add(0))
    assert store.get_state()["number"] == 3
    assert len(received.states) == 3

    assert [state["number"] for state in received.states] == [5, 10, 3]


class CounterState(BaseModel):
    count: int = 0
    loading: bool = False
    error: Optional[str] = None


increment = create_action("[Counter] Increment")
increment_by = create_action("[Counter] IncrementBy", lambda amount: amount)
load_request = create_action("[Counter] Load Request")
load_success = create_action("[Counter] Load Success", lambda count: count)


def _update(state: CounterState, **changes) -> CounterState:
    return state.model_copy(update=changes)


counter_reducer = create_reducer(
    CounterState(),
    on(increment, lambda state, action: _update(state, count=state.count + 1)),
    on(increment_by, lambda state, action: _update(state, count=state.count + action.payload)),
    on(load_request, lambda state, action: _update(state, loading=True)),
    on(load_success, lambda state, action: _update(state, loading=False, count=action.payload)),
)

history_reducer = create_reducer(
    (),
    on(increment, lambda state, action: state + (action.type,)),
    on(increment_by, lambda state, action: state + (action.type,)),
)


def load_count(value):
    def thunk(dispatch, get_state):
        dispatch(load_request())
        dispatch(load_success(value))
        return get_state()["counter"].count
    return thunk


@pytest.mark.integration
def test_counter_store_with_middleware_stack():
    monitor = PerformanceMonitorMiddleware(threshold_ms=10_000)
    store = StoreModule.register_root(
        {"counter": counter_reducer, "history": history_reducer},
        ThunkMiddleware,
        LoggerMiddleware(),
        monitor,
    )
    counts = []
    store.subscribe(lambda state: counts.append(state["counter"].count))

    assert store.get_state()["counter"] == CounterState()

    store.dispatch(increment())
    store.dispatch(increment_by(4))
    assert store.dispatch(load_count(42)) == 42

    state = store.get_state()
    assert state["counter"] == CounterState(count=42)
    assert state["history"] == (increment.type, increment_by.type)
    assert counts == [1, 5, 5, 42]
    assert monitor.get_metrics()[load_request.type]["count"] == 1
    assert to_dict(store.state)["counter"] == {"count": 42, "loading": False, "error": None}
