import time
from typing import Optional

from pydantic import BaseModel
from slicestore import create_reducer, on
from counter_actions import (
    increment,
    decrement,
    reset,
    increment_by,
    load_count_request,
    load_count_success,
    load_count_failure,
)

# ====== Model Definition ======
class CounterState(BaseModel):
    count: int = 0
    loading: bool = False
    error: Optional[str] = None
    last_updated: Optional[float] = None

# ====== Utility Functions ======
def updated(state: CounterState, **changes) -> CounterState:
    # 永遠返回新的物件，Store 才能以引用判斷狀態已變更
    return state.model_copy(update=changes)

# ====== Handlers ======
def increment_handler(state: CounterState, action) -> CounterState:
    return updated(state, count=state.count + 1, last_updated=time.time())

def decrement_handler(state: CounterState, action) -> CounterState:
    return updated(state, count=state.count - 1, last_updated=time.time())

def reset_handler(state: CounterState, action) -> CounterState:
    if state.count == action.payload:
        return state  # 數值相同時不產生變更
    return updated(state, count=action.payload, last_updated=time.time())

def increment_by_handler(state: CounterState, action) -> CounterState:
    if not action.payload:
        return state
    return updated(state, count=state.count + action.payload, last_updated=time.time())

def load_count_request_handler(state: CounterState, action) -> CounterState:
    return updated(state, loading=True, error=None)

def load_count_success_handler(state: CounterState, action) -> CounterState:
    return updated(state, loading=False, count=action.payload, last_updated=time.time())

def load_count_failure_handler(state: CounterState, action) -> CounterState:
    return updated(state, loading=False, error=action.payload)


# ====== Reducer ======
counter_reducer = create_reducer(
    CounterState(),
    on(increment, increment_handler),
    on(decrement, decrement_handler),
    on(reset, reset_handler),
    on(increment_by, increment_by_handler),
    on(load_count_request, load_count_request_handler),
    on(load_count_success, load_count_success_handler),
    on(load_count_failure, load_count_failure_handler),
)


def actions_log_reducer(state=(), action=None):
    """記錄每個被識別的 counter action 類型"""
    if action is not None and action.type in counter_reducer.handlers:
        return state + (action.type,)
    return state
