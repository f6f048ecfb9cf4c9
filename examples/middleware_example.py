"""
SliceStore 範例：待辦事項應用，展示中介軟體的使用
"""

import logging
import uuid
from pathlib import Path
import sys
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from immutables import Map

from slicestore import (
    Action,
    ErrorHandler,
    combine_reducers,
    create_action,
    create_reducer,
    create_store,
    get_action_type,
    global_error,
    on,
    to_dict,
)
from slicestore.middleware import (
    ErrorMiddleware,
    LoggerMiddleware,
    PerformanceMonitorMiddleware,
    ThunkMiddleware,
    apply_middleware,
)

# ====== 1. 定義 Actions ======
add_todo = create_action("addTodo", lambda text: text)
toggle_todo = create_action("toggleTodo", lambda id: id)
remove_todo = create_action("removeTodo", lambda id: id)
clear_todos = create_action("clearTodos")

MAX_TODOS = 3


# ====== 2. 定義 Reducers ======
def handle_add_todo(state: tuple, action: Action[str]) -> tuple:
    if len(state) >= MAX_TODOS:
        raise ValueError(f"too many todos (max {MAX_TODOS})")
    return state + (Map(id=str(uuid.uuid4()), text=action.payload, completed=False),)


def handle_toggle_todo(state: tuple, action: Action[str]) -> tuple:
    return tuple(
        todo.set("completed", not todo["completed"]) if todo["id"] == action.payload else todo
        for todo in state
    )


def handle_remove_todo(state: tuple, action: Action[str]) -> tuple:
    remaining = tuple(todo for todo in state if todo["id"] != action.payload)
    return state if len(remaining) == len(state) else remaining


todos_reducer = create_reducer(
    (),
    on(add_todo, handle_add_todo),
    on(toggle_todo, handle_toggle_todo),
    on(remove_todo, handle_remove_todo),
    on(clear_todos, lambda state, action: () if state else state),
)

errors_reducer = create_reducer(
    (),
    on(global_error, lambda state, action: state + (action.payload["error"],)),
)


# ====== 3. 自訂中介軟體 ======
def block_when_empty(store):
    """清空一個已經是空的列表時直接攔截，不交給 reducer"""
    def middleware(next_dispatch):
        def dispatch(action):
            if get_action_type(action) == clear_todos.type and not store.state["todos"]:
                print("[block_when_empty] nothing to clear")
                return None
            return next_dispatch(action)
        return dispatch
    return middleware


def add_many(*texts):
    """thunk：一次新增多個待辦事項"""
    def thunk(dispatch, get_state):
        for text in texts:
            dispatch(add_todo(text))
        return len(get_state()["todos"])
    return thunk


# ====== 4. 建立 Store ======
monitor = PerformanceMonitorMiddleware(threshold_ms=5, log_all=True)
store = create_store(
    combine_reducers({"todos": todos_reducer, "errors": errors_reducer}),
    apply_middleware(
        ThunkMiddleware,
        ErrorMiddleware(ErrorHandler(log_to_console=True)),
        block_when_empty,
        LoggerMiddleware(),
        monitor,
    ),
)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    store.subscribe(lambda state: print(f"📣 {len(state['todos'])} todos"))

    print("\n==== thunk ====")
    print("count:", store.dispatch(add_many("write docs", "review PR")))

    first_id = store.state["todos"][0]["id"]
    store.dispatch(toggle_todo(first_id))
    store.dispatch(remove_todo("missing-id"))  # 沒有變更，不會通知

    print("\n==== error ====")
    try:
        store.dispatch(add_many("a", "b"))
    except Exception as err:
        print(f"dispatch failed: {err}")

    print("\n==== short circuit ====")
    store.dispatch(clear_todos())
    store.dispatch(clear_todos())

    print("\n==== 最終狀態 ====")
    print(to_dict(store.state))
    print(monitor.get_metrics())
