"""Unit tests for Store behavior."""

import pytest

from slicestore import (
    InvalidActionError,
    InvalidReducerError,
    MiddlewareError,
    ReducerError,
    Store,
    StoreError,
    StoreModule,
    combine_reducers,
    create_action,
    create_store,
    get_action_type,
    global_error_handler,
)


@pytest.mark.unit
@pytest.mark.store
def test_store_synthesizes_default_state_on_construction(store):
    """A new store holds every configured key at its reducer's default"""
    assert store.get_state() == {"number": 0, "todos": ()}


@pytest.mark.unit
@pytest.mark.store
def test_get_state_returns_a_detached_copy(store, add):
    snapshot = store.get_state()
    snapshot["number"] = 99
    snapshot["extra"] = True

    assert store.get_state() == {"number": 0, "todos": ()}

    store.dispatch(add(1))
    assert store.get_state()["number"] == 1
    assert snapshot["number"] == 99


@pytest.mark.unit
@pytest.mark.store
def test_state_property_is_the_immutable_snapshot(store):
    with pytest.raises(TypeError):
        store.state["number"] = 1


@pytest.mark.unit
@pytest.mark.store
def test_dispatch_without_middleware_returns_next_state(store, add):
    result = store.dispatch(add(5))

    assert result is store.state
    assert result["number"] == 5


@pytest.mark.unit
@pytest.mark.store
def test_unrecognized_action_changes_nothing_and_notifies_nobody(store, received):
    before = store.get_state()
    store.subscribe(received)

    store.dispatch({"type": "unknown"})

    assert store.get_state() == before
    assert received.states == []


@pytest.mark.unit
@pytest.mark.store
def test_adding_zero_does_not_notify(store, received, add):
    """The reducer branch runs but returns the same value, so no change is detected"""
    store.subscribe(received)

    store.dispatch(add(0))

    assert received.states == []


@pytest.mark.unit
@pytest.mark.store
@pytest.mark.parametrize("start", [1000, 10**20, 0.5, -2.75])
def test_adding_zero_to_uncached_numbers_does_not_notify(received, add, start):
    """Numbers outside the small-int cache compare by value, not by object identity"""
    def number(state=start, action=None):
        if get_action_type(action) == "add":
            return state + action["value"]
        return state

    store = Store(combine_reducers({"number": number}))
    before = store.state
    store.subscribe(received)

    store.dispatch(add(0))

    assert received.states == []
    assert store.state is before
    assert store.get_state()["number"] == start


@pytest.mark.unit
@pytest.mark.store
def test_select_skips_equal_numbers_from_new_objects(add):
    def number(state=1000, action=None):
        if get_action_type(action) == "add":
            return state + action["value"]
        return state

    store = Store(combine_reducers({"number": number, "log": lambda state=(), action=None: state + (1,)}))
    emitted = []
    store.select(lambda state: state["number"]).subscribe(emitted.append)

    store.dispatch(add(0))
    store.dispatch(add(1))

    assert emitted == [(1000, 1001)]


@pytest.mark.unit
@pytest.mark.store
def test_subscribers_are_notified_in_registration_order(store, add):
    calls = []
    store.subscribe(lambda state: calls.append("A"))
    store.subscribe(lambda state: calls.append("B"))

    store.dispatch(add(1))

    assert calls == ["A", "B"]


@pytest.mark.unit
@pytest.mark.store
def test_subscriber_receives_the_next_state(store, received, add):
    store.subscribe(received)

    store.dispatch(add(4))

    assert len(received.states) == 1
    assert received.states[0] is store.state
    assert received.states[0]["number"] == 4


@pytest.mark.unit
@pytest.mark.store
def test_same_callback_registered_twice_is_called_twice(store, received, add):
    store.subscribe(received)
    store.subscribe(received)

    store.dispatch(add(1))

    assert len(received.states) == 2


@pytest.mark.unit
@pytest.mark.store
def test_unsubscribe_stops_notifications_and_is_idempotent(store, received, add):
    unsubscribe = store.subscribe(received)
    store.dispatch(add(1))

    unsubscribe()
    unsubscribe()
    store.dispatch(add(1))

    assert len(received.states) == 1


@pytest.mark.unit
@pytest.mark.store
def test_unsubscribe_removes_only_one_registration(store, received, add):
    first = store.subscribe(received)
    store.subscribe(received)

    first()
    store.dispatch(add(1))

    assert len(received.states) == 1


@pytest.mark.unit
@pytest.mark.store
def test_unsubscribe_removes_its_own_registration_and_keeps_order(store, add):
    calls = []

    def a(state):
        calls.append("A")

    def b(state):
        calls.append("B")

    store.subscribe(a)
    store.subscribe(b)
    last_a = store.subscribe(a)

    last_a()
    store.dispatch(add(1))

    assert calls == ["A", "B"]


@pytest.mark.unit
@pytest.mark.store
def test_unsubscribe_after_teardown_does_nothing(store, received, add):
    unsubscribe = store.subscribe(received)
    store.teardown()

    unsubscribe()
    unsubscribe()

    store.subscribe(received)
    store.dispatch(add(1))
    assert len(received.states) == 1


@pytest.mark.unit
@pytest.mark.store
def test_subscribe_rejects_non_callables(store):
    with pytest.raises(StoreError) as exc_info:
        store.subscribe("not a callback")

    assert exc_info.value.operation == "subscribe"


@pytest.mark.unit
@pytest.mark.store
@pytest.mark.parametrize("action", [{"value": 1}, object(), None])
def test_dispatch_rejects_actions_without_type(store, received, action):
    store.subscribe(received)

    with pytest.raises(InvalidActionError):
        store.dispatch(action)

    assert store.get_state() == {"number": 0, "todos": ()}
    assert received.states == []


@pytest.mark.unit
@pytest.mark.store
def test_dispatch_accepts_action_objects():
    number_added = create_action("add", lambda value: {"value": value})

    def reducer(state=0, action=None):
        if get_action_type(action) == "add":
            return state + action.payload["value"]
        return state

    store = Store(combine_reducers({"number": reducer}))
    store.dispatch(number_added(3))

    assert store.get_state() == {"number": 3}


@pytest.mark.unit
@pytest.mark.store
def test_reducer_failure_leaves_state_untouched(received):
    def fragile(state=0, action=None):
        if get_action_type(action) == "boom":
            raise RuntimeError("reducer exploded")
        return state

    store = Store(combine_reducers({"number": fragile}))
    store.subscribe(received)
    before = store.state

    with pytest.raises(ReducerError):
        store.dispatch({"type": "boom"})

    assert store.state is before
    assert received.states == []


@pytest.mark.unit
@pytest.mark.store
def test_failing_subscriber_aborts_dispatch_before_state_assignment(store, add):
    before = store.state

    def failing(state):
        raise RuntimeError("subscriber exploded")

    store.subscribe(failing)

    with pytest.raises(RuntimeError, match="subscriber exploded"):
        store.dispatch(add(1))

    assert store.state is before


@pytest.mark.unit
@pytest.mark.store
def test_dispatch_from_subscriber_is_queued_until_current_dispatch_finishes(store, add):
    """A subscriber's dispatch runs after the in-flight dispatch, not inside it"""
    seen = []

    def chain_more(state):
        seen.append(state["number"])
        if state["number"] == 5:
            assert store.dispatch(add(1)) is None
            # the queued action has not run yet
            assert store.get_state()["number"] == 0

    store.subscribe(chain_more)

    result = store.dispatch(add(5))

    assert result["number"] == 5
    assert seen == [5, 6]
    assert store.get_state()["number"] == 6


@pytest.mark.unit
@pytest.mark.store
def test_queued_actions_are_dropped_when_the_dispatch_fails(store, add):
    def queue_then_fail(state):
        store.dispatch(add(100))
        raise RuntimeError("stop")

    unsubscribe = store.subscribe(queue_then_fail)

    with pytest.raises(RuntimeError):
        store.dispatch(add(1))

    unsubscribe()
    store.dispatch(add(2))

    assert store.get_state()["number"] == 2


@pytest.mark.unit
@pytest.mark.store
def test_store_rejects_non_callable_reducer():
    with pytest.raises(InvalidReducerError):
        Store({"number": 0})


@pytest.mark.unit
@pytest.mark.store
def test_store_rejects_non_callable_middleware(root_reducer):
    with pytest.raises(MiddlewareError):
        Store(root_reducer, middleware=["not", "a", "chain"])


@pytest.mark.unit
@pytest.mark.store
def test_select_emits_old_and_new_values_only_when_slice_changes(store, add):
    emitted = []
    store.select(lambda state: state["number"]).subscribe(on_next=emitted.append)

    store.dispatch(add(5))
    store.dispatch({"type": "add_todo", "text": "write tests"})
    store.dispatch({"type": "noop"})
    store.dispatch(add(2))

    assert emitted == [(0, 5), (5, 7)]


@pytest.mark.unit
@pytest.mark.store
def test_select_without_selector_emits_whole_states(store, add):
    emitted = []
    store.select().subscribe(on_next=emitted.append)

    store.dispatch(add(1))

    assert len(emitted) == 1
    old_state, new_state = emitted[0]
    assert old_state["number"] == 0
    assert new_state is store.state


@pytest.mark.unit
@pytest.mark.store
def test_teardown_completes_streams_and_drops_subscribers(store, received, add):
    completed = []
    store.select().subscribe(on_completed=lambda: completed.append(True))
    store.subscribe(received)

    with store:
        pass

    store.dispatch(add(1))

    assert completed == [True]
    assert received.states == []


@pytest.mark.unit
@pytest.mark.store
def test_create_store_and_store_module_build_equivalent_stores(root_reducer, number_reducer):
    created = create_store(root_reducer)
    registered = StoreModule.register_root({"number": number_reducer})

    assert isinstance(created, Store)
    assert created.get_state() == {"number": 0, "todos": ()}
    assert registered.get_state() == {"number": 0}


@pytest.mark.unit
@pytest.mark.store
def test_store_factories_report_configuration_errors_to_global_handler():
    seen = []
    global_error_handler.register_handler(seen.append)
    try:
        with pytest.raises(InvalidReducerError):
            create_store({"number": 0})
        with pytest.raises(InvalidReducerError):
            StoreModule.register_root({"number": lambda state, action: state})
    finally:
        global_error_handler.unregister_handler(seen.append)

    assert [type(error) for error in seen] == [InvalidReducerError, InvalidReducerError]
