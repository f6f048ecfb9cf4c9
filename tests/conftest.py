"""
Shared pytest fixtures for SliceStore tests.
"""

import pytest

from slicestore import Store, combine_reducers, get_action_type
from slicestore.actions import ActionPool


def number_reducer(state=0, action=None):
    action_type = get_action_type(action)
    if action_type == "add":
        return state + action["value"]
    if action_type == "subtract":
        return state - action["value"]
    return state


def todos_reducer(state=(), action=None):
    if get_action_type(action) == "add_todo":
        return state + (action["text"],)
    return state


def add(value):
    return {"type": "add", "value": value}


def subtract(value):
    return {"type": "subtract", "value": value}


@pytest.fixture(autouse=True)
def clear_action_pool():
    """Pooled actions are class-level; start every test with an empty pool."""
    ActionPool.clear()
    yield
    ActionPool.clear()


@pytest.fixture
def root_reducer():
    return combine_reducers({"number": number_reducer, "todos": todos_reducer})


@pytest.fixture
def store(root_reducer):
    """Provide a fresh Store without middleware."""
    return Store(root_reducer)


@pytest.fixture
def received():
    """A subscriber that records every state it is notified with."""
    states = []

    class Recorder:
        def __call__(self, state):
            states.append(state)

        @property
        def states(self):
            return states

    return Recorder()


@pytest.fixture(name="number_reducer")
def number_reducer_fixture():
    return number_reducer


@pytest.fixture(name="add")
def add_fixture():
    return add


@pytest.fixture(name="subtract")
def subtract_fixture():
    return subtract
