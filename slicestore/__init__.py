"""
SliceStore：單向資料流的狀態容器。

以 combine_reducers 合併 slice reducers，以 apply_middleware 組合中介軟體，
再交給 Store 管理狀態、分發 action 並通知訂閱者。
"""

import logging

from .errors import (
    SliceStoreError, ActionError, InvalidActionError, ReducerError,
    InvalidReducerError, MiddlewareError, StoreError,
    ErrorHandler, global_error_handler, handle_error
)
from .actions import Action, create_action, get_action_type, init_store
from .middleware import (
    BaseMiddleware, LoggerMiddleware, ThunkMiddleware, ErrorMiddleware,
    PerformanceMonitorMiddleware, MiddlewareChain, apply_middleware, global_error
)
from .reducers import CombinedReducer, combine_reducers, create_reducer, on
from .store import Store, create_store, StoreModule
from .store_selectors import create_selector
from .immutable_utils import to_immutable, to_dict, to_pydantic

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

# 匯出所有公開 API
__all__ = [
    # Errors
    "SliceStoreError", "ActionError", "InvalidActionError", "ReducerError",
    "InvalidReducerError", "MiddlewareError", "StoreError",
    "ErrorHandler", "global_error_handler", "handle_error",

    # Actions
    "Action", "create_action", "get_action_type", "init_store",

    # Middleware
    "BaseMiddleware", "LoggerMiddleware", "ThunkMiddleware", "ErrorMiddleware",
    "PerformanceMonitorMiddleware", "MiddlewareChain", "apply_middleware", "global_error",

    # Reducers
    "CombinedReducer", "combine_reducers", "create_reducer", "on",

    # Store
    "Store", "create_store", "StoreModule",

    # Selectors
    "create_selector",

    # Immutable helpers
    "to_immutable", "to_dict", "to_pydantic",
]
