import logging

from slicestore import LoggerMiddleware, StoreModule, ThunkMiddleware
from counter_reducers import actions_log_reducer, counter_reducer

# 創建Store：註冊 reducers 與中介軟體
store = StoreModule.register_root(
    {"counter": counter_reducer, "log": actions_log_reducer},
    ThunkMiddleware,
    LoggerMiddleware(level=logging.DEBUG),
)
