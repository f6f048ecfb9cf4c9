"""
SliceStore 的中介軟體定義模組。

此模組提供中介軟體鏈的建構函數 apply_middleware，以及數個常用的中介軟體，
用於在動作分發過程中插入日誌記錄、錯誤處理、性能監控等邏輯。

中介軟體的形狀為 store -> next -> action -> result。
繼承 BaseMiddleware 的物件則以顯式的 invoke(store, next_dispatch, action) 實作，
由 __call__ 轉成同樣的柯里化形狀。
"""

import contextlib
import inspect
import logging
import time
from collections import deque
from typing import Any, Callable, Dict, Generator, List, Optional, Tuple

from .actions import create_action, get_action_type, is_action
from .errors import ErrorHandler, MiddlewareError, global_error_handler
from .immutable_utils import to_dict
from .types import (
    ActionContext, ChainInvoker, DispatchFunction, MiddlewareFactory,
    MiddlewareFunction, NextDispatch, Store, TerminalCallback
)

logger = logging.getLogger(__name__)


# ———— Base Middleware ————
class BaseMiddleware:
    """
    基礎中介類，定義所有中介可能實現的鉤子。

    中介軟體可以介入動作分發的流程，在動作到達 Reducer 前、
    動作處理完成後或出現錯誤時執行自定義邏輯。
    """

    def on_next(self, action: Any, prev_state: Any) -> None:
        """
        在 action 發送給 reducer 之前調用。

        Args:
            action: 正在 dispatch 的 Action
            prev_state: dispatch 之前的 store.state
        """

    def on_complete(self, next_state: Any, action: Any) -> None:
        """
        在 reducer 處理完 action 之後調用。

        Args:
            next_state: dispatch 之後的最新 store.state
            action: 剛剛 dispatch 的 Action
        """

    def on_error(self, error: Exception, action: Any) -> None:
        """
        如果 dispatch 過程中拋出異常，則調用此鉤子。

        Args:
            error: 拋出的異常
            action: 導致異常的 Action
        """

    def teardown(self) -> None:
        """當 Store 清理資源時調用。"""

    @contextlib.contextmanager
    def action_context(self, action: Any, prev_state: Any) -> Generator[ActionContext, None, None]:
        """
        提供一個上下文管理器來處理 action 分發的生命週期。

        前置呼叫 on_next，正常結束且 next_state 已設置時呼叫 on_complete，
        出錯時呼叫 on_error 並重新拋出。

        Args:
            action: 要分發的 Action
            prev_state: 分發前的狀態

        Yields:
            包含上下文數據的字典，invoke 會在其中寫入 result 與 next_state
        """
        context: ActionContext = {
            'action': action,
            'prev_state': prev_state,
            'next_state': None,
            'result': None,
            'error': None,
            'timestamp': time.time(),
        }

        self.on_next(action, prev_state)

        try:
            yield context
        except Exception as err:
            context['error'] = err
            self.on_error(err, action)
            raise

        if context['next_state'] is not None:
            self.on_complete(context['next_state'], action)

    def invoke(self, store: Store, next_dispatch: NextDispatch, action: Any) -> Any:
        """
        顯式的中介軟體介面，預設在 action_context 中呼叫 next_dispatch。

        Args:
            store: Store 實例
            next_dispatch: 鏈中的下一個中介軟體，或最終交給 reducer 的回調
            action: 正在 dispatch 的 Action

        Returns:
            next_dispatch 的返回值
        """
        with self.action_context(action, store.state) as context:
            context['result'] = next_dispatch(action)
            context['next_state'] = store.state
            return context['result']

    def __call__(self, store: Store) -> MiddlewareFunction:
        def middleware(next_dispatch: NextDispatch) -> DispatchFunction:
            def dispatch(action: Any) -> Any:
                return self.invoke(store, next_dispatch, action)
            return dispatch
        return middleware


# ———— LoggerMiddleware ————
class LoggerMiddleware(BaseMiddleware):
    """
    日誌中介，記錄每個 action 發送前和發送後的 state。

    使用場景:
    - 偵錯時需要觀察每次 state 的變化。
    - 確保 action 的執行順序正確。
    """

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.INFO):
        self.logger = logger or logging.getLogger(__name__)
        self.level = level

    def on_next(self, action: Any, prev_state: Any) -> None:
        action_type = get_action_type(action)
        self.logger.log(self.level, "dispatching %s", action_type)
        self.logger.log(self.level, "state before %s: %s", action_type, to_dict(prev_state))

    def on_complete(self, next_state: Any, action: Any) -> None:
        self.logger.log(self.level, "state after %s: %s", get_action_type(action), to_dict(next_state))

    def on_error(self, error: Exception, action: Any) -> None:
        self.logger.error("error in %s: %s", get_action_type(action), error)


# ———— ThunkMiddleware ————
class ThunkMiddleware(BaseMiddleware):
    """
    支援 dispatch 函數 (thunk)，可以在 thunk 內多次 dispatch 或讀取狀態。

    範例:
        ```python
        def add_twice(value):
            def thunk(dispatch, get_state):
                dispatch(add(value))
                dispatch(add(value))
                return get_state()["number"]
            return thunk

        store.dispatch(add_twice(5))
        ```
    """

    def invoke(self, store: Store, next_dispatch: NextDispatch, action: Any) -> Any:
        if callable(action) and not is_action(action):
            return action(store.dispatch, store.get_state)
        return next_dispatch(action)


# ———— ErrorMiddleware ————
global_error = create_action("[Error] GlobalError", lambda info: info)


class ErrorMiddleware(BaseMiddleware):
    """
    捕獲 dispatch 過程中的異常，交給錯誤處理器並 dispatch 全域錯誤 Action，
    然後重新拋出原本的異常。

    使用場景:
    - 當需要統一處理所有異常並記錄或上報時。
    """

    def __init__(self, error_handler: Optional[ErrorHandler] = None):
        self.error_handler = error_handler or global_error_handler

    def invoke(self, store: Store, next_dispatch: NextDispatch, action: Any) -> Any:
        try:
            return next_dispatch(action)
        except Exception as err:
            action_type = get_action_type(action)
            self.error_handler.handle(err)
            # 處理 global_error 本身出錯時不再 dispatch，避免無限遞迴
            if action_type != global_error.type:
                self._report(store, err, action_type)
            raise

    def _report(self, store: Store, err: Exception, action_type: Any) -> None:
        """
        dispatch global_error。它本身失敗時只記錄下來，呼叫端仍會收到原本的異常。

        global_error 會再次經過本中介軟體，失敗已由 error_handler 處理過一次。
        """
        try:
            store.dispatch(global_error({
                "error": str(err),
                "action": action_type,
                "timestamp": time.time(),
            }))
        except Exception as report_err:
            logger.warning(
                "Failed to dispatch %s after %s failed: %s",
                global_error.type, action_type, report_err,
            )


# ———— PerformanceMonitorMiddleware ————
class PerformanceMonitorMiddleware(BaseMiddleware):
    """
    性能監控中間件，記錄 action 處理時間。
    """

    def __init__(self, threshold_ms: float = 100, log_all: bool = False):
        """
        初始化 PerformanceMonitorMiddleware。

        Args:
            threshold_ms: 性能警告閾值，單位為毫秒，預設為 100 毫秒
            log_all: 是否記錄所有 action 的性能指標，預設為 False (只記錄超過閾值的)
        """
        self.threshold_ms = threshold_ms
        self.log_all = log_all
        self.metrics: Dict[str, List[float]] = {}

    def invoke(self, store: Store, next_dispatch: NextDispatch, action: Any) -> Any:
        action_type = get_action_type(action) or type(action).__name__
        start_time = time.perf_counter()
        try:
            return next_dispatch(action)
        except Exception as err:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            logger.error("Action %s failed after %.2fms: %s", action_type, elapsed_ms, err)
            raise
        finally:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            self.metrics.setdefault(action_type, []).append(elapsed_ms)
            if elapsed_ms > self.threshold_ms:
                logger.warning(
                    "Action %s exceeded threshold (%sms): took %.2fms",
                    action_type, self.threshold_ms, elapsed_ms,
                )
            elif self.log_all:
                logger.info("Action %s took %.2fms", action_type, elapsed_ms)

    def get_metrics(self) -> Dict[str, Dict[str, float]]:
        """
        獲取性能指標統計信息。

        Returns:
            每個 action type 的 avg、max、min 與 count
        """
        result = {}
        for action_type, times in self.metrics.items():
            if not times:
                continue
            result[action_type] = {
                'avg': sum(times) / len(times),
                'max': max(times),
                'min': min(times),
                'count': len(times),
            }
        return result


# ———— Chain builder ————
def _resolve_middleware(middleware: Any) -> MiddlewareFactory:
    """接受類和實例，如果是類則直接實例化。"""
    instance = middleware() if inspect.isclass(middleware) else middleware
    if not callable(instance):
        raise MiddlewareError(
            f"Middleware must be callable as store -> next -> action, got {type(instance).__name__}",
            middleware_name=type(instance).__name__,
        )
    return instance


class MiddlewareChain:
    """
    中介軟體鏈建構器：chain(store, terminal) 返回單一的 invoke(action)。

    每次 invoke 都會拷貝一份私有的中介軟體佇列，因此重入的 dispatch
    不會共享彼此的進度。先註冊的中介軟體先執行，並包裹後面的中介軟體；
    佇列耗盡時 next 即為 terminal。
    """

    def __init__(self, middlewares: Tuple[MiddlewareFactory, ...]):
        self.middlewares = middlewares

    def __call__(self, store: Store, terminal: TerminalCallback) -> ChainInvoker:
        middlewares = self.middlewares

        def invoke(action: Any) -> Any:
            queue = deque(middlewares)

            def advance(current: Any) -> Any:
                if queue:
                    middleware = queue.popleft()
                    return middleware(store)(advance)(current)
                return terminal(current)

            return advance(action)

        return invoke

    def teardown(self) -> None:
        for middleware in self.middlewares:
            if isinstance(middleware, BaseMiddleware):
                middleware.teardown()

    def __len__(self) -> int:
        return len(self.middlewares)

    def __repr__(self):
        names = [getattr(m, "__name__", type(m).__name__) for m in self.middlewares]
        return f"MiddlewareChain({names!r})"


def apply_middleware(*middlewares: Any) -> MiddlewareChain:
    """
    把有序的中介軟體列表組合成一個中介軟體鏈建構器。

    Args:
        *middlewares: 中介軟體工廠 (store -> next -> action)、BaseMiddleware
            實例，或可無參數實例化的中介軟體類別。

    Returns:
        MiddlewareChain，交給 Store 後由 Store 以 (store, terminal) 建構。

    Raises:
        MiddlewareError: 任何一項不是可調用物件。
    """
    return MiddlewareChain(tuple(_resolve_middleware(m) for m in middlewares))
