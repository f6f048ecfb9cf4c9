import logging
from collections import deque
from typing import Any, Callable, Deque, Dict, Generic, List, Mapping, Optional

from reactivex import Observable, operators as ops
from reactivex.subject import Subject

from .actions import get_action_type, init_store, is_action
from .errors import InvalidActionError, InvalidReducerError, MiddlewareError, StoreError, handle_error
from .immutable_utils import thaw_state
from .middleware import apply_middleware
from .reducers import combine_reducers, is_same_value
from .types import S, ChainBuilder, RootReducer, State, Subscriber, Unsubscribe

logger = logging.getLogger(__name__)


class _Subscription:
    """單次註冊的訂閱者；同一個回調註冊多次時，各自的取消函數只移除自己。"""

    __slots__ = ("callback",)

    def __init__(self, callback: Subscriber):
        self.callback = callback

    def __call__(self, state: State) -> None:
        self.callback(state)

    def __repr__(self):
        return f"_Subscription({self.callback!r})"


class Store(Generic[S]):
    """
    狀態容器，持有應用的共享狀態，並在狀態變更時通知訂閱者。

    狀態只能透過 dispatch 改變：action 依序經過中介軟體鏈，最後交給根 reducer。
    訂閱者的通知發生在根 reducer 內部，因為只有那裡能以引用比較判斷變更。
    """

    def __init__(self, reducer: RootReducer, middleware: Optional[ChainBuilder] = None):
        """
        建立 Store 並立即以 init action 合成預設狀態。

        Args:
            reducer: 根 reducer，通常由 combine_reducers 產生。
            middleware: 可選的中介軟體鏈建構器（apply_middleware 的返回值）。
                未提供時 dispatch 直接呼叫 reducer。
        """
        if not callable(reducer):
            raise InvalidReducerError(
                "Store requires a callable root reducer",
                reducer_name=type(reducer).__name__,
            )
        if middleware is not None and not callable(middleware):
            raise MiddlewareError(
                "Store middleware must be a chain builder from apply_middleware",
                middleware_name=type(middleware).__name__,
            )

        self._reducer = reducer
        self._subscribers: List[Subscriber] = []
        self._state_subject = Subject()
        self._pending: Deque[Any] = deque()
        self._is_reducing = False
        self._middleware = middleware

        self._state: State = reducer(None, init_store(), self._subscribers)

        if middleware is not None:
            self._invoke = middleware(self, self._dispatch_core)
        else:
            self._invoke = self._dispatch_core

        logger.debug(
            "Store created with keys %s%s",
            list(self._state.keys()),
            " and middleware" if middleware is not None else "",
        )

    def _dispatch_core(self, action: Any) -> State:
        """
        中介軟體鏈的終點：呼叫根 reducer 並在成功後替換狀態。

        Raises:
            InvalidActionError: action 沒有 type 判別欄位
        """
        if not is_action(action):
            raise InvalidActionError(action)

        prev_state = self._state
        self._is_reducing = True
        try:
            next_state = self._reducer(prev_state, action, self._subscribers)
        finally:
            self._is_reducing = False

        self._state = next_state
        if next_state is not prev_state:
            self._state_subject.on_next((prev_state, next_state))
        return next_state

    def dispatch(self, action: Any) -> Any:
        """
        分發一個動作。

        reducer 或訂閱者執行期間呼叫的 dispatch 不會遞迴執行，
        而是排入佇列，待目前這次 dispatch 結束後依序處理，並返回 None。

        Args:
            action: 要分發的 Action。

        Returns:
            中介軟體鏈傳回的值；沒有中介軟體時為新的狀態。
        """
        if self._is_reducing:
            logger.debug("Queued %s dispatched during reduce", get_action_type(action))
            self._pending.append(action)
            return None

        try:
            result = self._invoke(action)
            while self._pending:
                self._invoke(self._pending.popleft())
        except Exception:
            self._pending.clear()
            raise
        return result

    def get_state(self) -> Dict[str, Any]:
        """
        獲取當前狀態的淺拷貝。

        Returns:
            新的 dict，修改它不會影響 Store。
        """
        return thaw_state(self._state)

    @property
    def state(self) -> State:
        """當前狀態的不可變快照。"""
        return self._state

    def subscribe(self, callback: Subscriber) -> Unsubscribe:
        """
        註冊狀態變更的回調，依註冊順序同步通知。

        Args:
            callback: 接收新狀態的函數；重複註冊會被通知多次。

        Returns:
            取消這次註冊的函數，重複呼叫不會有作用。
        """
        if not callable(callback):
            raise StoreError(
                f"Subscriber must be callable, got {type(callback).__name__}",
                operation="subscribe",
            )

        entry = _Subscription(callback)
        self._subscribers.append(entry)

        def unsubscribe() -> None:
            # 只移除這次註冊的項目；teardown 之後已不在列表中
            for index, registered in enumerate(self._subscribers):
                if registered is entry:
                    del self._subscribers[index]
                    return

        return unsubscribe

    def select(self, selector: Optional[Callable[[State], Any]] = None) -> Observable:
        """
        選擇狀態的一部分進行觀察。

        Args:
            selector: 一個函數，接收整個狀態並返回希望觀察的部分。

        Returns:
            一個可觀察對象，在選定部分變更時發送 (舊值, 新值)。
        """
        if selector is None:
            return self._state_subject.pipe(ops.share())

        return self._state_subject.pipe(
            ops.map(lambda states: (selector(states[0]), selector(states[1]))),
            ops.filter(lambda values: not is_same_value(values[0], values[1])),
            ops.distinct_until_changed(lambda values: values[1]),
        )

    def teardown(self) -> None:
        """清理中介軟體、狀態流與所有訂閱者。"""
        teardown = getattr(self._middleware, "teardown", None)
        if teardown is not None:
            teardown()
        self._state_subject.on_completed()
        self._subscribers.clear()
        self._pending.clear()

    def __enter__(self) -> "Store[S]":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.teardown()


@handle_error
def create_store(reducer: RootReducer, middleware: Optional[ChainBuilder] = None) -> Store:
    """
    創建一個新的 Store 實例。

    建構失敗時的 SliceStoreError 會先交給 global_error_handler 再重新拋出。

    Returns:
        Store: 新創建的 Store 實例。
    """
    return Store(reducer, middleware)


class StoreModule:
    """
    用於配置 Store 的工具類，類似於 NgRx 的 StoreModule。
    """

    @staticmethod
    @handle_error
    def register_root(reducers: Mapping[str, Callable[..., Any]], *middlewares: Any) -> Store:
        """
        以 slice reducers 與中介軟體一次建立 Store。

        Args:
            reducers: key 到 reducer 的映射字典。
            *middlewares: 依序套用的中介軟體。

        Returns:
            配置好的 Store 實例。
        """
        chain = apply_middleware(*middlewares) if middlewares else None
        return Store(combine_reducers(reducers), chain)
