import inspect
import logging
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from immutables import Map

from .actions import Action, get_action_type, init_store
from .errors import InvalidReducerError, ReducerError, SliceStoreError
from .immutable_utils import freeze_state
from .types import S, ActionHandler, Reducer, State, Subscriber

logger = logging.getLogger(__name__)

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)

# 這些型別的值相等即視為同一個值，與物件是否被快取無關
_SCALAR_TYPES = (int, float, complex, str, bytes, bool, type(None))


def is_same_value(prev: Any, next_value: Any) -> bool:
    """
    判斷 slice 是否未變更。

    一般物件只比較引用；不可變的純量 (數字、字串、bytes、None) 在型別相同時比較值，
    因此 `1000 + 0` 與 `0.5 + 0` 都不算變更。
    """
    if next_value is prev:
        return True
    return (
        type(next_value) is type(prev)
        and isinstance(prev, _SCALAR_TYPES)
        and next_value == prev
    )


def create_reducer(initial_state: S, *handlers) -> Reducer:
    """
    創建一個 reducer 函式，用於處理狀態變更。

    Args:
        initial_state: 初始狀態。
        *handlers: 一系列 (action_type, handler_fn) 元組或使用 on 函式創建的處理器。

    Returns:
        一個 reducer 函式，根據 action 的類型執行對應的處理邏輯。
    """
    action_handlers: Dict[str, ActionHandler] = {}

    for handler in handlers:
        if isinstance(handler, tuple) and len(handler) == 2:
            action_type, handler_fn = handler
            action_handlers[action_type] = handler_fn
        else:
            action_handlers.update(handler)

    def reducer(state: S = initial_state, action: Action = None) -> S:
        """
        Reducer 函式，根據 action 處理狀態變更。

        沒有 type 的 action 與未註冊的 action 一律視為無法識別，返回原狀態。
        """
        action_type = get_action_type(action)
        if action_type is None:
            return state

        handler = action_handlers.get(action_type)
        if handler:
            return handler(state, action)
        return state

    reducer.initial_state = initial_state
    reducer.handlers = action_handlers

    return reducer


def on(action_creator_or_type, handler):
    """
    創建一個 action 類型與處理函式的映射。

    Args:
        action_creator_or_type: Action 創建器函式或 Action 類型字串。
        handler: 處理該 Action 的函式，接收 (state, action) 並返回新狀態。

    Returns:
        一個包含 {action_type: handler} 的字典。
    """
    if callable(action_creator_or_type) and hasattr(action_creator_or_type, 'type'):
        action_type = action_creator_or_type.type
    else:
        action_type = str(action_creator_or_type)

    return {action_type: handler}


def _reducer_name(reducer: Callable[..., Any]) -> str:
    return getattr(reducer, "__qualname__", None) or type(reducer).__name__


def declared_default(key: str, reducer: Callable[..., Any]) -> Any:
    """
    找出 reducer 宣告的預設狀態。

    優先使用 initial_state 屬性（create_reducer 與 CombinedReducer 都會設置），
    否則讀取第一個位置參數的預設值。

    Raises:
        InvalidReducerError: reducer 沒有宣告任何預設狀態
    """
    if hasattr(reducer, "initial_state"):
        return reducer.initial_state

    try:
        signature = inspect.signature(reducer)
    except (TypeError, ValueError) as err:
        raise InvalidReducerError(
            f"Cannot inspect reducer for key '{key}'",
            reducer_name=_reducer_name(reducer),
            key=key,
        ) from err

    params = [p for p in signature.parameters.values() if p.kind in _POSITIONAL]
    if not params or params[0].default is inspect.Parameter.empty:
        raise InvalidReducerError(
            f"Reducer for key '{key}' must declare a default state",
            reducer_name=_reducer_name(reducer),
            key=key,
        )
    return params[0].default


class CombinedReducer:
    """
    把多個 slice reducer 合併成一個作用於整個 state 的根 reducer。

    每個 key 由對應的 reducer 負責。變更偵測比較引用（`is`），不可變純量則比較值
    （見 is_same_value），因此 slice reducer 在狀態不變時必須返回收到的同一個物件
    或相等的純量。

    Attributes:
        _reducers: key 到 reducer 的不可變映射。
        _defaults: key 到 reducer 預設狀態的不可變映射。
    """

    def __init__(self, reducers: Mapping[str, Callable[..., Any]]):
        if not isinstance(reducers, Mapping) or not reducers:
            raise InvalidReducerError(
                "combine_reducers expects a non-empty mapping of key to reducer",
                reducer_name=None,
                config_type=type(reducers).__name__,
            )

        for key, reducer in reducers.items():
            if not callable(reducer):
                raise InvalidReducerError(
                    f"Reducer for key '{key}' is not callable",
                    reducer_name=type(reducer).__name__,
                    key=key,
                )

        self._reducers = Map(reducers)
        self._defaults = Map(
            {key: declared_default(key, reducer) for key, reducer in reducers.items()}
        )

    @property
    def keys(self) -> Tuple[str, ...]:
        return tuple(self._reducers.keys())

    @property
    def initial_state(self) -> Map:
        """以 init action 合成的完整預設狀態。"""
        return self(None, init_store())

    def get_reducers(self) -> Dict[str, Callable[..., Any]]:
        """
        獲取當前所有的 reducers。

        Returns:
            一個包含所有 key 與 reducer 的字典拷貝。
        """
        return dict(self._reducers.items())

    def __call__(
        self,
        state: Optional[State] = None,
        action: Any = None,
        subscribers: Sequence[Subscriber] = (),
    ) -> State:
        """
        使用所有 reducers 處理 action 並返回新狀態。

        Args:
            state: 當前的 root state；為 None 時每個 slice 使用自己的預設值。
            action: 要處理的 action。
            subscribers: 狀態變更時依序同步通知的回調。

        Returns:
            有任何 slice 變更時返回新的 Map，否則返回傳入的同一個 state。
        """
        changed = state is None or len(state) != len(self._reducers)
        next_values = {}

        for key, reducer in self._reducers.items():
            if state is not None and key in state:
                prev_value = state[key]
            else:
                prev_value = self._defaults[key]
                changed = True

            try:
                next_value = reducer(prev_value, action)
            except SliceStoreError:
                raise
            except Exception as err:
                raise ReducerError(
                    f"Reducer for key '{key}' failed: {err}",
                    reducer_name=_reducer_name(reducer),
                    action_type=get_action_type(action),
                    key=key,
                ) from err

            if not is_same_value(prev_value, next_value):
                changed = True
            next_values[key] = next_value

        if not changed:
            return state

        next_state = freeze_state(next_values)
        for subscriber in list(subscribers):
            subscriber(next_state)
        return next_state

    def __repr__(self):
        return f"CombinedReducer(keys={list(self.keys)!r})"


def combine_reducers(reducers: Mapping[str, Callable[..., Any]]) -> CombinedReducer:
    """
    合併 {key: reducer} 映射為單一根 reducer。

    Args:
        reducers: 非空的 key 到 reducer 映射；之後修改這個映射不會影響結果。

    Returns:
        CombinedReducer 實例。

    Raises:
        InvalidReducerError: 映射為空、含有非可調用值，或 reducer 沒有預設狀態。
    """
    combined = CombinedReducer(reducers)
    logger.debug("Combined reducers for keys %s", list(combined.keys))
    return combined
