"""
SliceStore 共用的類型定義。

集中宣告 TypeVar、函數別名與 Protocol，供各模組與類型存根共用。
"""

from typing import Any, Callable, Dict, Mapping, Optional, Sequence, TypeVar

from typing_extensions import Protocol, TypedDict

# ———— TypeVars ————
S = TypeVar("S")  # 狀態類型
P = TypeVar("P")  # 負載類型
R = TypeVar("R")
Input = TypeVar("Input")
Output = TypeVar("Output")

# ———— 基本函數別名 ————
State = Mapping[str, Any]
Subscriber = Callable[[State], None]
Unsubscribe = Callable[[], None]
ActionHandler = Callable[[Any, Any], Any]
DispatchFunction = Callable[[Any], Any]
NextDispatch = Callable[[Any], Any]
TerminalCallback = Callable[[Any], Any]
StateSelector = Callable[[Any], Any]
ResultSelector = Callable[..., Any]
MemoizedSelector = Callable[[Any], Any]


class ActionContext(TypedDict, total=False):
    """中介軟體在單次 dispatch 期間共享的上下文資料。"""
    action: Any
    prev_state: Any
    next_state: Any
    result: Any
    error: Optional[BaseException]
    timestamp: float


class Store(Protocol):
    """中介軟體所看到的 Store 介面。"""

    def dispatch(self, action: Any) -> Any: ...

    def get_state(self) -> Dict[str, Any]: ...

    @property
    def state(self) -> State: ...


class Reducer(Protocol):
    """Reducer 契約：(previous_slice_state, action) -> next_slice_state。"""

    def __call__(self, state: Any, action: Any) -> Any: ...


class RootReducer(Protocol):
    """合併後的根 reducer，額外接收訂閱者列表。"""

    def __call__(
        self,
        state: Optional[State] = None,
        action: Any = None,
        subscribers: Sequence[Subscriber] = (),
    ) -> State: ...


MiddlewareFunction = Callable[[NextDispatch], DispatchFunction]
MiddlewareFactory = Callable[[Store], MiddlewareFunction]


ChainInvoker = Callable[[Any], Any]
ChainBuilder = Callable[[Store, TerminalCallback], ChainInvoker]
