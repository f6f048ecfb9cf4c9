"""
SliceStore 的 Action 定義模組。

此模組提供 Action 類別以及創建 Action 的功能。
Actions 是描述狀態變更意圖的不可變對象，至少帶有一個 type 判別欄位。
"""
from collections.abc import Mapping
from typing import Any, Callable, Dict, Generic, Optional, Union, overload

from immutables import Map as ImmutableMap

from .types import P


class Action(Generic[P]):
    """
    表示一個有類型和可選負載的動作。

    泛型參數:
        P: 負載的類型

    屬性:
        type: 動作的類型字符串
        payload: 動作的負載數據（可選）
    """
    __slots__ = ('type', 'payload')

    def __init__(self, type: str, payload: Optional[P] = None):
        super().__setattr__('type', type)
        super().__setattr__('payload', payload)

    def __setattr__(self, name, value):
        if name not in self.__slots__:
            raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")
        if hasattr(self, name):
            raise AttributeError(f"Cannot modify immutable instance attribute '{name}'")
        super().__setattr__(name, value)

    def __eq__(self, other):
        if not isinstance(other, Action):
            return False
        return self.type == other.type and self.payload == other.payload

    def __hash__(self):
        return hash((self.type, self.payload))

    def __repr__(self):
        return f"Action(type='{self.type}', payload={repr(self.payload)})"


class ActionPool:
    """
    Action 對象池，只重用無負載的 Action。

    每個 action type 最多保留一個對象，帶負載的 Action 每次都重新創建，不會被保留。
    """
    _no_payload_pool: Dict[str, Action] = {}  # type -> Action (無負載)

    @classmethod
    def get(cls, action_type: str, payload: Any = None) -> Action:
        """
        取得 Action 對象；無負載時從池中取出或建立後放入池中。

        Args:
            action_type: Action 的類型
            payload: Action 的負載，默認為 None

        Returns:
            Action 對象
        """
        if payload is not None:
            return Action(action_type, payload)

        action = cls._no_payload_pool.get(action_type)
        if action is None:
            action = Action(action_type, None)
            cls._no_payload_pool[action_type] = action
        return action

    @classmethod
    def clear(cls) -> None:
        """清空對象池。"""
        cls._no_payload_pool.clear()


def _process_payload(payload: Any) -> Any:
    """將 dict 負載轉換為不可變的 Map。"""
    if isinstance(payload, dict):
        return ImmutableMap(payload)
    return payload


def get_action_type(action: Any) -> Optional[str]:
    """
    取得 action 的判別欄位。

    支援 Action 實例、帶有 type 屬性的物件，以及含 "type" 鍵的 Mapping。

    Returns:
        action 的類型，若不存在則返回 None
    """
    if isinstance(action, Mapping):
        return action.get("type")
    return getattr(action, "type", None)


def is_action(action: Any) -> bool:
    """判斷物件是否帶有 type 判別欄位。"""
    return get_action_type(action) is not None


@overload
def create_action(action_type: str) -> Callable[[], Action[None]]: ...


@overload
def create_action(action_type: str, prepare_fn: Callable[..., P]) -> Callable[..., Action[P]]: ...


def create_action(action_type: str, prepare_fn: Optional[Callable[..., Any]] = None) -> Callable[..., Action[Any]]:
    """
    創建一個 Action 生成器函數。

    Args:
        action_type: Action 的類型標識符
        prepare_fn: 可選的預處理函數，用於在創建 Action 前處理輸入參數

    Returns:
        一個可調用的函數，用於生成指定類型的 Action

    範例:
        >>> add = create_action("add", lambda value: value)
        >>> add(5)
        Action(type='add', payload=5)
    """
    def action_creator(*args: Any, **kwargs: Any) -> Action[Any]:
        if prepare_fn:
            payload = _process_payload(prepare_fn(*args, **kwargs))
            return ActionPool.get(action_type, payload)
        elif len(args) == 1 and not kwargs:
            return ActionPool.get(action_type, _process_payload(args[0]))
        elif args or kwargs:
            payload: Dict[Union[int, str], Any] = dict(zip(range(len(args)), args))
            payload.update(kwargs)
            return ActionPool.get(action_type, _process_payload(payload))

        # 無參數，無負載
        return ActionPool.get(action_type)

    # 添加 type 屬性以便於識別
    action_creator.type = action_type  # type: ignore[attr-defined]

    return action_creator


# 根 Action：Store 建構時用來合成預設狀態，不應被任何 reducer 識別
init_store = create_action("@@slicestore/INIT")
