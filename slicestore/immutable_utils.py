# slicestore/immutable_utils.py
from typing import Any, Dict, Mapping, Type, TypeVar

from immutables import Map
from pydantic import BaseModel

T = TypeVar('T', bound=BaseModel)


def freeze_state(values: Mapping[str, Any]) -> Map:
    """只凍結最外層：slice 的值保持原樣，才能用 `is` 比較是否變更"""
    if isinstance(values, Map):
        return values
    return Map(values)


def thaw_state(state: Mapping[str, Any]) -> Dict[str, Any]:
    """返回 state 的淺拷貝 dict，修改它不會影響原本的 state"""
    return dict(state.items())


def to_immutable(obj: Any) -> Any:
    """將任何對象遞迴轉換為不可變形式 (包括 Pydantic 模型)"""
    if isinstance(obj, BaseModel):
        return Map({k: to_immutable(v) for k, v in obj.model_dump().items()})
    elif isinstance(obj, Map):
        return Map({k: to_immutable(v) for k, v in obj.items()})
    elif isinstance(obj, dict):
        return Map({k: to_immutable(v) for k, v in obj.items()})
    elif isinstance(obj, list):
        return tuple(to_immutable(i) for i in obj)
    elif isinstance(obj, (set, frozenset)):
        return frozenset(to_immutable(i) for i in obj)
    return obj


def to_pydantic(map_obj: Mapping[str, Any], model_class: Type[T]) -> T:
    """將 Map 轉換回 Pydantic 模型"""
    return model_class.model_validate(to_dict(map_obj))


def to_dict(obj: Any) -> Any:
    """將 Map、Pydantic 模型及其巢狀結構轉換為普通 Python 結構，方便輸出日誌"""
    if isinstance(obj, BaseModel):
        return obj.model_dump()
    if isinstance(obj, (Map, dict)):
        return {k: to_dict(v) for k, v in obj.items()}
    elif isinstance(obj, tuple):
        return [to_dict(i) for i in obj]
    elif isinstance(obj, frozenset):
        return {to_dict(i) for i in obj}
    return obj
