from typing import Any, Callable, List, Optional, Tuple

from .types import MemoizedSelector


def create_selector(*selectors: Callable[[Any], Any], result_fn: Optional[Callable[..., Any]] = None, deep: bool = False, maxsize: int = 16) -> MemoizedSelector:
    """
    創建一個複合選擇器，依輸入是否變更來決定是否重新計算。

    Args:
        *selectors: 多個輸入選擇器，這些函數會從 state 中提取對應的值
        result_fn: 處理輸出結果的函數，將多個選擇器的輸出進行處理
        deep: 是否以 == 比較輸入（預設為 False，只比較引用）
        maxsize: 緩存的最大條目數

    Returns:
        經過快取優化的 selector 函數
    """
    if not selectors:
        raise ValueError("create_selector needs at least one input selector")

    # 如果沒有 result_fn 且只有一個選擇器，直接返回該選擇器
    if not result_fn and len(selectors) == 1:
        return selectors[0]

    if not result_fn:
        result_fn = lambda *args: args  # noqa: E731

    cache: List[Tuple[Tuple[Any, ...], Any]] = []
    misses = 0
    hits = 0

    def _matches(inputs: Tuple[Any, ...], cached_inputs: Tuple[Any, ...]) -> bool:
        if deep:
            return inputs == cached_inputs
        return all(a is b for a, b in zip(inputs, cached_inputs))

    def selector(state: Any) -> Any:
        nonlocal misses, hits
        inputs = tuple(select(state) for select in selectors)

        for cached_inputs, cached_result in cache:
            if _matches(inputs, cached_inputs):
                hits += 1
                return cached_result

        misses += 1
        result = result_fn(*inputs)
        cache.append((inputs, result))
        if len(cache) > maxsize:
            cache.pop(0)
        return result

    def cache_info() -> Tuple[int, int, int, int]:
        return (hits, misses, maxsize, len(cache))

    def cache_clear() -> None:
        nonlocal misses, hits
        cache.clear()
        misses = hits = 0

    selector.cache_info = cache_info  # type: ignore[attr-defined]
    selector.cache_clear = cache_clear  # type: ignore[attr-defined]

    return selector
