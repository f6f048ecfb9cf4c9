import json
import logging

from counter_store import store
from counter_actions import (
    increment, increment_by, decrement, reset,
    load_count_request, load_count_success, load_count_failure,
)
from counter_selectors import get_count, get_counter_info


def load_count(value):
    """模擬載入數據的 thunk"""
    def thunk(dispatch, get_state):
        dispatch(load_count_request())
        if value < 0:
            dispatch(load_count_failure("negative count"))
        else:
            dispatch(load_count_success(value))
        return get_count(get_state())
    return thunk


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    # 訂閱狀態變化
    store.select(get_count).subscribe(
        on_next=lambda t: print(f"計數變化: {t[0]} -> {t[1]}")
    )
    store.select(get_counter_info).subscribe(
        on_next=lambda info_tuple: print(
            f"計數器信息更新: {json.dumps(info_tuple[1], ensure_ascii=False)}"
        )
    )
    unsubscribe = store.subscribe(lambda state: print(f"通知: {state['log']}"))

    # 分發actions
    print("\n==== 開始測試基本操作 ====")
    store.dispatch(increment())
    store.dispatch(increment_by(5))
    store.dispatch(increment_by(0))  # 不會產生通知
    store.dispatch(decrement())
    store.dispatch(reset(10))
    store.dispatch(reset(10))  # 不會產生通知

    print("\n==== 開始測試 thunk ====")
    print("載入結果:", store.dispatch(load_count(42)))
    unsubscribe()
    store.dispatch(load_count(-1))

    # 打印最終狀態
    print("\n==== 最終狀態 ====")
    print(store.get_state())
