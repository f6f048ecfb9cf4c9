from slicestore import create_selector

# 定義Selectors
get_counter_state = lambda state: state["counter"]
get_count = create_selector(
    get_counter_state, result_fn=lambda counter: counter.count
)
get_loading = create_selector(
    get_counter_state, result_fn=lambda counter: counter.loading
)
get_last_updated = create_selector(
    get_counter_state, result_fn=lambda counter: counter.last_updated
)
# 組合選擇器
get_counter_info = create_selector(
    get_count,
    get_last_updated,
    result_fn=lambda count, last_updated: {"count": count, "last_updated": last_updated},
)
