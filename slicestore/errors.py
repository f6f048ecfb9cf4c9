"""
SliceStore 錯誤處理模組。

提供結構化的異常層級，以及集中式的錯誤處理器，
用於在 combine、dispatch 與中介軟體鏈中回報錯誤。
"""

import functools
import logging
import traceback
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union

T = TypeVar('T')

logger = logging.getLogger(__name__)


class SliceStoreError(Exception):
    """所有 SliceStore 異常的基礎類。"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.traceback = traceback.format_exc()

    def to_dict(self) -> Dict[str, Any]:
        """
        將錯誤轉換為可序列化的字典。

        Returns:
            包含錯誤類型、訊息與細節的字典
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": dict(self.details),
        }

    def __str__(self) -> str:
        if not self.details:
            return self.message
        details = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
        return f"{self.message} ({details})"


class ActionError(SliceStoreError):
    """與 Action 相關的錯誤。"""

    def __init__(self, message: str, action_type: Optional[str] = None, payload: Any = None, **kwargs: Any) -> None:
        details = {"action_type": action_type, "payload": payload}
        details.update(kwargs)
        super().__init__(message, details)


class InvalidActionError(ActionError):
    """Action 缺少 type 判別欄位。"""

    def __init__(self, action: Any, **kwargs: Any) -> None:
        super().__init__(
            f"Action must carry a 'type' discriminator, got {type(action).__name__}",
            action=action,
            **kwargs,
        )
        self.action = action


class ReducerError(SliceStoreError):
    """與 Reducer 相關的錯誤。"""

    def __init__(self, message: str, reducer_name: Optional[str] = None, action_type: Optional[str] = None, **kwargs: Any) -> None:
        details = {"reducer_name": reducer_name, "action_type": action_type}
        details.update(kwargs)
        super().__init__(message, details)
        self.reducer_name = reducer_name
        self.action_type = action_type


class InvalidReducerError(ReducerError):
    """Reducer 配置無效：不是可調用物件，或沒有宣告預設狀態。"""


class MiddlewareError(SliceStoreError):
    """與 Middleware 相關的錯誤。"""

    def __init__(self, message: str, middleware_name: Optional[str] = None, action_type: Optional[str] = None, **kwargs: Any) -> None:
        details = {"middleware_name": middleware_name, "action_type": action_type}
        details.update(kwargs)
        super().__init__(message, details)


class StoreError(SliceStoreError):
    """與 Store 相關的錯誤。"""

    def __init__(self, message: str, operation: str, **kwargs: Any) -> None:
        details = {"operation": operation}
        details.update(kwargs)
        super().__init__(message, details)
        self.operation = operation


class ErrorHandler:
    """
    集中式錯誤處理器，用於捕獲、日誌記錄和錯誤報告。

    所有經過 handle 的錯誤會寫入 logging，並依序交給註冊的處理函數。
    """

    def __init__(
        self,
        log_to_console: bool = True,
        log_to_file: bool = False,
        log_file: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """
        初始化 ErrorHandler。

        Args:
            log_to_console: 是否透過 logger 輸出錯誤
            log_to_file: 是否額外寫入檔案
            log_file: 日誌檔案路徑，log_to_file 為 True 時必填
            logger: 自訂 logger，預設為本模組的 logger
        """
        if log_to_file and not log_file:
            raise ValueError("log_file is required when log_to_file is enabled")
        self.log_to_console = log_to_console
        self.log_to_file = log_to_file
        self.log_file = log_file
        self.logger = logger or logging.getLogger(__name__)
        self.handlers: List[Callable[[SliceStoreError], None]] = []
        self._file_handler: Optional[logging.Handler] = None

    def register_handler(self, handler: Callable[[SliceStoreError], None]) -> None:
        """
        註冊一個錯誤處理函數。

        Args:
            handler: 接收 SliceStoreError 的函數
        """
        self.handlers.append(handler)

    def unregister_handler(self, handler: Callable[[SliceStoreError], None]) -> None:
        if handler in self.handlers:
            self.handlers.remove(handler)

    def _get_file_handler(self) -> logging.Handler:
        if self._file_handler is None:
            self._file_handler = logging.FileHandler(self.log_file, encoding="utf-8")
            self._file_handler.setFormatter(
                logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
            )
        return self._file_handler

    def handle(self, error: Union[SliceStoreError, Exception]) -> None:
        """
        處理一個錯誤：記錄日誌並通知所有註冊的處理函數。

        非 SliceStoreError 的異常會先包裝成 SliceStoreError。

        Args:
            error: 要處理的錯誤
        """
        if not isinstance(error, SliceStoreError):
            error = SliceStoreError(str(error), {"original_type": type(error).__name__})

        if self.log_to_console:
            self.logger.error("%s: %s", type(error).__name__, error)
        if self.log_to_file:
            record = self.logger.makeRecord(
                self.logger.name, logging.ERROR, __file__, 0,
                "%s: %s", (type(error).__name__, error), None,
            )
            self._get_file_handler().handle(record)

        for handler in list(self.handlers):
            handler(error)

    def close(self) -> None:
        """關閉檔案日誌處理器。"""
        if self._file_handler is not None:
            self._file_handler.close()
            self._file_handler = None


# 單例錯誤處理器
global_error_handler = ErrorHandler()


def handle_error(func: Callable[..., T]) -> Callable[..., T]:
    """
    裝飾器：把函數拋出的 SliceStoreError 交給全域錯誤處理器後再重新拋出。

    Args:
        func: 被裝飾的函數

    Returns:
        包裝後的函數
    """
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return func(*args, **kwargs)
        except SliceStoreError as err:
            global_error_handler.handle(err)
            raise
    return wrapper
