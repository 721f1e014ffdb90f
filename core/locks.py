"""
並發控制工具

Pool 與 Ledger 只存在記憶體內，FastAPI 的同步 endpoint 會在 thread pool 內執行，
所以用一把 process 內的互斥鎖（threading.Lock）保護整組狀態。

鎖的範圍是「Pool + Ledger」這一對，一次抽籤的所有步驟都在同一把鎖底下完成。
"""
import threading
from functools import wraps
import logging

logger = logging.getLogger(__name__)


def new_state_lock() -> threading.Lock:
    """
    建立保護 Pool + Ledger 的鎖

    注意：
        - 不可重入：被 @with_state_lock 包住的方法不能互相呼叫
        - 鎖內不得 await 或做任何 I/O
    """
    return threading.Lock()


def with_state_lock(func):
    """
    Method decorator：在 self._lock 底下執行整個方法

    使用方式：
        class DrawService:
            def __init__(self):
                self._lock = new_state_lock()

            @with_state_lock
            def draw(self, raw_address):
                # 整段都是 critical section
                ...

    如果函式內發生異常：
        - 鎖一定會被釋放
        - 異常會被重新拋出（讓上層處理）
    """
    @wraps(func)
    def wrapper(self, *args, **kwargs):
        lock = getattr(self, "_lock", None)
        if lock is None:
            raise ValueError(
                f"@with_state_lock requires 'self._lock', "
                f"but {type(self).__name__} has none"
            )

        with lock:
            try:
                return func(self, *args, **kwargs)
            except Exception as e:
                logger.error(f"Locked operation failed in {func.__name__}: {e}", exc_info=True)
                raise

    return wrapper
