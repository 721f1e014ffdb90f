"""
Notification Fan-out：把每一筆新的抽籤結果推給所有監控端

設計：
- 每個訂閱者有自己的 asyncio.Queue（綁定訂閱時的 event loop）
- publish() 只負責排程 put，不等待任何傳送，可以在鎖內、在任何 thread 呼叫
- loop.call_soon_threadsafe 是 FIFO，同一個訂閱者收到的順序 = publish 的順序
- 傳送失敗（loop 已關閉、queue 滿了）只會移除該訂閱者，不會往上拋
"""
import asyncio
import itertools
import threading
import logging
from typing import Dict, Optional

logger = logging.getLogger(__name__)

# 佇列中代表「訂閱已結束」的 sentinel
_CLOSED = None


class Subscription:
    """單一監控端的事件串流"""

    def __init__(self, subscription_id: int, loop: asyncio.AbstractEventLoop, maxsize: int):
        self.id = subscription_id
        self.loop = loop
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self.closed = False

    def _deliver(self, event: dict) -> None:
        # 在訂閱者的 loop 內執行
        if self.closed:
            return
        try:
            self.queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning(f"Subscriber {self.id} is too slow, dropping its stream")
            self._close_in_loop()

    def _close_in_loop(self) -> None:
        self.closed = True
        # 清空後放入 sentinel，讓等待中的 consumer 醒來
        while not self.queue.empty():
            self.queue.get_nowait()
        self.queue.put_nowait(_CLOSED)

    async def next_event(self) -> Optional[dict]:
        """等待下一個事件；訂閱結束時回傳 None"""
        if self.closed and self.queue.empty():
            return None
        return await self.queue.get()


class NotificationHub:
    """publish / subscribe 介面"""

    def __init__(self, queue_size: int = 1000):
        self._queue_size = queue_size
        self._subscribers: Dict[int, Subscription] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> Subscription:
        """
        註冊新的訂閱者

        參數：
            loop: 訂閱者所在的 event loop，預設為目前執行中的 loop

        注意：
            - 初始快照由 DrawService.subscribe() 在同一把鎖內產生，
              不要直接在 API 層呼叫這個方法
        """
        loop = loop or asyncio.get_running_loop()
        subscription = Subscription(next(self._ids), loop, self._queue_size)
        with self._lock:
            self._subscribers[subscription.id] = subscription
        logger.info(f"Subscriber {subscription.id} registered")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            removed = self._subscribers.pop(subscription.id, None)
        subscription.closed = True
        if removed is not None:
            logger.info(f"Subscriber {subscription.id} removed")

    def publish(self, event: dict) -> int:
        """
        把事件排進每個訂閱者的佇列

        返回：
            成功排程的訂閱者數量
        """
        with self._lock:
            subscribers = list(self._subscribers.values())

        delivered = 0
        for subscription in subscribers:
            if subscription.closed:
                self.unsubscribe(subscription)
                continue
            try:
                subscription.loop.call_soon_threadsafe(subscription._deliver, event)
                delivered += 1
            except RuntimeError as e:
                # loop 已經關閉
                logger.debug(f"Dropping subscriber {subscription.id}: {e}")
                self.unsubscribe(subscription)
        return delivered
