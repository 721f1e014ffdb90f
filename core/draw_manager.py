"""
Draw Manager：抽籤核心

職責：
1. 為每個 identity 分配恰好一支籤（不放回）
2. 查詢 identity 的抽籤狀態
3. 產生監控快照並讓新的監控端訂閱
4. 提供與正式籤池隔離的測試抽籤（SandboxDrawer）

並發原則：
- Pool 與 Ledger 只被 DrawService 修改
- 所有讀寫都在同一把鎖內完成，不會看到半套狀態
- 推播只排程，不在鎖內等待任何傳送
"""
import random
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple
import logging

from models import (
    Category,
    Concept,
    DrawOutcome,
    DrawResult,
    LedgerEntry,
    Snapshot,
    StatusResult,
)
from core.identity import resolve
from core.ledger import AllocationLedger
from core.locks import new_state_lock, with_state_lock
from core.notifier import NotificationHub, Subscription
from core.pool import ConceptPool
from core.exceptions import InvalidIdentity
from services.category_service import build_catalog
from services.monitor_service import build_snapshot

logger = logging.getLogger(__name__)

PARTICIPANT_DRAW_EVENT = "participantDraw"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DrawService:
    """整個 process 只建立一次的抽籤服務"""

    def __init__(
        self,
        categories: Dict[str, Category],
        concepts: List[Concept],
        hub: Optional[NotificationHub] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self._categories = dict(categories)
        self._pool = ConceptPool(concepts, rng=rng)
        self._ledger = AllocationLedger()
        self._hub = hub or NotificationHub()
        self._clock = clock
        self._lock = new_state_lock()

    @classmethod
    def from_table(cls, table: dict, **kwargs) -> "DrawService":
        """從類別表建立服務（會先驗證類別表）"""
        categories, concepts = build_catalog(table)
        return cls(categories, concepts, **kwargs)

    @property
    def total_concepts(self) -> int:
        return self._pool.total

    @property
    def hub(self) -> NotificationHub:
        return self._hub

    @with_state_lock
    def draw(self, raw_address) -> DrawResult:
        """
        為請求位址抽一支籤

        流程（全部在鎖內）：
        1. 解析 identity，失敗回傳 INVALID
        2. 已有紀錄回傳 ALREADY_DRAWN（不改變任何狀態）
        3. 籤池已空回傳 EXHAUSTED
        4. 隨機抽一支籤
        5. 建立 LedgerEntry（含類別顏色與時間）
        6. 寫入 Ledger
        7. 推播給監控端（失敗不影響 4-6）
        8. 回傳 ASSIGNED

        參數：
            raw_address: HTTP 層給的原始位址

        返回：
            DrawResult，remaining 為鎖內觀察到的剩餘數量
        """
        # 1. 解析 identity
        try:
            identity = resolve(raw_address)
        except InvalidIdentity:
            logger.warning(f"Rejected draw from invalid address {raw_address!r}")
            return DrawResult.invalid()

        # 2. 已經抽過
        existing = self._ledger.lookup(identity)
        if existing is not None:
            logger.info(f"User {identity} attempted to draw again but was blocked")
            return DrawResult(
                outcome=DrawOutcome.ALREADY_DRAWN,
                entry=existing,
                remaining=self._pool.remaining_count(),
            )

        # 3. 籤池已空
        if self._pool.is_empty():
            logger.info(f"User {identity} attempted to draw, but no concepts remain")
            return DrawResult(outcome=DrawOutcome.EXHAUSTED, remaining=0)

        # 4. 抽籤
        concept = self._pool.draw_random()

        # 5. 建立紀錄
        entry = LedgerEntry(
            identity=identity,
            concept=concept.label,
            category=concept.category.id,
            display_color=concept.category.display_color,
            timestamp=self._clock().isoformat(),
        )

        # 6. 寫入 Ledger，失敗時把籤放回，避免籤消失
        try:
            self._ledger.record(identity, entry)
        except Exception:
            self._pool.restore(concept)
            raise

        remaining = self._pool.remaining_count()
        logger.info(
            f"User {identity} drew concept: \"{concept.label}\". "
            f"{remaining} concepts remaining"
        )

        # 7. 推播（只排程，不等待）
        self._notify(entry, remaining)

        return DrawResult(outcome=DrawOutcome.ASSIGNED, entry=entry, remaining=remaining)

    @with_state_lock
    def status(self, raw_address) -> StatusResult:
        """
        查詢 identity 的抽籤狀態（唯讀）

        返回：
            - drawn=True 與 entry
            - drawn=False 與剩餘數量
            - valid=False（identity 解析失敗）
        """
        try:
            identity = resolve(raw_address)
        except InvalidIdentity:
            return StatusResult(drawn=False, valid=False)

        entry = self._ledger.lookup(identity)
        remaining = self._pool.remaining_count()
        if entry is not None:
            return StatusResult(drawn=True, entry=entry, remaining=remaining)
        return StatusResult(drawn=False, remaining=remaining)

    @with_state_lock
    def snapshot(self) -> Snapshot:
        return self._snapshot_locked()

    @with_state_lock
    def subscribe(self, loop=None) -> Tuple[Snapshot, Subscription]:
        """
        註冊新的監控端

        快照與訂閱在同一把鎖內完成：
        快照之後 commit 的每一筆都會出現在事件串流中，之前的不會重複出現
        """
        snapshot = self._snapshot_locked()
        subscription = self._hub.subscribe(loop)
        return snapshot, subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        self._hub.unsubscribe(subscription)

    def _snapshot_locked(self) -> Snapshot:
        return build_snapshot(
            self._ledger.entries(),
            self._categories,
            remaining=self._pool.remaining_count(),
            total=self._pool.total,
        )

    def _notify(self, entry: LedgerEntry, remaining: int) -> None:
        event = {"event": PARTICIPANT_DRAW_EVENT, "data": entry.to_event(remaining)}
        try:
            self._hub.publish(event)
        except Exception as e:
            logger.error(f"Failed to publish draw for {entry.identity}: {e}", exc_info=True)


class SandboxDrawer:
    """
    測試用的無限制抽籤

    使用獨立的籤池，不看 Ledger、不推播，也不會動到正式籤池
    """

    def __init__(self, concepts: List[Concept], rng: Optional[random.Random] = None):
        self._concepts = list(concepts)
        self._rng = rng
        self._pool = ConceptPool(self._concepts, rng=rng)
        self._lock = new_state_lock()

    @with_state_lock
    def draw(self, raw_address) -> DrawResult:
        try:
            identity = resolve(raw_address)
        except InvalidIdentity:
            return DrawResult.invalid()

        concept = self._pool.draw_random()
        if concept is None:
            logger.info(f"Test user {identity} attempted to draw, but no concepts remain")
            return DrawResult(outcome=DrawOutcome.EXHAUSTED, remaining=0)

        remaining = self._pool.remaining_count()
        logger.info(
            f"Test user {identity} drew concept: \"{concept.label}\". "
            f"{remaining} concepts remaining"
        )
        entry = LedgerEntry(
            identity=identity,
            concept=concept.label,
            category=concept.category.id,
            display_color=concept.category.display_color,
            timestamp=_utc_now().isoformat(),
        )
        return DrawResult(outcome=DrawOutcome.ASSIGNED, entry=entry, remaining=remaining)

    @with_state_lock
    def reset(self) -> int:
        """重新裝滿測試籤池，回傳籤數"""
        self._pool = ConceptPool(self._concepts, rng=self._rng)
        logger.info(f"Sandbox pool reset to {self._pool.total} concepts")
        return self._pool.total

    @with_state_lock
    def remaining_count(self) -> int:
        return self._pool.remaining_count()
