"""
領域模型（Domain Models）

全部都是不可變的 value object，核心狀態只存在 DrawService 內：
- Category / Concept：啟動時由類別表建立
- LedgerEntry：每個 identity 最多一筆
- DrawResult / StatusResult / Snapshot：交給 API 層序列化的結果
"""
import enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional


class DrawOutcome(str, enum.Enum):
    """抽籤結果"""
    ASSIGNED = "assigned"
    ALREADY_DRAWN = "already_drawn"
    EXHAUSTED = "exhausted"
    INVALID = "invalid"


@dataclass(frozen=True)
class Category:
    id: str
    display_color: str


@dataclass(frozen=True)
class Concept:
    label: str
    category: Category


@dataclass(frozen=True)
class LedgerEntry:
    """某個 identity 的抽籤紀錄，建立後不再改變"""
    identity: str
    concept: str
    category: str
    display_color: str
    timestamp: str

    def to_event(self, remaining: Optional[int] = None) -> dict:
        """轉成推播 / JSON 使用的欄位名稱"""
        payload = {
            "ip": self.identity,
            "concept": self.concept,
            "type": self.category,
            "color": self.display_color,
            "timestamp": self.timestamp,
        }
        if remaining is not None:
            payload["remaining"] = remaining
        return payload


@dataclass(frozen=True)
class DrawResult:
    outcome: DrawOutcome
    entry: Optional[LedgerEntry] = None
    remaining: int = 0

    @classmethod
    def invalid(cls) -> "DrawResult":
        return cls(outcome=DrawOutcome.INVALID)


@dataclass(frozen=True)
class StatusResult:
    """
    狀態查詢結果

    - drawn=True: entry 一定存在
    - drawn=False: remaining 為當下剩餘數量
    - valid=False: identity 解析失敗
    """
    drawn: bool
    entry: Optional[LedgerEntry] = None
    remaining: int = 0
    valid: bool = True


@dataclass(frozen=True)
class Snapshot:
    """監控端連線時收到的完整狀態"""
    participants: List[LedgerEntry]
    total_participants: int
    remaining_concepts: int
    total_concepts: int
    category_stats: Dict[str, int] = field(default_factory=dict)

    def to_payload(self) -> dict:
        return {
            "participants": [entry.to_event() for entry in self.participants],
            "stats": {
                "totalParticipants": self.total_participants,
                "remainingConcepts": self.remaining_concepts,
                "totalConcepts": self.total_concepts,
                "categoryStats": dict(self.category_stats),
            },
        }
