"""
API Schemas（Pydantic）

欄位名稱與前端頁面使用的 JSON 一致：concept / type / color / remaining / timestamp
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models import DrawResult, LedgerEntry, Snapshot, StatusResult


class DrawResponse(BaseModel):
    """抽籤結果；籤抽完時 concept 為 null"""
    concept: Optional[str] = None
    type: Optional[str] = None
    color: Optional[str] = None
    remaining: int
    timestamp: Optional[str] = None

    @classmethod
    def from_result(cls, result: DrawResult) -> "DrawResponse":
        if result.entry is None:
            return cls(remaining=result.remaining)
        return cls(
            concept=result.entry.concept,
            type=result.entry.category,
            color=result.entry.display_color,
            remaining=result.remaining,
            timestamp=result.entry.timestamp,
        )


class StatusResponse(BaseModel):
    drawn: bool
    concept: Optional[str] = None
    type: Optional[str] = None
    color: Optional[str] = None
    timestamp: Optional[str] = None
    remaining: int

    @classmethod
    def from_result(cls, result: StatusResult) -> "StatusResponse":
        if not result.drawn:
            return cls(drawn=False, remaining=result.remaining)
        return cls(
            drawn=True,
            concept=result.entry.concept,
            type=result.entry.category,
            color=result.entry.display_color,
            timestamp=result.entry.timestamp,
            remaining=result.remaining,
        )


class ParticipantResponse(BaseModel):
    ip: str
    concept: str
    type: str
    color: str
    timestamp: str

    @classmethod
    def from_entry(cls, entry: LedgerEntry) -> "ParticipantResponse":
        return cls(**entry.to_event())


class MonitorStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_participants: int = Field(alias="totalParticipants")
    remaining_concepts: int = Field(alias="remainingConcepts")
    total_concepts: int = Field(alias="totalConcepts")
    category_stats: Dict[str, int] = Field(alias="categoryStats")


class MonitorResponse(BaseModel):
    participants: List[ParticipantResponse]
    stats: MonitorStats

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> "MonitorResponse":
        return cls(
            participants=[ParticipantResponse.from_entry(e) for e in snapshot.participants],
            stats=MonitorStats(
                total_participants=snapshot.total_participants,
                remaining_concepts=snapshot.remaining_concepts,
                total_concepts=snapshot.total_concepts,
                category_stats=snapshot.category_stats,
            ),
        )


class SandboxResetResponse(BaseModel):
    remaining: int
