"""
Monitor snapshot service.

Builds the full state a monitoring client receives when it connects
(participants in commit order plus aggregate statistics).
"""
from typing import Dict, Iterable, List

from models import Category, LedgerEntry, Snapshot


def build_snapshot(
    entries: Iterable[LedgerEntry],
    categories: Dict[str, Category],
    remaining: int,
    total: int,
) -> Snapshot:
    """
    Return a Snapshot for the given ledger entries.

    Every configured category shows up in category_stats, with 0 when
    nothing from it has been assigned yet.
    """
    participants: List[LedgerEntry] = list(entries)

    category_stats: Dict[str, int] = {category_id: 0 for category_id in categories}
    for entry in participants:
        category_stats[entry.category] = category_stats.get(entry.category, 0) + 1

    return Snapshot(
        participants=participants,
        total_participants=len(participants),
        remaining_concepts=remaining,
        total_concepts=total,
        category_stats=category_stats,
    )
