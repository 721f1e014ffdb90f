"""
Allocation Ledger：identity -> LedgerEntry

規則：
- 每個 identity 最多一筆，寫入後不可覆寫、不可刪除
- dict 保留插入順序，entries() 的順序就是 commit 順序
"""
from typing import Dict, List, Optional

from models import LedgerEntry
from core.exceptions import EntryAlreadyExists


class AllocationLedger:

    def __init__(self):
        self._entries: Dict[str, LedgerEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, identity: str) -> bool:
        return identity in self._entries

    def lookup(self, identity: str) -> Optional[LedgerEntry]:
        return self._entries.get(identity)

    def record(self, identity: str, entry: LedgerEntry) -> LedgerEntry:
        """
        check-and-set 寫入

        異常：
            EntryAlreadyExists: identity 已有紀錄（原紀錄保持不變）
        """
        if identity in self._entries:
            raise EntryAlreadyExists(identity)
        self._entries[identity] = entry
        return entry

    def entries(self) -> List[LedgerEntry]:
        return list(self._entries.values())
