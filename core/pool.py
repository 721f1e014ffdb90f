"""
Concept Pool：尚未被抽走的籤

不做任何鎖定，並發控制由擁有它的 DrawService 負責
"""
import random
from typing import Iterable, List, Optional

from models import Concept


class ConceptPool:
    """不放回抽樣的籤池"""

    def __init__(self, concepts: Iterable[Concept], rng: Optional[random.Random] = None):
        self._remaining: List[Concept] = list(concepts)
        self._total = len(self._remaining)
        self._rng = rng or random.Random()

    @property
    def total(self) -> int:
        """建立時的籤數"""
        return self._total

    def remaining_count(self) -> int:
        return len(self._remaining)

    def is_empty(self) -> bool:
        return not self._remaining

    def draw_random(self) -> Optional[Concept]:
        """
        從剩餘的籤中均勻隨機抽一支並移除

        返回：
            Concept，籤池已空時回傳 None（正常的結束狀態，不是錯誤）
        """
        if not self._remaining:
            return None
        index = self._rng.randrange(len(self._remaining))
        return self._remaining.pop(index)

    def restore(self, concept: Concept) -> None:
        """把抽出但沒有成功記錄的籤放回（只給 DrawService 補償用）"""
        if len(self._remaining) >= self._total:
            raise ValueError("Cannot restore a concept into a full pool")
        self._remaining.append(concept)

    def remaining(self) -> List[Concept]:
        """剩餘籤的複本"""
        return list(self._remaining)
