"""
類別服務：建立類別表與初始籤池

純計算邏輯，不持有狀態：
- 內建的預設類別表
- 從 JSON 檔讀取類別表（由 pydantic 驗證）
- 展開為 Category / Concept
"""
from pathlib import Path
from typing import Annotated, Dict, List, Tuple

from pydantic import BaseModel, Field, StringConstraints, TypeAdapter, ValidationError

from models import Category, Concept
from core.exceptions import InvalidCategoryTable

# 預設的類別表：每個類別 3 支籤，共 15 支
DEFAULT_CATEGORY_TABLE = {
    "timor": {"color": "#00AB55", "concepts": ["Matak", "Matak", "Matak"]},
    "entrepreneurship": {"color": "#2065D1", "concepts": ["Azul", "Azul", "Azul"]},
    "youth": {"color": "#000000", "concepts": ["Metan", "Metan", "Metan"]},
    "sustainability": {"color": "#FFB400", "concepts": ["Kinur", "Kinur", "Kinur"]},
    "health": {"color": "#FF0000", "concepts": ["Mean", "Mean", "Mean"]},
}

# 至少包含一個非空白字元
NonBlankStr = Annotated[str, StringConstraints(min_length=1, pattern=r"^\s*\S")]


class CategorySpec(BaseModel):
    """
    類別表中的一個類別

    - color: #RGB 或 #RRGGBB
    - concepts: 標籤列表，同一類別內可以重複（重複的標籤代表多支籤）
    """
    color: str = Field(pattern=r"^#(?:[0-9A-Fa-f]{3}){1,2}$")
    concepts: List[NonBlankStr] = Field(default_factory=list)


CategoryTable = Annotated[Dict[NonBlankStr, CategorySpec], Field(min_length=1)]

_TABLE_ADAPTER = TypeAdapter(CategoryTable)


def load_category_table(path) -> Dict[str, CategorySpec]:
    """
    從 JSON 檔讀取並驗證類別表

    格式：
        {"<category id>": {"color": "#RRGGBB", "concepts": ["label", ...]}}

    異常：
        InvalidCategoryTable: 檔案無法讀取、不是合法的 UTF-8 JSON，或內容不合法
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise InvalidCategoryTable(f"Category file {path} cannot be read: {e}")

    try:
        return _TABLE_ADAPTER.validate_json(raw)
    except ValidationError as e:
        raise InvalidCategoryTable(f"Category file {path} is invalid: {e}")


def validate_category_table(table) -> Dict[str, CategorySpec]:
    """驗證 dict 形式的類別表（已驗證過的表格會原樣通過）"""
    try:
        return _TABLE_ADAPTER.validate_python(table)
    except ValidationError as e:
        raise InvalidCategoryTable(f"Invalid category table: {e}")


def build_catalog(table) -> Tuple[Dict[str, Category], List[Concept]]:
    """
    驗證類別表並展開成 (類別 dict, 籤列表)

    類別可以沒有籤（仍會出現在統計裡，計數為 0）

    返回：
        categories: 保留設定順序的 {category_id: Category}
        concepts: 所有籤，總數 = 所有標籤列表長度總和
    """
    specs = validate_category_table(table)

    categories: Dict[str, Category] = {}
    concepts: List[Concept] = []
    for category_id, spec in specs.items():
        category = Category(id=category_id, display_color=spec.color)
        categories[category_id] = category
        concepts.extend(Concept(label=label, category=category) for label in spec.concepts)

    return categories, concepts
