"""
自定義異常類別

集中管理所有抽籤核心的異常，方便 API 層統一處理

注意：
- 「已經抽過」與「籤已抽完」是正常結果（DrawOutcome），不是異常
"""


class ConceptDrawException(Exception):
    """所有抽籤異常的基類"""
    pass


# ============ Identity 相關異常 ============

class InvalidIdentity(ConceptDrawException):
    """無法解析為 IPv4 的位址"""
    def __init__(self, raw_address):
        self.raw_address = raw_address
        super().__init__(f"IPv4 address required, got {raw_address!r}")


# ============ Ledger 相關異常 ============

class EntryAlreadyExists(ConceptDrawException):
    """此 identity 已經有抽籤紀錄（不可覆寫）"""
    def __init__(self, identity):
        self.identity = identity
        super().__init__(f"Identity {identity} already has a ledger entry")


# ============ 設定相關異常 ============

class InvalidCategoryTable(ConceptDrawException):
    """類別表格式錯誤（顏色、標籤或結構不合法）"""
    pass
