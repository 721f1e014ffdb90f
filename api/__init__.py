"""
API 層

只負責 HTTP / WebSocket 與核心之間的轉換：
- draws：抽籤與狀態查詢
- monitor：監控快照與即時推播
- sandbox：測試用的抽籤（獨立籤池）
- qr：QR code 圖檔
"""
