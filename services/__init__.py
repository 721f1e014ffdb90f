"""
服務層

這個 package 包含純計算邏輯，不持有狀態：
- CategoryService：類別表讀取與驗證
- MonitorService：監控快照
- QrService：QR code 產生
"""
