"""
核心業務邏輯層

這個 package 包含抽籤的核心狀態與並發控制：
- Identity：位址標準化
- Pool / Ledger：籤池與抽籤紀錄
- DrawManager：唯一能修改 Pool 與 Ledger 的地方
- Notifier：監控端的即時推播
- Locks：並發控制工具
"""
