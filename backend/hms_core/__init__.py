"""
HMS Console 通用核心

与酒店领域无关的基础设施：会话刷新 HTTP 客户端、列表搜索/排序/统计、
CSV 导出、本地化格式化与双语文案。
"""
