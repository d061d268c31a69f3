"""
HMS 控制台 - 多租户酒店管理系统的 Web 控制台
"""
