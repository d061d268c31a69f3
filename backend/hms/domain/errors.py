"""
控制台本地业务错误

在调用上游之前就能判定的失败：字段校验（422）与被禁用的操作（409）。
两者都继承 ValueError，路由层负责转换为 HTTPException。
"""
from typing import Any, Dict, Optional


class ConsoleValidationError(ValueError):
    """
    本地字段校验失败

    Attributes:
        field: 出错的字段名（camelCase）
        message: 展示给用户的文案
    """

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"field": self.field, "message": self.message}


class ActionNotAllowedError(ValueError):
    """当前状态下该操作不可用"""

    def __init__(self, action: str, message: str, status: Optional[str] = None):
        self.action = action
        self.message = message
        self.status = status
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"action": self.action, "message": self.message, "status": self.status}


class NothingToExportError(LookupError):
    """导出的数据集为空"""
