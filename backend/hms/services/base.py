"""
视图服务基类

每个控制台页面对应一个服务：持有本次请求的 ApiClient 与会话上下文，
格式化统一使用酒店设置中的语言、货币和时区。
"""
from typing import Any, Dict, List, Optional

from hms.api_client import ApiClient
from hms.config import settings
from hms.security.context import ConsoleContext
from hms_core.formatting import format_currency, format_date, format_datetime, format_month_label
from hms_core.i18n import t


class ConsoleService:
    """控制台视图服务基类"""

    def __init__(self, api: ApiClient, context: Optional[ConsoleContext] = None):
        self.api = api
        self.context = context

    @property
    def lang(self) -> str:
        return self.context.lang if self.context else settings.DEFAULT_LANGUAGE

    @property
    def currency(self) -> str:
        return self.context.currency if self.context else settings.DEFAULT_CURRENCY

    @property
    def timezone(self) -> str:
        return self.context.timezone if self.context else settings.DEFAULT_TIMEZONE

    def t(self, ar: str, en: str) -> str:
        return t(self.lang, ar, en)

    def money(self, amount: Any) -> str:
        return format_currency(amount, self.lang, self.currency)

    def date(self, value: Any) -> str:
        return format_date(value, self.lang, self.timezone)

    def datetime(self, value: Any) -> str:
        return format_datetime(value, self.lang, self.timezone)

    def month(self, month_key: str) -> str:
        return format_month_label(month_key, self.lang)

    @staticmethod
    def unwrap_list(payload: Dict[str, Any], key: str = "data") -> List[Dict[str, Any]]:
        """信封中的列表数据，非列表时视为空"""
        value = payload.get(key)
        return [item for item in value if isinstance(item, dict)] if isinstance(value, list) else []

    @staticmethod
    def unwrap_object(payload: Dict[str, Any], key: str = "data") -> Dict[str, Any]:
        value = payload.get(key)
        return value if isinstance(value, dict) else {}
