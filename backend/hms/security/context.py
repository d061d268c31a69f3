"""
会话上下文 - 当前用户与所属酒店的设置

由 /api/auth/me 的返回值构建，酒店设置缺失的字段用默认值补齐，
之后所有页面的格式化（语言、货币、时区）都以它为准。
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from hms.config import settings
from hms.security.permissions import has_permission
from hms_core.i18n import normalize_language

logger = logging.getLogger(__name__)

DEFAULT_NOTIFICATIONS = {
    "newBooking": True,
    "cancelledBooking": True,
    "paymentReceived": True,
    "dailyReport": True,
}


@dataclass
class HotelSettings:
    """
    酒店设置（已补齐默认值）

    Attributes:
        currency: 货币代码，默认 SAR
        timezone: IANA 时区，默认 Asia/Riyadh
        language: ar 或 en
        check_in_time: 入住时间 HH:MM
        check_out_time: 退房时间 HH:MM
        tax_rate: 税率（百分比）
        theme: light / dark / system
        notifications: 通知开关
    """

    currency: str = settings.DEFAULT_CURRENCY
    timezone: str = settings.DEFAULT_TIMEZONE
    language: str = settings.DEFAULT_LANGUAGE
    check_in_time: str = settings.DEFAULT_CHECK_IN_TIME
    check_out_time: str = settings.DEFAULT_CHECK_OUT_TIME
    tax_rate: float = settings.DEFAULT_TAX_RATE
    theme: str = "dark"
    notifications: Dict[str, bool] = field(default_factory=lambda: dict(DEFAULT_NOTIFICATIONS))

    @classmethod
    def from_api(cls, raw: Optional[Dict[str, Any]]) -> "HotelSettings":
        raw = raw or {}
        tax_rate = raw.get("taxRate")
        notifications = raw.get("notifications") or {}
        return cls(
            currency=raw.get("currency") or settings.DEFAULT_CURRENCY,
            timezone=raw.get("timezone") or settings.DEFAULT_TIMEZONE,
            language=normalize_language(raw.get("language") or settings.DEFAULT_LANGUAGE),
            check_in_time=raw.get("checkInTime") or settings.DEFAULT_CHECK_IN_TIME,
            check_out_time=raw.get("checkOutTime") or settings.DEFAULT_CHECK_OUT_TIME,
            tax_rate=tax_rate if isinstance(tax_rate, (int, float)) and not isinstance(tax_rate, bool)
            else settings.DEFAULT_TAX_RATE,
            theme=raw.get("theme") or "dark",
            notifications={
                key: notifications.get(key) if isinstance(notifications.get(key), bool) else default
                for key, default in DEFAULT_NOTIFICATIONS.items()
            },
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currency": self.currency,
            "timezone": self.timezone,
            "language": self.language,
            "checkInTime": self.check_in_time,
            "checkOutTime": self.check_out_time,
            "taxRate": self.tax_rate,
            "theme": self.theme,
            "notifications": dict(self.notifications),
        }


@dataclass
class ConsoleContext:
    """
    控制台会话上下文

    Attributes:
        user_id: 用户 ID
        name: 用户名
        email: 邮箱
        role: 角色
        hotel_id: 所属酒店（平台角色为空）
        permissions: 用户自定义权限
        hotel_settings: 酒店设置
        hotel_profile: 酒店资料（名称、邮箱、电话、Logo、地址）
        notifications: 最近的酒店通知
    """

    user_id: Optional[str]
    name: str
    email: str
    role: str
    hotel_id: Optional[str] = None
    permissions: List[str] = field(default_factory=list)
    hotel_settings: HotelSettings = field(default_factory=HotelSettings)
    hotel_profile: Dict[str, Any] = field(default_factory=dict)
    notifications: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_api(cls, user: Dict[str, Any]) -> "ConsoleContext":
        hotel = user.get("hotel") if isinstance(user.get("hotel"), dict) else {}
        notifications = hotel.get("notificationsLog")
        hotel_id = user.get("hotelId")
        if isinstance(hotel_id, dict):
            hotel_id = hotel_id.get("_id")
        return cls(
            user_id=user.get("id") or user.get("_id"),
            name=user.get("name") or "",
            email=user.get("email") or "",
            role=user.get("role") or "",
            hotel_id=hotel_id,
            permissions=list(user.get("permissions") or []),
            hotel_settings=HotelSettings.from_api(hotel.get("settings")),
            hotel_profile={
                "name": hotel.get("name"),
                "email": hotel.get("email"),
                "phone": hotel.get("phone"),
                "logo": hotel.get("logo"),
                "address": hotel.get("address"),
            },
            notifications=notifications if isinstance(notifications, list) else [],
        )

    @property
    def lang(self) -> str:
        return self.hotel_settings.language

    @property
    def currency(self) -> str:
        return self.hotel_settings.currency

    @property
    def timezone(self) -> str:
        return self.hotel_settings.timezone

    @property
    def is_super_admin(self) -> bool:
        return self.role == "super_admin"

    @property
    def is_platform_admin(self) -> bool:
        return self.role in ("super_admin", "sub_super_admin")

    def can(self, permission: str) -> bool:
        """super_admin 拥有全部权限，其余角色查表后再查自定义权限"""
        return has_permission(self.role, self.permissions, permission)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.user_id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "hotelId": self.hotel_id,
            "permissions": self.permissions,
            "settings": self.hotel_settings.to_dict(),
            "hotel": self.hotel_profile,
        }

    def __repr__(self) -> str:
        return f"ConsoleContext(user_id={self.user_id!r}, role={self.role!r}, hotel_id={self.hotel_id!r})"
