"""
平台酒店管理服务 - 酒店列表、开通、认证、订阅与到期提醒
"""
import logging
from typing import Any, Dict, List, Optional

from hms.config import settings
from hms.domain.labels import (
    ALERT_BADGE_TONES, ALERT_SEVERITY_LABELS, PLAN_LABELS, SUBSCRIPTION_STATUS_LABELS,
    days_remaining_label,
)
from hms.models.ontology import AlertSeverity, Hotel, SubscriptionStatus
from hms.models.schemas import (
    HotelActiveUpdate, HotelVerifiedUpdate, RegisterHotelRequest, SubscriptionUpdate,
    UpdateUserRequest,
)
from hms.services.base import ConsoleService
from hms_core.i18n import label
from hms_core.listing import count_where, filter_by_query, normalize_search_term

logger = logging.getLogger(__name__)

ALERT_WINDOW_DEFAULT = 7
ALERT_WINDOW_MIN = 1
ALERT_WINDOW_MAX = 30
ALERT_SEVERITIES = {s.value for s in AlertSeverity}

DEFAULT_ALERT_SUMMARY = {
    "totalAlerts": 0,
    "expired": 0,
    "critical": 0,
    "warning": 0,
    "info": 0,
    "maintenance": None,
    "windowDays": ALERT_WINDOW_DEFAULT,
}


def clamp_window_days(value: Optional[int]) -> int:
    if value is None:
        return ALERT_WINDOW_DEFAULT
    return max(ALERT_WINDOW_MIN, min(ALERT_WINDOW_MAX, value))


def hotel_stats(hotels: List[Hotel]) -> Dict[str, int]:
    return {
        "total": len(hotels),
        "active": count_where(hotels, lambda h: h.is_active),
        "verified": count_where(hotels, lambda h: h.is_verified),
    }


class HotelAdminService(ConsoleService):
    """平台侧酒店管理"""

    async def list_hotels(
        self,
        search: Optional[str] = None,
        status: str = "all",
        plan: str = "all",
    ) -> Dict[str, Any]:
        """
        酒店列表

        搜索词同时发给上游；本地再按启用状态、套餐（未设置视为 free）和 "名称 邮箱" 过滤。
        统计基于上游返回的全部酒店。
        """
        term = normalize_search_term(search, settings.SEARCH_MAX_LENGTH)
        payload = await self.api.get(
            "/api/super-admin/hotels",
            params={"limit": settings.OPTIONS_PAGE_LIMIT, "search": term},
            fallback="تعذر تحميل الفنادق",
        )
        hotels = [Hotel.model_validate(item) for item in self.unwrap_list(payload)]

        visible = hotels
        if status == "active":
            visible = [h for h in visible if h.is_active]
        elif status == "inactive":
            visible = [h for h in visible if not h.is_active]
        if plan and plan != "all":
            visible = [h for h in visible if h.plan == plan]
        visible = filter_by_query(visible, term, lambda h: [f"{h.name} {h.email}"])

        return {
            "items": [self._row(h) for h in visible],
            "total": len(visible),
            "stats": hotel_stats(hotels),
        }

    def _row(self, hotel: Hotel) -> Dict[str, Any]:
        row = hotel.to_api()
        subscription_status = (hotel.subscription.status if hotel.subscription else None) \
            or SubscriptionStatus.ACTIVE.value
        row.update({
            "plan": hotel.plan,
            "planLabel": label(PLAN_LABELS, hotel.plan, self.lang),
            "subscriptionStatusLabel": label(SUBSCRIPTION_STATUS_LABELS, subscription_status, self.lang),
            "isVerified": hotel.is_verified,
            "createdAtLabel": self.date(hotel.created_at) if hotel.created_at else "-",
        })
        return row

    async def create_hotel(self, form: RegisterHotelRequest) -> Dict[str, Any]:
        """创建酒店及其管理员账号"""
        payload = await self.api.post(
            "/api/super-admin/hotels",
            json=form.to_api(),
            fallback="فشل إنشاء الفندق",
        )
        logger.info(f"Hotel created: {form.hotel_name} ({form.email})")
        return payload

    async def _patch_hotel(self, hotel_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
        payload = await self.api.patch(
            f"/api/super-admin/hotels/{hotel_id}",
            json=body,
            fallback="تعذر تحديث الفندق",
        )
        return self._row(Hotel.model_validate(self.unwrap_object(payload)))

    async def set_active(self, hotel_id: str, form: HotelActiveUpdate) -> Dict[str, Any]:
        logger.info(f"Hotel {hotel_id} active -> {form.is_active}")
        return await self._patch_hotel(hotel_id, form.to_api())

    async def set_verified(self, hotel_id: str, form: HotelVerifiedUpdate) -> Dict[str, Any]:
        logger.info(f"Hotel {hotel_id} verified -> {form.is_verified}")
        return await self._patch_hotel(hotel_id, form.to_api())

    async def save_subscription(self, hotel_id: str, form: SubscriptionUpdate) -> Dict[str, Any]:
        logger.info(f"Hotel {hotel_id} subscription -> {form.plan.value}/{form.status.value}")
        return await self._patch_hotel(hotel_id, form.to_api())

    async def update_admin(self, user_id: str, form: UpdateUserRequest) -> Dict[str, Any]:
        """编辑酒店管理员账号"""
        payload = await self.api.patch(
            f"/api/super-admin/users/{user_id}",
            json=form.to_api(),
            fallback="فشل تحديث حساب مدير الفندق",
        )
        return self.unwrap_object(payload)

    # ============== 订阅到期提醒 ==============

    async def subscription_alerts(self, window_days: Optional[int] = None,
                                  run_maintenance: bool = False) -> Dict[str, Any]:
        """
        订阅到期提醒

        Args:
            window_days: 提前提醒的天数（1-30，默认 7）
            run_maintenance: 是否让上游先执行订阅状态维护
        """
        window = clamp_window_days(window_days)
        payload = await self.api.get(
            "/api/super-admin/subscription-alerts",
            params={"windowDays": window, "runMaintenance": "true" if run_maintenance else "false"},
            fallback="تعذر تحميل تنبيهات الاشتراكات",
        )
        if run_maintenance:
            logger.info(f"Subscription maintenance triggered (window {window} days)")

        summary = dict(DEFAULT_ALERT_SUMMARY)
        summary["windowDays"] = window
        summary.update(payload.get("summary") or {})
        return {
            "items": [self._alert_row(item) for item in self.unwrap_list(payload)],
            "summary": summary,
        }

    def _alert_row(self, alert: Dict[str, Any]) -> Dict[str, Any]:
        days = alert.get("daysRemaining")
        # 未知等级按 info 显示
        severity = alert.get("severity")
        if severity not in ALERT_SEVERITIES:
            severity = AlertSeverity.INFO.value
        return {
            **alert,
            "daysRemainingLabel": days_remaining_label(days, self.lang) if isinstance(days, int) else "-",
            "severityLabel": label(ALERT_SEVERITY_LABELS, severity, self.lang),
            "tone": ALERT_BADGE_TONES[severity],
        }
