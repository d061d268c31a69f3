"""
仪表盘服务 - 今日概况、入住率与最近通知
"""
from typing import Any, Dict, List

from hms.domain import reports
from hms.services.base import ConsoleService

DEFAULT_STATS = {
    "totalRooms": 0,
    "availableRooms": 0,
    "occupiedRooms": 0,
    "todayCheckIns": 0,
    "todayCheckOuts": 0,
    "pendingBookings": 0,
    "totalGuests": 0,
    "totalBookings": 0,
    "specialRequestsToday": 0,
    "monthlyRevenue": 0,
    "lastMonthRevenue": 0,
}

NOTIFICATIONS_SHOWN = 6


class DashboardService(ConsoleService):
    """仪表盘视图服务"""

    async def overview(self) -> Dict[str, Any]:
        payload = await self.api.get(
            "/api/dashboard/stats",
            fallback=self.t("تعذر تحميل بيانات لوحة التحكم", "Failed to load dashboard data"),
        )
        stats = dict(DEFAULT_STATS)
        stats.update({k: v for k, v in self.unwrap_object(payload).items() if v is not None})

        return {
            "stats": stats,
            "occupancyRate": reports.occupancy_rate(stats["occupiedRooms"], stats["totalRooms"]),
            "revenueTrend": reports.revenue_trend(stats["monthlyRevenue"], stats["lastMonthRevenue"]),
            "monthlyRevenueLabel": self.money(stats["monthlyRevenue"]),
            "notifications": self.recent_notifications(),
        }

    def recent_notifications(self) -> List[Dict[str, Any]]:
        """会话上下文里最新的几条酒店通知"""
        if not self.context:
            return []
        return [
            {**item, "createdAtLabel": self.datetime(item.get("createdAt"))}
            for item in self.context.notifications[:NOTIFICATIONS_SHOWN]
            if isinstance(item, dict)
        ]
