"""
财务报表派生指标

输入为上游 /api/finance/trends 的月度数据与 /api/finance/overview 的汇总，
所有计算都是纯函数。
"""
import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

DEFAULT_SUMMARY = {
    "monthRevenue": 0,
    "lastMonthRevenue": 0,
    "monthPaid": 0,
    "outstandingBalance": 0,
    "totalBookings": 0,
    "paidBookings": 0,
    "partialBookings": 0,
    "pendingBookings": 0,
    "refundedBookings": 0,
}

DEFAULT_TRANSACTION_SUMMARY = {
    "totalAmount": 0,
    "totalPaid": 0,
    "totalOutstanding": 0,
    "count": 0,
}


def round_half_up(value: float) -> int:
    """四舍五入到整数（.5 向正无穷方向进位）"""
    return math.floor(value + 0.5)


def normalize_summary(raw: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """用默认值补齐汇总字段"""
    summary = dict(DEFAULT_SUMMARY)
    summary.update({key: value for key, value in (raw or {}).items() if value is not None})
    return summary


@dataclass
class PeriodTotals:
    revenue: float = 0
    paid: float = 0
    outstanding: float = 0
    bookings: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def period_totals(trends: List[Dict[str, Any]]) -> PeriodTotals:
    totals = PeriodTotals()
    for trend in trends:
        totals.revenue += trend.get("revenue") or 0
        totals.paid += trend.get("paid") or 0
        totals.outstanding += trend.get("outstanding") or 0
        totals.bookings += trend.get("bookings") or 0
    return totals


def collection_rate(paid: float, revenue: float) -> int:
    """收款率（%），上限 100；收入为 0 时为 0"""
    if revenue <= 0:
        return 0
    return min(100, round_half_up(paid / revenue * 100))


def month_collection_rate(trend: Dict[str, Any]) -> int:
    """单月收款率（不封顶）"""
    revenue = trend.get("revenue") or 0
    if revenue <= 0:
        return 0
    return round_half_up((trend.get("paid") or 0) / revenue * 100)


def max_trend_revenue(trends: List[Dict[str, Any]]) -> float:
    """柱状图的比例基准，至少为 1"""
    return max([trend.get("revenue") or 0 for trend in trends] + [1])


def best_month(trends: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """收入最高的月份，并列时取最早出现的"""
    best = None
    for trend in trends:
        if best is None or (trend.get("revenue") or 0) > (best.get("revenue") or 0):
            best = trend
    return best


def weakest_month(trends: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """收入最低的月份，并列时取最早出现的"""
    weakest = None
    for trend in trends:
        if weakest is None or (trend.get("revenue") or 0) < (weakest.get("revenue") or 0):
            weakest = trend
    return weakest


def revenue_trend(month_revenue: float, last_month_revenue: float,
                  absolute: bool = True) -> Optional[Dict[str, Any]]:
    """
    本月相对上月的收入变化

    Args:
        month_revenue: 本月收入
        last_month_revenue: 上月收入，<= 0 时无法比较，返回 None
        absolute: 百分比是否取绝对值（报表页取绝对值，财务页保留符号）

    Returns:
        {"isUp": bool, "percent": int} 或 None
    """
    if last_month_revenue <= 0:
        return None
    diff = month_revenue - last_month_revenue
    percent = round_half_up(diff / last_month_revenue * 100)
    return {"isUp": diff >= 0, "percent": abs(percent) if absolute else percent}


def occupancy_rate(occupied: int, total: int) -> int:
    """入住率（%），没有房间时为 0"""
    if not total:
        return 0
    return round_half_up(occupied / total * 100)
