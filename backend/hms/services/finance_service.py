"""
财务服务 - 财务概览、月度报表与 CSV 导出

财务页的三个区块（概览、趋势、交易）并发获取、各自报错；
报表页的趋势与概览同样并发获取，但任一失败整页失败。
"""
import asyncio
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from hms.api_client import ApiError
from hms.domain import reports
from hms.domain.errors import NothingToExportError
from hms.domain.labels import PAYMENT_METHOD_LABELS, payment_status_label
from hms.services.base import ConsoleService
from hms_core.export import build_csv, export_filename
from hms_core.i18n import label

logger = logging.getLogger(__name__)

TRANSACTIONS_PAGE_LIMIT = 10
FINANCE_TREND_MONTHS = 6
REPORT_MONTHS_DEFAULT = 6
REPORT_MONTHS_MIN = 3
REPORT_MONTHS_MAX = 24

TRANSACTION_HEADERS = {
    "en": ["Booking #", "Guest", "Room", "Booking total", "Paid", "Remaining",
           "Latest payment", "Payment method", "Transaction date", "Payment status"],
    "ar": ["رقم الحجز", "النزيل", "الغرفة", "إجمالي الحجز", "المدفوع", "المتبقي",
           "آخر دفعة", "طريقة الدفع", "تاريخ العملية", "حالة الدفع"],
}

REPORT_HEADERS = {
    "en": ["Month", "Bookings", "Revenue", "Paid", "Outstanding", "Collection rate"],
    "ar": ["الشهر", "الحجوزات", "الإيرادات", "المدفوع", "المستحق", "نسبة التحصيل"],
}


def clamp_months(months: Optional[int]) -> int:
    """报表月份数限制在 3-24 之间，缺省 6"""
    if months is None:
        return REPORT_MONTHS_DEFAULT
    return max(REPORT_MONTHS_MIN, min(REPORT_MONTHS_MAX, months))


def _section(result: Any) -> Tuple[Any, Optional[str]]:
    """gather 的单个结果转为 (数据, 错误文案)"""
    if isinstance(result, ApiError):
        return None, result.message
    if isinstance(result, BaseException):
        raise result
    return result, None


class FinanceService(ConsoleService):
    """财务与报表视图服务"""

    # ============== 上游请求 ==============

    async def _overview(self) -> Dict[str, Any]:
        return await self.api.get(
            "/api/finance/overview",
            fallback=self.t("تعذر تحميل بيانات المالية", "Failed to load finance data"),
        )

    async def _trends(self, months: int) -> Dict[str, Any]:
        return await self.api.get(
            "/api/finance/trends",
            params={"months": months},
            fallback=self.t("تعذر تحميل التقارير الشهرية", "Failed to load monthly trends"),
        )

    async def _transactions(self, filters: Dict[str, Any], page: int) -> Dict[str, Any]:
        return await self.api.get(
            "/api/finance/transactions",
            params={
                "fromDate": filters.get("fromDate"),
                "toDate": filters.get("toDate"),
                "status": filters.get("status"),
                "method": filters.get("method"),
                "page": page,
                "limit": TRANSACTIONS_PAGE_LIMIT,
            },
            fallback=self.t("تعذر تحميل حركة المالية", "Failed to load transactions"),
        )

    # ============== 财务页 ==============

    async def finance_page(self, filters: Optional[Dict[str, Any]] = None, page: int = 1) -> Dict[str, Any]:
        """
        财务页视图

        Returns:
            overview / trends / transactions 三个区块，每个区块带自己的 error 字段
        """
        filters = filters or {}
        results = await asyncio.gather(
            self._overview(),
            self._trends(FINANCE_TREND_MONTHS),
            self._transactions(filters, page),
            return_exceptions=True,
        )
        overview_payload, overview_error = _section(results[0])
        trends_payload, trends_error = _section(results[1])
        transactions_payload, transactions_error = _section(results[2])

        overview = None
        if overview_payload is not None:
            data = self.unwrap_object(overview_payload)
            summary = reports.normalize_summary(data.get("summary"))
            revenue = summary["monthRevenue"] or 0
            overview = {
                "summary": summary,
                "recentPayments": data.get("recentPayments") or [],
                "paidRate": reports.collection_rate(summary["monthPaid"] or 0, revenue),
                "revenueTrend": reports.revenue_trend(
                    revenue, summary["lastMonthRevenue"] or 0, absolute=False
                ),
                "display": {
                    "monthRevenue": self.money(revenue),
                    "monthPaid": self.money(summary["monthPaid"]),
                    "outstandingBalance": self.money(summary["outstandingBalance"]),
                },
            }

        trends = None
        if trends_payload is not None:
            items = self.unwrap_list(trends_payload)
            trends = {
                "items": [self._trend_row(trend) for trend in items],
                "maxTrendRevenue": reports.max_trend_revenue(items),
            }

        transactions = None
        if transactions_payload is not None:
            pagination = transactions_payload.get("pagination") or {}
            summary = dict(reports.DEFAULT_TRANSACTION_SUMMARY)
            summary.update(transactions_payload.get("summary") or {})
            transactions = {
                "items": [self._transaction_row(tx) for tx in self.unwrap_list(transactions_payload)],
                "summary": summary,
                "page": page,
                "pages": pagination.get("pages") or 1,
                "total": pagination.get("total") or 0,
            }

        return {
            "overview": {"data": overview, "error": overview_error},
            "trends": {"data": trends, "error": trends_error},
            "transactions": {"data": transactions, "error": transactions_error},
            "filters": filters,
        }

    def _trend_row(self, trend: Dict[str, Any]) -> Dict[str, Any]:
        return {
            **trend,
            "monthLabel": self.month(str(trend.get("month") or "")),
            "collectionRate": reports.month_collection_rate(trend),
        }

    def _method_label(self, method: Optional[str]) -> str:
        return label(PAYMENT_METHOD_LABELS, method, self.lang, fallback=method or "")

    def _transaction_row(self, tx: Dict[str, Any]) -> Dict[str, Any]:
        return {
            **tx,
            "methodLabel": self._method_label(tx.get("method")),
            "statusLabel": payment_status_label(tx.get("status"), self.lang),
            "dateLabel": self.datetime(tx.get("date")),
        }

    # ============== 报表页 ==============

    async def _report_data(self, months: int) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        trends_result, overview_result = await asyncio.gather(
            self._trends(months), self._overview(), return_exceptions=True
        )
        # 趋势的错误优先于概览的错误
        for result in (trends_result, overview_result):
            if isinstance(result, BaseException):
                raise result
        trends = self.unwrap_list(trends_result)
        summary = reports.normalize_summary(self.unwrap_object(overview_result).get("summary"))
        return trends, summary

    async def reports_page(self, months: Optional[int] = None) -> Dict[str, Any]:
        """
        报表页视图

        Raises:
            ApiError: 趋势或概览任一获取失败
        """
        months = clamp_months(months)
        trends, summary = await self._report_data(months)
        totals = reports.period_totals(trends)
        best = reports.best_month(trends)
        weakest = reports.weakest_month(trends)
        return {
            "months": months,
            "trends": [self._trend_row(trend) for trend in trends],
            "summary": summary,
            "periodTotals": totals.to_dict(),
            "collectionRate": reports.collection_rate(totals.paid, totals.revenue),
            "maxTrendRevenue": reports.max_trend_revenue(trends),
            "bestMonth": self._trend_row(best) if best else None,
            "weakestMonth": self._trend_row(weakest) if weakest else None,
            "revenueTrend": reports.revenue_trend(summary["monthRevenue"] or 0, summary["lastMonthRevenue"] or 0),
            "display": {
                "revenue": self.money(totals.revenue),
                "paid": self.money(totals.paid),
                "outstanding": self.money(totals.outstanding),
            },
        }

    # ============== CSV 导出 ==============

    async def export_transactions(self, filters: Optional[Dict[str, Any]] = None, page: int = 1,
                                  today: Optional[date] = None) -> Tuple[str, str]:
        """
        导出当前页的交易记录

        Returns:
            (文件名, CSV 内容)

        Raises:
            NothingToExportError: 当前页没有交易
        """
        payload = await self._transactions(filters or {}, page)
        transactions = self.unwrap_list(payload)
        if not transactions:
            raise NothingToExportError("transactions")

        rows = [
            [
                tx.get("bookingNumber"),
                tx.get("guestName"),
                tx.get("roomNumber") or "-",
                self.money(tx.get("total")),
                self.money(tx.get("paidAmount")),
                self.money(tx.get("remaining")),
                self.money(tx.get("latestAmount")),
                self._method_label(tx.get("method")),
                self.datetime(tx.get("date")),
                payment_status_label(tx.get("status"), self.lang),
            ]
            for tx in transactions
        ]
        content = build_csv(TRANSACTION_HEADERS[self.lang], rows, self.lang)
        filename = export_filename("finance-transactions", today)
        logger.info(f"Exported {len(rows)} finance transactions to {filename}")
        return filename, content

    async def export_report(self, months: Optional[int] = None,
                            today: Optional[date] = None) -> Tuple[str, str]:
        """导出月度报表（每月一行）"""
        payload = await self._trends(clamp_months(months))
        trends = self.unwrap_list(payload)
        if not trends:
            raise NothingToExportError("report")

        rows = [
            [
                self.month(str(trend.get("month") or "")),
                trend.get("bookings") or 0,
                self.money(trend.get("revenue") or 0),
                self.money(trend.get("paid") or 0),
                self.money(trend.get("outstanding") or 0),
                f"{reports.month_collection_rate(trend)}%",
            ]
            for trend in trends
        ]
        content = build_csv(REPORT_HEADERS[self.lang], rows, self.lang)
        filename = export_filename("finance-report", today)
        logger.info(f"Exported {len(rows)} report months to {filename}")
        return filename, content
