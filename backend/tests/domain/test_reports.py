"""
测试 hms.domain.reports - 财务报表派生指标
"""
from hms.domain import reports

TRENDS = [
    {"month": "2024-01", "bookings": 10, "revenue": 5000, "paid": 4000, "outstanding": 1000},
    {"month": "2024-02", "bookings": 12, "revenue": 8000, "paid": 8000, "outstanding": 0},
    {"month": "2024-03", "bookings": 4, "revenue": 2000, "paid": 500, "outstanding": 1500},
    {"month": "2024-04", "bookings": 15, "revenue": 8000, "paid": 6000, "outstanding": 2000},
]


class TestRounding:
    """四舍五入测试"""

    def test_half_up(self):
        assert reports.round_half_up(2.5) == 3
        assert reports.round_half_up(2.4) == 2
        assert reports.round_half_up(-2.5) == -2


class TestPeriodTotals:
    """区间合计测试"""

    def test_sums(self):
        totals = reports.period_totals(TRENDS)
        assert totals.to_dict() == {"revenue": 23000, "paid": 18500, "outstanding": 4500, "bookings": 41}

    def test_empty(self):
        assert reports.period_totals([]).to_dict() == {"revenue": 0, "paid": 0, "outstanding": 0, "bookings": 0}

    def test_missing_fields(self):
        totals = reports.period_totals([{"month": "2024-01", "revenue": None}])
        assert totals.revenue == 0


class TestCollectionRate:
    """收款率测试"""

    def test_rate(self):
        assert reports.collection_rate(18500, 23000) == 80

    def test_capped_at_100(self):
        assert reports.collection_rate(1200, 1000) == 100

    def test_zero_revenue(self):
        assert reports.collection_rate(100, 0) == 0

    def test_month_rate_not_capped(self):
        assert reports.month_collection_rate({"revenue": 1000, "paid": 1200}) == 120
        assert reports.month_collection_rate({"revenue": 0, "paid": 10}) == 0


class TestBestAndWeakest:
    """最佳/最弱月份测试"""

    def test_best_month_first_on_tie(self):
        """测试并列最高时取最早的月份"""
        assert reports.best_month(TRENDS)["month"] == "2024-02"

    def test_weakest_month(self):
        assert reports.weakest_month(TRENDS)["month"] == "2024-03"

    def test_empty(self):
        assert reports.best_month([]) is None
        assert reports.weakest_month([]) is None

    def test_max_trend_revenue(self):
        assert reports.max_trend_revenue(TRENDS) == 8000
        assert reports.max_trend_revenue([]) == 1
        assert reports.max_trend_revenue([{"revenue": 0}]) == 1


class TestRevenueTrend:
    """收入变化测试"""

    def test_increase(self):
        assert reports.revenue_trend(1200, 1000) == {"isUp": True, "percent": 20}

    def test_decrease_absolute(self):
        assert reports.revenue_trend(800, 1000) == {"isUp": False, "percent": 20}

    def test_decrease_signed(self):
        """测试财务页保留百分比符号"""
        assert reports.revenue_trend(800, 1000, absolute=False) == {"isUp": False, "percent": -20}

    def test_no_previous_month(self):
        assert reports.revenue_trend(800, 0) is None

    def test_equal_is_up(self):
        assert reports.revenue_trend(1000, 1000) == {"isUp": True, "percent": 0}


class TestSummaryAndOccupancy:
    """汇总补齐与入住率测试"""

    def test_normalize_summary(self):
        summary = reports.normalize_summary({"monthRevenue": 500, "monthPaid": None})
        assert summary["monthRevenue"] == 500
        assert summary["monthPaid"] == 0
        assert summary["refundedBookings"] == 0

    def test_normalize_empty(self):
        assert reports.normalize_summary(None) == reports.DEFAULT_SUMMARY

    def test_occupancy(self):
        assert reports.occupancy_rate(7, 20) == 35
        assert reports.occupancy_rate(1, 3) == 33
        assert reports.occupancy_rate(0, 0) == 0
