"""
测试 hms_core.formatting 与 hms_core.i18n - 本地化金额、日期与双语文案
"""
from datetime import datetime, timezone

from hms_core.formatting import (
    NBSP, format_currency, format_date, format_datetime, format_month_label, format_number,
    parse_datetime, resolve_timezone, to_arabic_digits,
)
from hms_core.i18n import label, normalize_language, t


class TestFormatNumber:
    """数字格式化测试"""

    def test_grouping_and_trailing_zeros(self):
        assert format_number(1234.567, "en") == "1,234.57"
        assert format_number(10.10, "en") == "10.1"
        assert format_number(200, "en") == "200"

    def test_arabic_digits(self):
        """测试阿语使用阿拉伯-印度数字与阿语分隔符"""
        assert format_number(1500, "ar") == "١٬٥٠٠"
        assert format_number(2.5, "ar") == "٢٫٥"

    def test_invalid_values(self):
        assert format_number("abc", "en") == "-"
        assert format_number(float("nan"), "en") == "-"

    def test_none_is_zero(self):
        assert format_number(None, "en") == "0"


class TestFormatCurrency:
    """货币格式化测试"""

    def test_english_prefix_symbol(self):
        assert format_currency(1234.5, "en", "SAR") == f"SAR{NBSP}1,234.5"
        assert format_currency(200, "en", "USD") == "$200"

    def test_arabic_suffix_symbol(self):
        assert format_currency(1500, "ar", "SAR") == f"١٬٥٠٠{NBSP}ر.س."

    def test_negative_amount(self):
        assert format_currency(-50, "en", "SAR") == f"-SAR{NBSP}50"

    def test_unknown_currency_uses_code(self):
        assert format_currency(10, "en", "JPY") == f"JPY{NBSP}10"

    def test_default_currency(self):
        assert format_currency(10, "en") == f"SAR{NBSP}10"

    def test_non_finite(self):
        assert format_currency(float("inf"), "en", "SAR") == "-"


class TestDates:
    """日期格式化测试"""

    def test_parse_variants(self):
        assert parse_datetime("2024-03-05T12:00:00Z") == datetime(2024, 3, 5, 12, tzinfo=timezone.utc)
        assert parse_datetime("2024-03-05").tzinfo == timezone.utc
        assert parse_datetime("not a date") is None
        assert parse_datetime("") is None
        assert parse_datetime(42) is None

    def test_format_date(self):
        assert format_date("2024-03-05T12:00:00Z", "en", "UTC") == "Mar 5, 2024"
        assert format_date("2024-03-05T12:00:00Z", "ar", "UTC") == "٥ مارس ٢٠٢٤"

    def test_format_date_uses_timezone(self):
        """测试按酒店时区换算日期"""
        assert format_date("2024-03-05T22:30:00Z", "en", "Asia/Riyadh") == "Mar 6, 2024"

    def test_invalid_date(self):
        assert format_date(None, "en") == "-"
        assert format_datetime("garbage", "en") == "-"

    def test_format_datetime_12_hour_clock(self):
        assert format_datetime("2024-03-05T13:05:00Z", "en", "UTC") == "Mar 5, 2024, 1:05 PM"
        assert format_datetime("2024-03-05T00:30:00Z", "en", "UTC") == "Mar 5, 2024, 12:30 AM"

    def test_unknown_timezone_falls_back_to_utc(self):
        assert resolve_timezone("Nowhere/Invalid") == timezone.utc
        assert resolve_timezone(None) == timezone.utc

    def test_month_label(self):
        assert format_month_label("2024-03", "en") == "Mar 24"
        assert format_month_label("2024-03", "ar") == "مارس ٢٤"

    def test_month_label_passthrough(self):
        """测试无法解析的月份原样返回"""
        assert format_month_label("bad", "en") == "bad"
        assert format_month_label("2024-13", "en") == "2024-13"

    def test_arabic_digits(self):
        assert to_arabic_digits("2024") == "٢٠٢٤"


class TestI18n:
    """双语文案测试"""

    def test_normalize_language(self):
        assert normalize_language("en") == "en"
        assert normalize_language("fr") == "ar"
        assert normalize_language(None) == "ar"

    def test_t(self):
        assert t("en", "نعم", "Yes") == "Yes"
        assert t("ar", "نعم", "Yes") == "نعم"

    def test_label_lookup(self):
        table = {"cash": {"ar": "نقدي", "en": "Cash"}}
        assert label(table, "cash", "en") == "Cash"
        assert label(table, "cash", "ar") == "نقدي"

    def test_label_unknown_key(self):
        """测试未知值原样返回，或使用指定的回退文案"""
        table = {"cash": {"ar": "نقدي", "en": "Cash"}}
        assert label(table, "crypto", "en") == "crypto"
        assert label(table, "crypto", "en", fallback="-") == "-"
        assert label(table, None, "en") == ""
