"""
hms_core/formatting.py

本地化格式化 - 金额、日期、月份标签

阿语输出使用阿拉伯-印度数字与公历月份名，英语输出对齐 en-US 习惯。
"""
import logging
import math
from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from hms_core.i18n import normalize_language

logger = logging.getLogger(__name__)

NBSP = "\u00a0"

ARABIC_DIGITS = str.maketrans("0123456789", "٠١٢٣٤٥٦٧٨٩")

MONTHS_EN = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
             "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
MONTHS_AR = ["يناير", "فبراير", "مارس", "أبريل", "مايو", "يونيو",
             "يوليو", "أغسطس", "سبتمبر", "أكتوبر", "نوفمبر", "ديسمبر"]

# 货币符号：en 前缀，ar 后缀
CURRENCY_SYMBOLS = {
    "SAR": {"en": "SAR", "ar": "ر.س."},
    "AED": {"en": "AED", "ar": "د.إ."},
    "KWD": {"en": "KWD", "ar": "د.ك."},
    "EGP": {"en": "EGP", "ar": "ج.م."},
    "USD": {"en": "$", "ar": "US$"},
    "EUR": {"en": "€", "ar": "€"},
    "GBP": {"en": "£", "ar": "UK£"},
}


def to_arabic_digits(text: str) -> str:
    """西式数字转阿拉伯-印度数字"""
    return text.translate(ARABIC_DIGITS)


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    宽松解析日期时间

    接受 datetime / date / ISO 字符串（支持结尾 Z），
    无时区信息的值按 UTC 处理，无法解析时返回 None。
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z") or text.endswith("z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def resolve_timezone(name: Optional[str]):
    """获取时区对象，未知时区回退到 UTC"""
    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone '{name}', falling back to UTC")
        return timezone.utc


def format_number(amount: Any, lang: str = "ar", max_fraction_digits: int = 2) -> str:
    """千分位分组的数字，小数末尾的 0 会被去掉"""
    try:
        value = Decimal(str(amount if amount is not None else 0))
    except (InvalidOperation, ValueError):
        return "-"
    if not value.is_finite():
        return "-"
    quantum = Decimal(1).scaleb(-max_fraction_digits)
    value = value.quantize(quantum, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    integer, _, fraction = f"{abs(value):f}".partition(".")
    fraction = fraction.rstrip("0")
    grouped = f"{int(integer):,}"

    if normalize_language(lang) == "en":
        text = grouped + (f".{fraction}" if fraction else "")
        return sign + text

    text = grouped.replace(",", "٬") + (f"٫{fraction}" if fraction else "")
    return sign + to_arabic_digits(text)


def format_currency(amount: Any, lang: str = "ar", currency: Optional[str] = None) -> str:
    """
    货币格式化（最少 0 位小数，最多 2 位）

    Example:
        >>> format_currency(1234.5, "en", "SAR")
        'SAR\xa01,234.5'
        >>> format_currency(200, "en", "USD")
        '$200'
    """
    code = (currency or "SAR").upper()
    lang = normalize_language(lang)
    if isinstance(amount, float) and not math.isfinite(amount):
        return "-"
    number = format_number(amount, lang)
    if number == "-":
        return number
    sign = ""
    if number.startswith("-"):
        sign, number = "-", number[1:]

    symbol = CURRENCY_SYMBOLS.get(code, {}).get(lang, code)
    if lang == "en":
        separator = NBSP if symbol[-1].isalpha() else ""
        return f"{sign}{symbol}{separator}{number}"
    return f"{sign}{number}{NBSP}{symbol}"


def format_date(value: Any, lang: str = "ar", tz: Optional[str] = None) -> str:
    """日期（年/月简称/日），无效日期返回 '-'"""
    parsed = parse_datetime(value)
    if parsed is None:
        return "-"
    local = parsed.astimezone(resolve_timezone(tz))
    if normalize_language(lang) == "en":
        return f"{MONTHS_EN[local.month - 1]} {local.day}, {local.year}"
    return to_arabic_digits(f"{local.day} {MONTHS_AR[local.month - 1]} {local.year}")


def format_datetime(value: Any, lang: str = "ar", tz: Optional[str] = None) -> str:
    """日期 + 时间（12 小时制），无效日期返回 '-'"""
    parsed = parse_datetime(value)
    if parsed is None:
        return "-"
    local = parsed.astimezone(resolve_timezone(tz))
    hour = local.hour % 12 or 12
    if normalize_language(lang) == "en":
        meridiem = "AM" if local.hour < 12 else "PM"
        return f"{format_date(local, 'en', tz)}, {hour}:{local.minute:02d} {meridiem}"
    meridiem = "ص" if local.hour < 12 else "م"
    return f"{format_date(local, 'ar', tz)}، {to_arabic_digits(f'{hour}:{local.minute:02d}')} {meridiem}"


def format_month_label(month_key: str, lang: str = "ar") -> str:
    """'YYYY-MM' 转为 'Mar 24' / 'مارس ٢٤'，无法解析时原样返回"""
    try:
        year_text, month_text = month_key.split("-")[:2]
        year, month = int(year_text), int(month_text)
    except (AttributeError, ValueError):
        return month_key
    if not year or not 1 <= month <= 12:
        return month_key
    short_year = f"{year % 100:02d}"
    if normalize_language(lang) == "en":
        return f"{MONTHS_EN[month - 1]} {short_year}"
    return f"{MONTHS_AR[month - 1]} {to_arabic_digits(short_year)}"
