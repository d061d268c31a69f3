"""
双语标签表

所有枚举值到展示文案的映射集中在这里；查找统一使用 hms_core.i18n.label，
找不到的值原样返回。
"""
from typing import Optional

from hms_core.i18n import label, t

BOOKING_STATUS_LABELS = {
    "pending": {"ar": "قيد الانتظار", "en": "Pending"},
    "confirmed": {"ar": "مؤكد", "en": "Confirmed"},
    "checked_in": {"ar": "مسجل الوصول", "en": "Checked in"},
    "checked_out": {"ar": "غادر", "en": "Checked out"},
    "cancelled": {"ar": "ملغي", "en": "Cancelled"},
    "no_show": {"ar": "لم يحضر", "en": "No show"},
}

PAYMENT_STATUS_LABELS = {
    "pending": {"ar": "غير مدفوع", "en": "Unpaid"},
    "partial": {"ar": "دفع جزئي", "en": "Partially paid"},
    "paid": {"ar": "مدفوع", "en": "Paid"},
    "refunded": {"ar": "مسترد", "en": "Refunded"},
}

PAYMENT_METHOD_LABELS = {
    "cash": {"ar": "نقدي", "en": "Cash"},
    "card": {"ar": "بطاقة", "en": "Card"},
    "bank_transfer": {"ar": "تحويل بنكي", "en": "Bank transfer"},
    "online": {"ar": "دفع إلكتروني", "en": "Online payment"},
}

BOOKING_SOURCE_LABELS = {
    "direct": {"ar": "مباشر", "en": "Direct"},
    "website": {"ar": "الموقع", "en": "Website"},
    "phone": {"ar": "هاتف", "en": "Phone"},
    "walkin": {"ar": "حجز مباشر", "en": "Walk-in"},
    "ota": {"ar": "وكالات", "en": "OTA"},
}

ROOM_STATUS_LABELS = {
    "available": {"ar": "متاحة", "en": "Available"},
    "occupied": {"ar": "مشغولة", "en": "Occupied"},
    "reserved": {"ar": "محجوزة", "en": "Reserved"},
    "maintenance": {"ar": "صيانة", "en": "Maintenance"},
    "cleaning": {"ar": "تنظيف", "en": "Cleaning"},
    "inactive": {"ar": "غير نشطة", "en": "Inactive"},
}

ROOM_TYPE_LABELS = {
    "single": {"ar": "مفردة", "en": "Single"},
    "double": {"ar": "مزدوجة", "en": "Double"},
    "twin": {"ar": "توأم", "en": "Twin"},
    "suite": {"ar": "جناح", "en": "Suite"},
    "deluxe": {"ar": "فاخرة", "en": "Deluxe"},
    "presidential": {"ar": "رئاسية", "en": "Presidential"},
}

GUEST_TYPE_LABELS = {
    "individual": {"ar": "فردي", "en": "Individual"},
    "corporate": {"ar": "شركات", "en": "Corporate"},
    "vip": {"ar": "VIP", "en": "VIP"},
}

ID_TYPE_LABELS = {
    "passport": {"ar": "جواز سفر", "en": "Passport"},
    "national_id": {"ar": "هوية وطنية", "en": "National ID"},
    "driver_license": {"ar": "رخصة قيادة", "en": "Driver license"},
}

ROLE_LABELS = {
    "super_admin": {"ar": "سوبر أدمن رئيسي", "en": "Main super admin"},
    "sub_super_admin": {"ar": "صب سوبر أدمن", "en": "Sub super admin"},
    "admin": {"ar": "مدير الفندق", "en": "Hotel admin"},
    "manager": {"ar": "مدير تشغيلي", "en": "Operations manager"},
    "receptionist": {"ar": "موظف استقبال", "en": "Receptionist"},
    "housekeeping": {"ar": "إشراف نظافة", "en": "Housekeeping"},
    "accountant": {"ar": "محاسب", "en": "Accountant"},
}

PLAN_LABELS = {
    "free": {"ar": "مجاني", "en": "Free"},
    "basic": {"ar": "أساسي", "en": "Basic"},
    "premium": {"ar": "احترافي", "en": "Premium"},
    "enterprise": {"ar": "مؤسسي", "en": "Enterprise"},
}

SUBSCRIPTION_STATUS_LABELS = {
    "active": {"ar": "نشط", "en": "Active"},
    "suspended": {"ar": "معلّق", "en": "Suspended"},
    "cancelled": {"ar": "ملغي", "en": "Cancelled"},
}

ALERT_SEVERITY_LABELS = {
    "info": {"ar": "متابعة", "en": "Follow up"},
    "warning": {"ar": "تنبيه", "en": "Warning"},
    "critical": {"ar": "حرج", "en": "Critical"},
    "expired": {"ar": "منتهي", "en": "Expired"},
}

RISK_LEVEL_LABELS = {
    "low": {"ar": "منخفض", "en": "Low"},
    "medium": {"ar": "متوسط", "en": "Medium"},
    "high": {"ar": "مرتفع", "en": "High"},
}

RISK_FLAG_LABELS = {
    "unverified_account": {"ar": "الحساب غير موثق", "en": "Unverified account"},
    "very_high_24h_activity": {"ar": "نشاط مرتفع جدا خلال 24 ساعة", "en": "Very high activity in 24h"},
    "high_24h_activity": {"ar": "نشاط مرتفع خلال 24 ساعة", "en": "High activity in 24h"},
    "elevated_24h_activity": {"ar": "نشاط أعلى من المعتاد", "en": "Elevated activity"},
    "many_sensitive_actions": {"ar": "عدد كبير من الإجراءات الحساسة", "en": "Many sensitive actions"},
    "sensitive_actions": {"ar": "إجراءات حساسة متعددة", "en": "Multiple sensitive actions"},
    "few_sensitive_actions": {"ar": "إجراءات حساسة محدودة", "en": "Few sensitive actions"},
    "inactive_account": {"ar": "الحساب غير نشط", "en": "Inactive account"},
    "new_account_high_activity": {"ar": "حساب جديد بنشاط مرتفع", "en": "New account with high activity"},
    "no_recorded_activity": {"ar": "لا يوجد نشاط مسجل", "en": "No recorded activity"},
    "stale_activity": {"ar": "آخر نشاط قديم", "en": "Stale activity"},
}

# 徽章色调，供前端选择样式
RISK_BADGE_TONES = {"high": "danger", "medium": "warning", "low": "success"}
ALERT_BADGE_TONES = {"expired": "danger", "critical": "danger", "warning": "warning", "info": "primary"}


def booking_status_label(value: Optional[str], lang: str) -> str:
    """未知状态按 pending 显示"""
    return label(BOOKING_STATUS_LABELS, value if value in BOOKING_STATUS_LABELS else "pending", lang)


def payment_status_label(value: Optional[str], lang: str) -> str:
    """未知支付状态按 pending 显示"""
    return label(PAYMENT_STATUS_LABELS, value if value in PAYMENT_STATUS_LABELS else "pending", lang)


def payment_method_label(value: Optional[str], lang: str) -> str:
    return label(PAYMENT_METHOD_LABELS, value, lang, fallback=t(lang, "غير محدد", "Not specified"))


def room_type_label(value: Optional[str], lang: str) -> str:
    return label(ROOM_TYPE_LABELS, value, lang)


def room_status_label(value: Optional[str], lang: str) -> str:
    return label(ROOM_STATUS_LABELS, value, lang)


def risk_flag_label(flag: str, lang: str) -> str:
    """未知的风险标记原样显示"""
    return label(RISK_FLAG_LABELS, flag, lang)


def days_remaining_label(days: int, lang: str) -> str:
    """订阅剩余天数的展示文案"""
    if days < 0:
        return t(lang, f"منتهي منذ {abs(days)} يوم", f"Expired {abs(days)} days ago")
    if days == 0:
        return t(lang, "ينتهي اليوم", "Expires today")
    if days == 1:
        return t(lang, "ينتهي غداً", "Expires tomorrow")
    return t(lang, f"متبقي {days} أيام", f"{days} days left")
