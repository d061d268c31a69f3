"""
预订付款对账规则

控制台唯一自行维护的不变量：
    remaining = max(total - paidAmount, 0)
    新付款金额必须满足 0 < amount <= remaining

上游仍然是最终权威，这里的校验只是为了在明显无效时不发请求。
"""
import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from hms.domain.errors import ActionNotAllowedError, ConsoleValidationError
from hms.models.ontology import Booking, BookingStatus, PaymentStatus, PaymentTransaction
from hms_core.formatting import parse_datetime
from hms_core.i18n import t

SECONDS_PER_DAY = 24 * 60 * 60

# 目标状态 -> 允许该变更的当前状态
STATUS_TRANSITIONS = {
    BookingStatus.CONFIRMED.value: (BookingStatus.PENDING.value,),
    BookingStatus.CHECKED_IN.value: (BookingStatus.CONFIRMED.value,),
    BookingStatus.CHECKED_OUT.value: (BookingStatus.CHECKED_IN.value,),
    BookingStatus.CANCELLED.value: (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value),
    BookingStatus.NO_SHOW.value: (BookingStatus.CONFIRMED.value,),
}


def calculate_nights(check_in: Any, check_out: Any) -> int:
    """
    计算住宿晚数

    按整天向上取整，结果不小于 0；任一日期无效时返回 0。

    Example:
        >>> calculate_nights("2024-01-01", "2024-01-04")
        3
    """
    start = parse_datetime(check_in)
    end = parse_datetime(check_out)
    if start is None or end is None:
        return 0
    diff = (end - start).total_seconds() / SECONDS_PER_DAY
    return max(math.ceil(diff), 0)


def booking_total(booking: Booking) -> float:
    return booking.pricing.total or 0


def paid_amount(booking: Booking) -> float:
    return booking.payment.paid_amount or 0


def remaining_balance(booking: Booking) -> float:
    """剩余应付，永不为负"""
    return max(booking_total(booking) - paid_amount(booking), 0)


def latest_transaction(booking: Booking) -> Optional[PaymentTransaction]:
    transactions = booking.payment.transactions
    return transactions[-1] if transactions else None


def resolve_payment_method(booking: Booking) -> Optional[str]:
    """最近一笔交易的支付方式，其次是预订上记录的支付方式"""
    latest = latest_transaction(booking)
    if latest is not None and latest.method:
        return latest.method
    return booking.payment.method


def validate_payment_amount(amount: Any, remaining: float, lang: str = "ar") -> float:
    """
    校验新增付款金额

    Raises:
        ConsoleValidationError: 金额不是有限正数，或超过剩余应付
    """
    try:
        value = float(amount)
    except (TypeError, ValueError, OverflowError):
        value = math.nan
    if isinstance(amount, bool) or not math.isfinite(value) or value <= 0:
        raise ConsoleValidationError("amount", t(lang, "أدخل مبلغاً صحيحاً", "Enter a valid amount"))
    if value > remaining:
        raise ConsoleValidationError(
            "amount", t(lang, "المبلغ أكبر من المتبقي", "Amount exceeds the remaining balance")
        )
    return value


# ============== 操作可用性 ==============

@dataclass
class BookingActions:
    """预订详情页上各个按钮的可用状态"""
    can_confirm: bool = False
    can_check_in: bool = False
    can_check_out: bool = False
    can_cancel: bool = False
    can_no_show: bool = False
    can_confirm_payment: bool = False
    can_print_receipt: bool = False
    can_add_payment: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return {
            "canConfirm": self.can_confirm,
            "canCheckIn": self.can_check_in,
            "canCheckOut": self.can_check_out,
            "canCancel": self.can_cancel,
            "canNoShow": self.can_no_show,
            "canConfirmPayment": self.can_confirm_payment,
            "canPrintReceipt": self.can_print_receipt,
            "canAddPayment": self.can_add_payment,
        }


def booking_actions(status: Optional[str]) -> BookingActions:
    """只由预订状态决定的操作"""
    return BookingActions(
        can_confirm=status == BookingStatus.PENDING.value,
        can_check_in=status == BookingStatus.CONFIRMED.value,
        can_check_out=status == BookingStatus.CHECKED_IN.value,
        can_cancel=status in (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value),
        can_no_show=status == BookingStatus.CONFIRMED.value,
    )


def can_confirm_payment(booking: Booking) -> bool:
    return remaining_balance(booking) == 0 and booking.payment.status != PaymentStatus.PAID.value


def can_print_receipt(booking: Booking) -> bool:
    return booking.payment.status == PaymentStatus.PAID.value or remaining_balance(booking) == 0


def available_actions(booking: Booking) -> BookingActions:
    """预订状态与付款状态共同决定的全部操作"""
    actions = booking_actions(booking.status)
    actions.can_confirm_payment = can_confirm_payment(booking)
    actions.can_print_receipt = can_print_receipt(booking)
    actions.can_add_payment = remaining_balance(booking) > 0
    return actions


def ensure_status_change_allowed(current: Optional[str], target: str, lang: str = "ar") -> None:
    """状态变更按钮被禁用时直接拒绝"""
    allowed_from = STATUS_TRANSITIONS.get(target, ())
    if current not in allowed_from:
        raise ActionNotAllowedError(
            target,
            t(lang, "لا يمكن تنفيذ هذا الإجراء في حالة الحجز الحالية",
              "This action is not available for the current booking status"),
            status=current,
        )


def ensure_can_confirm_payment(booking: Booking, lang: str = "ar") -> None:
    if remaining_balance(booking) > 0:
        raise ActionNotAllowedError(
            "confirmPayment",
            t(lang, "لا يمكن تأكيد الدفع قبل تسوية المبلغ المتبقي",
              "Cannot confirm payment before settling the remaining balance"),
            status=booking.payment.status,
        )
    if booking.payment.status == PaymentStatus.PAID.value:
        raise ActionNotAllowedError(
            "confirmPayment",
            t(lang, "تم تأكيد الدفع مسبقاً", "Payment is already confirmed"),
            status=booking.payment.status,
        )


def ensure_can_print_receipt(booking: Booking, lang: str = "ar") -> None:
    if not can_print_receipt(booking):
        raise ActionNotAllowedError(
            "printReceipt",
            t(lang, "لا يمكن إصدار الإيصال قبل سداد كامل المبلغ", "Receipt is available once the booking is fully paid"),
            status=booking.payment.status,
        )


# ============== 上游请求体 ==============

def add_payment_payload(amount: float, method: str, reference: Optional[str] = None) -> Dict[str, Any]:
    entry: Dict[str, Any] = {"amount": amount, "method": method}
    if reference:
        entry["reference"] = reference
    return {"payment": {"addPayment": entry}}


def confirm_payment_payload(booking: Booking) -> Dict[str, Any]:
    return {"payment": {"status": PaymentStatus.PAID.value, "paidAmount": booking_total(booking)}}


def cancel_payload(reason: Optional[str] = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"status": BookingStatus.CANCELLED.value}
    if reason:
        payload["cancellationReason"] = reason
    return payload


def notes_payload(notes: str, special_requests: str) -> Dict[str, Any]:
    return {"notes": notes, "specialRequests": special_requests}


# ============== 新建预订价格预览 ==============

@dataclass
class PricingPreview:
    nights: int = 0
    subtotal: float = 0
    taxes: float = 0
    total: float = 0
    valid: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def pricing_preview(price_per_night: Optional[float], check_in: Any, check_out: Any,
                    tax_rate: float) -> PricingPreview:
    """
    新建预订时的价格预估

    日期无效或退房不晚于入住时返回全 0 且 valid=False。
    """
    start = parse_datetime(check_in)
    end = parse_datetime(check_out)
    if start is None or end is None or end <= start:
        return PricingPreview()
    nights = calculate_nights(start, end)
    subtotal = (price_per_night or 0) * nights
    taxes = subtotal * (tax_rate or 0) / 100
    return PricingPreview(nights=nights, subtotal=subtotal, taxes=taxes, total=subtotal + taxes, valid=True)
