"""
预订服务 - 预订列表、详情、付款对账与新建预订
"""
import asyncio
import logging
from datetime import datetime, UTC
from typing import Any, Dict, List, Optional

from hms.config import settings
from hms.domain import reconciliation as rec
from hms.domain.labels import (
    BOOKING_SOURCE_LABELS, booking_status_label, payment_method_label, payment_status_label,
    room_type_label,
)
from hms.models.ontology import Booking, BookingStatus, Guest, PaymentStatus, Room
from hms.models.schemas import BookingCancel, BookingCreate, BookingNotesUpdate, PaymentEntry
from hms.services.base import ConsoleService
from hms_core.formatting import parse_datetime
from hms_core.i18n import label
from hms_core.listing import count_where, filter_by_query, stable_sort, sum_of

logger = logging.getLogger(__name__)

BOOKING_SORT_FIELDS = ("checkInDate", "checkOutDate", "total", "createdAt")


def _timestamp(value: Any) -> float:
    parsed = parse_datetime(value)
    return parsed.timestamp() if parsed else 0.0


def _sort_key(field: str):
    if field == "total":
        return lambda b: b.pricing.total or 0
    if field == "checkOutDate":
        return lambda b: _timestamp(b.check_out_date)
    if field == "createdAt":
        return lambda b: _timestamp(b.created_at or b.check_in_date)
    return lambda b: _timestamp(b.check_in_date)


def _search_fields(booking: Booking) -> List[Any]:
    guest = booking.guest
    room = booking.room
    return [
        booking.booking_number,
        f"{guest.first_name or ''} {guest.last_name or ''}" if guest else None,
        guest.phone if guest else None,
        room.room_number if room else None,
    ]


def booking_stats(bookings: List[Booking]) -> Dict[str, Any]:
    """预订统计卡片（收入不含已取消的预订）"""
    def has_status(status: BookingStatus):
        return lambda b: b.status == status.value

    return {
        "total": len(bookings),
        "pending": count_where(bookings, has_status(BookingStatus.PENDING)),
        "confirmed": count_where(bookings, has_status(BookingStatus.CONFIRMED)),
        "checkedIn": count_where(bookings, has_status(BookingStatus.CHECKED_IN)),
        "checkedOut": count_where(bookings, has_status(BookingStatus.CHECKED_OUT)),
        "cancelled": count_where(bookings, has_status(BookingStatus.CANCELLED)),
        "revenue": sum_of(
            bookings,
            lambda b: b.pricing.total,
            lambda b: b.status != BookingStatus.CANCELLED.value,
        ),
    }


class BookingService(ConsoleService):
    """预订视图服务"""

    # ============== 列表 ==============

    async def list_bookings(
        self,
        status: Optional[str] = None,
        payment_status: Optional[str] = None,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: str = "checkInDate",
        sort_order: str = "asc",
    ) -> Dict[str, Any]:
        """
        预订列表页

        服务端按状态/支付状态/日期过滤；取回后再在本地按支付状态过滤、搜索与排序。
        统计基于服务端过滤后的完整结果集。
        """
        payload = await self.api.get(
            "/api/bookings",
            params={
                "status": status if status != "all" else None,
                "paymentStatus": payment_status if payment_status != "all" else None,
                "fromDate": from_date,
                "toDate": to_date,
            },
            fallback=self.t("تعذر جلب الحجوزات", "Failed to load bookings"),
        )
        bookings = [Booking.model_validate(item) for item in self.unwrap_list(payload)]

        visible = bookings
        if payment_status and payment_status != "all":
            visible = [b for b in visible if b.payment.status == payment_status]
        visible = filter_by_query(visible, search, _search_fields)
        if sort_by not in BOOKING_SORT_FIELDS:
            sort_by = "checkInDate"
        visible = stable_sort(visible, _sort_key(sort_by), sort_order)

        return {
            "items": [self._row(b) for b in visible],
            "total": len(visible),
            "stats": booking_stats(bookings),
            "sortBy": sort_by,
            "sortOrder": sort_order,
        }

    def _row(self, booking: Booking) -> Dict[str, Any]:
        row = booking.to_api()
        total = rec.booking_total(booking)
        row.update({
            "nights": rec.calculate_nights(booking.check_in_date, booking.check_out_date),
            "remaining": rec.remaining_balance(booking),
            "statusLabel": booking_status_label(booking.status, self.lang),
            "paymentStatusLabel": payment_status_label(booking.payment.status, self.lang),
            "display": {
                "total": self.money(total),
                "checkIn": self.date(booking.check_in_date),
                "checkOut": self.date(booking.check_out_date),
            },
        })
        return row

    # ============== 详情 ==============

    async def get_booking(self, booking_id: str) -> Dict[str, Any]:
        booking = await self._fetch(booking_id)
        return self.build_detail(booking)

    async def _fetch(self, booking_id: str) -> Booking:
        payload = await self.api.get(
            f"/api/bookings/{booking_id}",
            fallback=self.t("تعذر جلب بيانات الحجز", "Failed to load booking"),
        )
        return Booking.model_validate(self.unwrap_object(payload))

    def guests_summary(self, booking: Booking) -> str:
        count = booking.number_of_guests
        if count is None:
            return self.t("غير محدد", "Not specified")
        return self.t(
            f"{count.adults} بالغ • {count.children} طفل",
            f"{count.adults} adults • {count.children} children",
        )

    def _transactions(self, booking: Booking) -> List[Dict[str, Any]]:
        return [
            {
                **tx.to_api(),
                "methodLabel": payment_method_label(tx.method, self.lang),
                "amountLabel": self.money(tx.amount or 0),
                "dateLabel": self.datetime(tx.date),
            }
            for tx in booking.payment.transactions
        ]

    def build_detail(self, booking: Booking) -> Dict[str, Any]:
        """
        预订详情视图

        Returns:
            预订原始数据 + 金额对账结果 + 标签 + 按钮可用状态
        """
        total = rec.booking_total(booking)
        paid = rec.paid_amount(booking)
        remaining = rec.remaining_balance(booking)
        latest = rec.latest_transaction(booking)
        method = rec.resolve_payment_method(booking)
        return {
            "booking": booking.to_api(),
            "nights": rec.calculate_nights(booking.check_in_date, booking.check_out_date),
            "total": total,
            "paid": paid,
            "remaining": remaining,
            "latestTransaction": latest.to_api() if latest else None,
            "paymentMethod": method,
            "paymentMethodLabel": payment_method_label(method, self.lang),
            "statusLabel": booking_status_label(booking.status, self.lang),
            "paymentStatusLabel": payment_status_label(booking.payment.status, self.lang),
            "sourceLabel": label(BOOKING_SOURCE_LABELS, booking.source, self.lang) if booking.source else None,
            "guestsSummary": self.guests_summary(booking),
            "actions": rec.available_actions(booking).to_dict(),
            "transactions": self._transactions(booking),
            "display": {
                "total": self.money(total),
                "paid": self.money(paid),
                "remaining": self.money(remaining),
                "checkIn": self.date(booking.check_in_date),
                "checkOut": self.date(booking.check_out_date),
                "createdAt": self.datetime(booking.created_at),
            },
        }

    # ============== 状态与付款 ==============

    async def _update(self, booking_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """PUT 更新后直接用上游返回的对象重建详情视图"""
        payload = await self.api.put(
            f"/api/bookings/{booking_id}",
            json=body,
            fallback=self.t("تعذر تحديث الحجز", "Failed to update booking"),
        )
        return self.build_detail(Booking.model_validate(self.unwrap_object(payload)))

    async def change_status(self, booking_id: str, target: str) -> Dict[str, Any]:
        """
        变更预订状态

        Raises:
            ActionNotAllowedError: 当前状态下该按钮不可用（不会发出 PUT）
        """
        if target == BookingStatus.CANCELLED.value:
            return await self.cancel(booking_id, BookingCancel())
        booking = await self._fetch(booking_id)
        rec.ensure_status_change_allowed(booking.status, target, self.lang)
        logger.info(f"Booking {booking_id} status {booking.status} -> {target}")
        return await self._update(booking_id, {"status": target})

    async def cancel(self, booking_id: str, form: BookingCancel) -> Dict[str, Any]:
        booking = await self._fetch(booking_id)
        rec.ensure_status_change_allowed(booking.status, BookingStatus.CANCELLED.value, self.lang)
        logger.info(f"Booking {booking_id} cancelled from {booking.status}")
        return await self._update(booking_id, rec.cancel_payload(form.cancellation_reason))

    async def add_payment(self, booking_id: str, entry: PaymentEntry) -> Dict[str, Any]:
        """
        新增一笔付款

        Raises:
            ConsoleValidationError: 金额无效或超过剩余应付（不会发出 PUT）
        """
        booking = await self._fetch(booking_id)
        amount = rec.validate_payment_amount(entry.amount, rec.remaining_balance(booking), self.lang)
        logger.info(f"Booking {booking_id} payment {amount} via {entry.method.value}")
        return await self._update(
            booking_id, rec.add_payment_payload(amount, entry.method.value, entry.reference)
        )

    async def confirm_payment(self, booking_id: str) -> Dict[str, Any]:
        booking = await self._fetch(booking_id)
        rec.ensure_can_confirm_payment(booking, self.lang)
        logger.info(f"Booking {booking_id} payment confirmed")
        return await self._update(booking_id, rec.confirm_payment_payload(booking))

    async def update_notes(self, booking_id: str, form: BookingNotesUpdate) -> Dict[str, Any]:
        return await self._update(booking_id, rec.notes_payload(form.notes, form.special_requests))

    # ============== 收据 ==============

    async def get_receipt(self, booking_id: str) -> Dict[str, Any]:
        booking = await self._fetch(booking_id)
        rec.ensure_can_print_receipt(booking, self.lang)
        return self.build_receipt(booking)

    def build_receipt(self, booking: Booking, issued_at: Optional[datetime] = None) -> Dict[str, Any]:
        """
        收据视图（打印由浏览器完成）

        明细行：房费（房价 × 晚数）、折扣（非 0 时）、税费（酒店税率）。
        """
        nights = booking.pricing.number_of_nights or rec.calculate_nights(
            booking.check_in_date, booking.check_out_date
        )
        room_rate = booking.pricing.room_rate or 0
        subtotal = booking.pricing.subtotal if booking.pricing.subtotal is not None else room_rate * nights
        tax_rate = self._tax_rate()

        items = [{
            "key": "stay",
            "label": self.t(
                f"{self.money(room_rate)} × {nights} ليلة",
                f"{self.money(room_rate)} × {nights} nights",
            ),
            "amount": subtotal,
            "amountLabel": self.money(subtotal),
        }]
        if booking.pricing.discount:
            items.append({
                "key": "discount",
                "label": self.t("الخصم", "Discount"),
                "amount": -booking.pricing.discount,
                "amountLabel": f"- {self.money(booking.pricing.discount)}",
            })
        taxes = booking.pricing.taxes or 0
        items.append({
            "key": "tax",
            "label": self.t(f"الضريبة ({tax_rate:g}%)", f"Tax ({tax_rate:g}%)"),
            "amount": taxes,
            "amountLabel": self.money(taxes),
        })

        guest = booking.guest
        room = booking.room
        method = rec.resolve_payment_method(booking)
        latest = rec.latest_transaction(booking)
        total = rec.booking_total(booking)
        paid = rec.paid_amount(booking)
        remaining = rec.remaining_balance(booking)
        return {
            "receiptNumber": booking.booking_number,
            "issuedAt": self.datetime(issued_at or datetime.now(UTC)),
            "hotel": self.context.hotel_profile if self.context else {},
            "paymentStatusLabel": payment_status_label(booking.payment.status, self.lang),
            "paymentMethodLabel": payment_method_label(method, self.lang),
            "guest": {
                "name": guest.full_name if guest else "",
                "phone": guest.phone if guest else None,
            },
            "room": {
                "number": room.room_number if room else None,
                "type": room_type_label(room.type, self.lang) if room and room.type else None,
                "floor": room.floor if room else None,
            },
            "stay": {
                "checkIn": self.date(booking.check_in_date),
                "checkOut": self.date(booking.check_out_date),
                "nights": nights,
            },
            "guestsSummary": self.guests_summary(booking),
            "items": items,
            "total": total,
            "paid": paid,
            "remaining": remaining,
            "display": {
                "total": self.money(total),
                "paid": self.money(paid),
                "remaining": self.money(remaining),
            },
            "transactions": self._transactions(booking),
            "latestPaymentAt": self.datetime(latest.date) if latest else "—",
            "latestReference": (latest.reference if latest else None) or "—",
            "fullyPaid": booking.payment.status == PaymentStatus.PAID.value,
        }

    # ============== 新建预订 ==============

    async def form_options(self) -> Dict[str, Any]:
        """新建预订表单的可选房间与客人（并发获取）"""
        rooms_payload, guests_payload = await asyncio.gather(
            self.api.get(
                "/api/rooms",
                params={"status": "available", "limit": settings.OPTIONS_PAGE_LIMIT},
                fallback=self.t("تعذر جلب الغرف", "Failed to load rooms"),
            ),
            self.api.get(
                "/api/guests",
                params={"limit": settings.OPTIONS_PAGE_LIMIT},
                fallback=self.t("تعذر جلب النزلاء", "Failed to load guests"),
            ),
        )
        rooms = [Room.model_validate(item) for item in self.unwrap_list(rooms_payload)]
        guests = [Guest.model_validate(item) for item in self.unwrap_list(guests_payload)]
        return {
            "rooms": [
                {
                    "id": room.id,
                    "roomNumber": room.room_number,
                    "type": room.type,
                    "typeLabel": room_type_label(room.type, self.lang) if room.type else None,
                    "pricePerNight": room.price_per_night,
                    "label": self.t(
                        f"غرفة {room.room_number} - {self.money(room.price_per_night)}",
                        f"Room {room.room_number} - {self.money(room.price_per_night)}",
                    ),
                }
                for room in rooms
            ],
            "guests": [
                {"id": guest.id, "name": guest.full_name, "phone": guest.phone}
                for guest in guests
            ],
            "taxRate": self._tax_rate(),
        }

    def _tax_rate(self) -> float:
        return self.context.hotel_settings.tax_rate if self.context else settings.DEFAULT_TAX_RATE

    def preview_pricing(self, price_per_night: Optional[float], check_in: Any, check_out: Any) -> Dict[str, Any]:
        preview = rec.pricing_preview(price_per_night, check_in, check_out, self._tax_rate())
        result = preview.to_dict()
        result["display"] = {
            "subtotal": self.money(preview.subtotal),
            "taxes": self.money(preview.taxes),
            "total": self.money(preview.total),
        }
        return result

    async def create_booking(self, form: BookingCreate) -> Dict[str, Any]:
        payload = await self.api.post(
            "/api/bookings",
            json=form.to_api(),
            fallback=self.t("تعذر إنشاء الحجز", "Failed to create booking"),
        )
        booking = Booking.model_validate(self.unwrap_object(payload))
        logger.info(f"Booking created: {booking.booking_number or booking.id}")
        return self.build_detail(booking)
