"""
预订管理路由 - 列表、详情、状态变更、付款与收据
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from hms.api_client import ApiClient, get_api
from hms.domain.errors import ActionNotAllowedError, ConsoleValidationError
from hms.models.ontology import BookingStatus
from hms.models.schemas import (
    BookingCancel, BookingCreate, BookingNotesUpdate, BookingStatusChange, PaymentEntry,
    PricingPreviewRequest,
)
from hms.routers.deps import console_error
from hms.security import permissions as perms
from hms.security.auth import require_permission
from hms.security.context import ConsoleContext
from hms.services.booking_service import BookingService

router = APIRouter(prefix="/console/bookings", tags=["预订管理"])

# 每个目标状态对应的操作权限
STATUS_PERMISSIONS = {
    BookingStatus.CONFIRMED: perms.BOOKING_CONFIRM,
    BookingStatus.CHECKED_IN: perms.BOOKING_CHECKIN,
    BookingStatus.CHECKED_OUT: perms.BOOKING_CHECKOUT,
    BookingStatus.CANCELLED: perms.BOOKING_CANCEL,
    BookingStatus.NO_SHOW: perms.BOOKING_UPDATE,
}


@router.get("")
async def list_bookings(
    status_filter: Optional[str] = Query(None, alias="status"),
    payment_status: Optional[str] = Query(None, alias="paymentStatus"),
    from_date: Optional[str] = Query(None, alias="fromDate"),
    to_date: Optional[str] = Query(None, alias="toDate"),
    search: Optional[str] = None,
    sort_by: str = Query("checkInDate", alias="sortBy"),
    sort_order: str = Query("asc", alias="sortOrder", pattern="^(asc|desc)$"),
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_permission(perms.BOOKING_READ))
):
    """获取预订列表"""
    service = BookingService(api, current_user)
    return await service.list_bookings(
        status=status_filter, payment_status=payment_status, from_date=from_date,
        to_date=to_date, search=search, sort_by=sort_by, sort_order=sort_order,
    )


# ============== 新建预订 ==============

@router.get("/options")
async def get_form_options(
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_permission(perms.BOOKING_CREATE))
):
    """新建预订表单的可选房间与客人"""
    return await BookingService(api, current_user).form_options()


@router.post("/pricing-preview")
async def preview_pricing(
    data: PricingPreviewRequest,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_permission(perms.BOOKING_CREATE))
):
    """按房价、日期和酒店税率预估总价"""
    service = BookingService(api, current_user)
    return service.preview_pricing(data.price_per_night, data.check_in_date, data.check_out_date)


@router.post("")
async def create_booking(
    data: BookingCreate,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_permission(perms.BOOKING_CREATE))
):
    """创建预订"""
    return await BookingService(api, current_user).create_booking(data)


# ============== 详情与操作 ==============

@router.get("/{booking_id}")
async def get_booking(
    booking_id: str,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_permission(perms.BOOKING_READ))
):
    """预订详情（含对账结果与可用操作）"""
    return await BookingService(api, current_user).get_booking(booking_id)


@router.post("/{booking_id}/status")
async def change_status(
    booking_id: str,
    data: BookingStatusChange,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_permission(perms.BOOKING_UPDATE, perms.BOOKING_CONFIRM))
):
    """变更预订状态（确认 / 入住 / 退房 / 取消 / 未到店）"""
    required = STATUS_PERMISSIONS.get(data.status)
    if required is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"field": "status", "message": f"Unsupported target status: {data.status.value}"},
        )
    if not current_user.can(required):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"Missing permission: {required}")

    service = BookingService(api, current_user)
    try:
        return await service.change_status(booking_id, data.status.value)
    except ActionNotAllowedError as e:
        raise console_error(e, current_user.lang)


@router.post("/{booking_id}/cancel")
async def cancel_booking(
    booking_id: str,
    data: BookingCancel,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_permission(perms.BOOKING_CANCEL))
):
    """取消预订"""
    service = BookingService(api, current_user)
    try:
        return await service.cancel(booking_id, data)
    except ActionNotAllowedError as e:
        raise console_error(e, current_user.lang)


@router.post("/{booking_id}/payments")
async def add_payment(
    booking_id: str,
    data: PaymentEntry,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_permission(perms.PAYMENT_CREATE))
):
    """新增付款（金额不能超过剩余应付）"""
    service = BookingService(api, current_user)
    try:
        return await service.add_payment(booking_id, data)
    except ConsoleValidationError as e:
        raise console_error(e, current_user.lang)


@router.post("/{booking_id}/confirm-payment")
async def confirm_payment(
    booking_id: str,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_permission(perms.PAYMENT_CREATE))
):
    """确认已全额付款"""
    service = BookingService(api, current_user)
    try:
        return await service.confirm_payment(booking_id)
    except ActionNotAllowedError as e:
        raise console_error(e, current_user.lang)


@router.put("/{booking_id}/notes")
async def update_notes(
    booking_id: str,
    data: BookingNotesUpdate,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_permission(perms.BOOKING_UPDATE))
):
    """更新备注与特殊要求"""
    return await BookingService(api, current_user).update_notes(booking_id, data)


@router.get("/{booking_id}/receipt")
async def get_receipt(
    booking_id: str,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_permission(perms.BOOKING_READ))
):
    """收据（仅在已结清时可用）"""
    service = BookingService(api, current_user)
    try:
        return await service.get_receipt(booking_id)
    except ActionNotAllowedError as e:
        raise console_error(e, current_user.lang)
