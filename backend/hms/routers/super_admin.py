"""
平台管理路由 - 酒店、订阅提醒、平台用户与子超级管理员监控

酒店与用户视图对主/子超级管理员开放，监控视图仅限主超级管理员。
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from hms.api_client import ApiClient, get_api
from hms.models.schemas import (
    CreateUserRequest, HotelActiveUpdate, HotelVerifiedUpdate, RegisterHotelRequest,
    SubscriptionUpdate, SubSuperAdminUpdate, UpdateUserRequest, UserActiveUpdate,
)
from hms.security.auth import require_platform_admin, require_super_admin
from hms.security.context import ConsoleContext
from hms.services.hotel_admin_service import HotelAdminService
from hms.services.monitoring_service import MonitoringFilters, MonitoringService
from hms.services.user_admin_service import UserAdminService

router = APIRouter(prefix="/console/super-admin", tags=["平台管理"])


# ============== 酒店 ==============

@router.get("/hotels")
async def list_hotels(
    search: Optional[str] = None,
    status: str = Query("all", pattern="^(all|active|inactive)$"),
    plan: str = "all",
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_platform_admin)
):
    """酒店列表与统计"""
    return await HotelAdminService(api, current_user).list_hotels(search=search, status=status, plan=plan)


@router.post("/hotels")
async def create_hotel(
    data: RegisterHotelRequest,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_platform_admin)
):
    """创建酒店及其管理员"""
    return await HotelAdminService(api, current_user).create_hotel(data)


@router.patch("/hotels/{hotel_id}/active")
async def set_hotel_active(
    hotel_id: str,
    data: HotelActiveUpdate,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_platform_admin)
):
    """启用/停用酒店"""
    return await HotelAdminService(api, current_user).set_active(hotel_id, data)


@router.patch("/hotels/{hotel_id}/verified")
async def set_hotel_verified(
    hotel_id: str,
    data: HotelVerifiedUpdate,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_platform_admin)
):
    """认证/取消认证酒店"""
    return await HotelAdminService(api, current_user).set_verified(hotel_id, data)


@router.put("/hotels/{hotel_id}/subscription")
async def save_subscription(
    hotel_id: str,
    data: SubscriptionUpdate,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_platform_admin)
):
    """保存订阅信息"""
    return await HotelAdminService(api, current_user).save_subscription(hotel_id, data)


@router.patch("/hotel-admins/{user_id}")
async def update_hotel_admin(
    user_id: str,
    data: UpdateUserRequest,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_platform_admin)
):
    """编辑酒店管理员账号"""
    return await HotelAdminService(api, current_user).update_admin(user_id, data)


@router.get("/subscription-alerts")
async def get_subscription_alerts(
    window_days: int = Query(7, alias="windowDays", ge=1, le=30),
    run_maintenance: bool = Query(False, alias="runMaintenance"),
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_platform_admin)
):
    """订阅到期提醒"""
    service = HotelAdminService(api, current_user)
    return await service.subscription_alerts(window_days, run_maintenance)


# ============== 平台用户 ==============

@router.get("/users")
async def list_users(
    search: Optional[str] = None,
    role: Optional[str] = None,
    hotel_id: Optional[str] = Query(None, alias="hotelId"),
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_platform_admin)
):
    """平台用户列表"""
    return await UserAdminService(api, current_user).list_users(search=search, role=role, hotel_id=hotel_id)


@router.get("/users/options")
async def get_user_form_options(
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_platform_admin)
):
    """创建用户表单：可选角色与酒店"""
    service = UserAdminService(api, current_user)
    return {"roles": service.role_options(), "hotels": await service.hotel_options()}


@router.post("/users")
async def create_user(
    data: CreateUserRequest,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_platform_admin)
):
    """创建平台用户"""
    return await UserAdminService(api, current_user).create_user(data)


@router.patch("/users/{user_id}/active")
async def set_user_active(
    user_id: str,
    data: UserActiveUpdate,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_platform_admin)
):
    """启用/停用账号"""
    return await UserAdminService(api, current_user).set_active(user_id, data)


@router.patch("/users/{user_id}")
async def update_user(
    user_id: str,
    data: UpdateUserRequest,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_platform_admin)
):
    """编辑平台用户"""
    return await UserAdminService(api, current_user).update_user(user_id, data)


# ============== 子超级管理员监控 ==============

@router.get("/sub-super-admins")
async def monitor_sub_super_admins(
    search: str = "",
    status: str = "all",
    verification: str = "all",
    activity: str = "all",
    sort_by: str = Query("riskScore", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
    date_from: str = Query("", alias="from"),
    date_to: str = Query("", alias="to"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_super_admin)
):
    """子超级管理员风险监控"""
    filters = MonitoringFilters(
        search=search, status=status, verification=verification, activity=activity,
        sort_by=sort_by, sort_order=sort_order, date_from=date_from, date_to=date_to,
        page=page, limit=limit,
    )
    return await MonitoringService(api, current_user).overview(filters)


@router.get("/sub-super-admins/{user_id}/activity")
async def get_sub_super_admin_activity(
    user_id: str,
    action: Optional[str] = None,
    entity_type: Optional[str] = Query(None, alias="entityType"),
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    page: int = Query(1, ge=1),
    limit: int = Query(15, ge=1, le=100),
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_super_admin)
):
    """单个子超级管理员的操作记录"""
    service = MonitoringService(api, current_user)
    return await service.activity(
        user_id, action=action, entity_type=entity_type, date_from=date_from,
        date_to=date_to, page=page, limit=limit,
    )


@router.patch("/sub-super-admins/{user_id}")
async def update_sub_super_admin(
    user_id: str,
    data: SubSuperAdminUpdate,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_super_admin)
):
    """调整子超级管理员状态"""
    return await MonitoringService(api, current_user).update(user_id, data)
