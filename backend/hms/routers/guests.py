"""
客人管理路由
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from hms.api_client import ApiClient, get_api
from hms.models.schemas import GuestCreate, GuestUpdate
from hms.security import permissions as perms
from hms.security.auth import require_permission
from hms.security.context import ConsoleContext
from hms.services.guest_service import GuestService

router = APIRouter(prefix="/console/guests", tags=["客人管理"])


@router.get("")
async def list_guests(
    guest_type: Optional[str] = Query(None, alias="guestType"),
    search: Optional[str] = None,
    blacklisted: bool = False,
    sort_by: str = Query("name", alias="sortBy"),
    sort_order: str = Query("asc", alias="sortOrder", pattern="^(asc|desc)$"),
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_permission(perms.GUEST_READ))
):
    """获取客人列表"""
    service = GuestService(api, current_user)
    return await service.list_guests(
        guest_type=guest_type, search=search, blacklisted_only=blacklisted,
        sort_by=sort_by, sort_order=sort_order,
    )


@router.post("")
async def create_guest(
    data: GuestCreate,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_permission(perms.GUEST_CREATE))
):
    """创建客人"""
    return await GuestService(api, current_user).create_guest(data)


@router.get("/{guest_id}")
async def get_guest(
    guest_id: str,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_permission(perms.GUEST_READ))
):
    """获取客人详情"""
    return await GuestService(api, current_user).get_guest(guest_id)


@router.put("/{guest_id}")
async def update_guest(
    guest_id: str,
    data: GuestUpdate,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_permission(perms.GUEST_UPDATE))
):
    """更新客人信息"""
    return await GuestService(api, current_user).update_guest(guest_id, data)
