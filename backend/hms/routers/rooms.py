"""
房间管理路由
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from hms.api_client import ApiClient, get_api
from hms.models.schemas import MessageResponse, RoomCreate, RoomUpdate
from hms.security import permissions as perms
from hms.security.auth import require_permission
from hms.security.context import ConsoleContext
from hms.services.room_service import RoomService

router = APIRouter(prefix="/console/rooms", tags=["房间管理"])


@router.get("")
async def list_rooms(
    status: Optional[str] = None,
    room_type: Optional[str] = Query(None, alias="type"),
    floor: Optional[int] = None,
    search: Optional[str] = None,
    sort_by: str = Query("roomNumber", alias="sortBy"),
    sort_order: str = Query("asc", alias="sortOrder", pattern="^(asc|desc)$"),
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_permission(perms.ROOM_READ))
):
    """获取房间列表（含统计与楼层选项）"""
    service = RoomService(api, current_user)
    return await service.list_rooms(
        status=status, room_type=room_type, floor=floor, search=search,
        sort_by=sort_by, sort_order=sort_order,
    )


@router.post("")
async def create_room(
    data: RoomCreate,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_permission(perms.ROOM_CREATE))
):
    """创建房间"""
    return await RoomService(api, current_user).create_room(data)


@router.get("/{room_id}")
async def get_room(
    room_id: str,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_permission(perms.ROOM_READ))
):
    """获取房间详情"""
    return await RoomService(api, current_user).get_room(room_id)


@router.put("/{room_id}")
async def update_room(
    room_id: str,
    data: RoomUpdate,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_permission(perms.ROOM_UPDATE))
):
    """更新房间（只发送提交的字段）"""
    return await RoomService(api, current_user).update_room(room_id, data)


@router.delete("/{room_id}", response_model=MessageResponse)
async def delete_room(
    room_id: str,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_permission(perms.ROOM_DELETE))
):
    """停用房间"""
    return await RoomService(api, current_user).delete_room(room_id)
