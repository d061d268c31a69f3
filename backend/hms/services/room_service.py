"""
房间服务 - 房间列表、筛选排序与增删改
"""
import logging
from typing import Any, Dict, List, Optional

from hms.domain.labels import room_status_label, room_type_label
from hms.models.ontology import Room, RoomStatus
from hms.models.schemas import RoomCreate, RoomUpdate
from hms.services.base import ConsoleService
from hms_core.listing import count_where, filter_by_query, natural_key, stable_sort

logger = logging.getLogger(__name__)

INACTIVE = "inactive"

# 按状态排序时的先后顺序，未知状态排在最后
STATUS_ORDER = {
    RoomStatus.AVAILABLE.value: 1,
    RoomStatus.OCCUPIED.value: 2,
    RoomStatus.RESERVED.value: 3,
    RoomStatus.CLEANING.value: 4,
    RoomStatus.MAINTENANCE.value: 5,
    INACTIVE: 6,
}

ROOM_SORT_FIELDS = ("roomNumber", "price", "floor", "status")


def _sort_key(field: str):
    if field == "price":
        return lambda room: room.price_per_night
    if field == "floor":
        return lambda room: room.floor
    if field == "status":
        return lambda room: STATUS_ORDER.get(room.effective_status, 99)
    return lambda room: natural_key(room.room_number)


def room_stats(rooms: List[Room]) -> Dict[str, int]:
    """状态统计只计入启用中的房间，停用房间单独计数"""
    def active_in(*statuses: str):
        return lambda room: room.is_active is not False and room.status in statuses

    return {
        "total": len(rooms),
        "available": count_where(rooms, active_in(RoomStatus.AVAILABLE.value)),
        "occupied": count_where(rooms, active_in(RoomStatus.OCCUPIED.value)),
        "reserved": count_where(rooms, active_in(RoomStatus.RESERVED.value)),
        "maintenance": count_where(rooms, active_in(RoomStatus.MAINTENANCE.value, RoomStatus.CLEANING.value)),
        "inactive": count_where(rooms, lambda room: room.is_active is False),
    }


def distinct_floors(rooms: List[Room]) -> List[int]:
    return sorted({room.floor for room in rooms})


class RoomService(ConsoleService):
    """房间视图服务"""

    async def list_rooms(
        self,
        status: Optional[str] = None,
        room_type: Optional[str] = None,
        floor: Optional[int] = None,
        search: Optional[str] = None,
        sort_by: str = "roomNumber",
        sort_order: str = "asc",
    ) -> Dict[str, Any]:
        """
        房间列表页

        status 原样转发给上游（包括 inactive），本地再按 isActive / 类型 / 楼层过滤。
        统计和楼层选项基于取回的完整结果集。
        """
        payload = await self.api.get(
            "/api/rooms",
            params={"status": status},
            fallback=self.t("تعذر جلب الغرف", "Failed to load rooms"),
        )
        rooms = [Room.model_validate(item) for item in self.unwrap_list(payload)]

        visible = rooms
        if status == INACTIVE:
            visible = [room for room in visible if room.is_active is False]
        elif status:
            visible = [room for room in visible if room.status == status]
        if room_type:
            visible = [room for room in visible if room.type == room_type]
        if floor is not None:
            visible = [room for room in visible if room.floor == floor]
        visible = filter_by_query(
            visible,
            search,
            lambda room: [room.room_number, room_type_label(room.type, self.lang), str(room.floor)],
        )
        if sort_by not in ROOM_SORT_FIELDS:
            sort_by = "roomNumber"
        visible = stable_sort(visible, _sort_key(sort_by), sort_order)

        return {
            "items": [self._row(room) for room in visible],
            "total": len(visible),
            "fetched": len(rooms),
            "stats": room_stats(rooms),
            "floors": distinct_floors(rooms),
            "sortBy": sort_by,
            "sortOrder": sort_order,
        }

    def _row(self, room: Room) -> Dict[str, Any]:
        row = room.to_api()
        row.update({
            "effectiveStatus": room.effective_status,
            "statusLabel": room_status_label(room.effective_status, self.lang),
            "typeLabel": room_type_label(room.type, self.lang),
            "priceLabel": self.money(room.price_per_night),
        })
        return row

    async def get_room(self, room_id: str) -> Dict[str, Any]:
        payload = await self.api.get(
            f"/api/rooms/{room_id}",
            fallback=self.t("تعذر جلب بيانات الغرفة", "Failed to load room"),
        )
        return self._row(Room.model_validate(self.unwrap_object(payload)))

    async def create_room(self, form: RoomCreate) -> Dict[str, Any]:
        payload = await self.api.post(
            "/api/rooms",
            json=form.to_api(),
            fallback=self.t("تعذر إضافة الغرفة", "Failed to create room"),
        )
        room = Room.model_validate(self.unwrap_object(payload))
        logger.info(f"Room created: {room.room_number}")
        return self._row(room)

    async def update_room(self, room_id: str, form: RoomUpdate) -> Dict[str, Any]:
        payload = await self.api.put(
            f"/api/rooms/{room_id}",
            json=form.to_api_patch(),
            fallback=self.t("تعذر تحديث الغرفة", "Failed to update room"),
        )
        return self._row(Room.model_validate(self.unwrap_object(payload)))

    async def delete_room(self, room_id: str) -> Dict[str, Any]:
        """停用房间（上游做软删除）"""
        payload = await self.api.delete(
            f"/api/rooms/{room_id}",
            fallback=self.t("تعذر حذف الغرفة", "Failed to delete room"),
        )
        logger.info(f"Room {room_id} deactivated")
        return {"message": payload.get("message") or self.t("تم حذف الغرفة", "Room deleted")}
