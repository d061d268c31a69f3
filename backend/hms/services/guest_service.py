"""
客人服务 - 客人列表、统计与资料维护
"""
import logging
from typing import Any, Dict, List, Optional

from hms.config import settings
from hms.domain.labels import GUEST_TYPE_LABELS, ID_TYPE_LABELS
from hms.models.ontology import Guest, GuestType
from hms.models.schemas import GuestCreate, GuestUpdate
from hms.services.base import ConsoleService
from hms_core.formatting import parse_datetime
from hms_core.i18n import label
from hms_core.listing import count_where, filter_by_query, normalize_search_term, stable_sort, sum_of

logger = logging.getLogger(__name__)

GUEST_SORT_FIELDS = ("name", "spent", "stays", "recent")


def _recent_timestamp(guest: Guest) -> float:
    parsed = parse_datetime(guest.last_stay or guest.created_at)
    return parsed.timestamp() if parsed else 0.0


def _sort_key(field: str):
    if field == "spent":
        return lambda guest: guest.total_spent or 0
    if field == "stays":
        return lambda guest: guest.total_stays or 0
    if field == "recent":
        return _recent_timestamp
    return lambda guest: f"{guest.last_name} {guest.first_name}".strip().lower()


def _search_fields(guest: Guest) -> List[Any]:
    return [
        f"{guest.first_name} {guest.last_name}",
        guest.phone,
        guest.email,
        guest.id_number,
        guest.company_name,
    ]


def guest_stats(guests: List[Guest]) -> Dict[str, Any]:
    return {
        "total": len(guests),
        "vip": count_where(guests, lambda g: g.guest_type == GuestType.VIP.value),
        "corporate": count_where(guests, lambda g: g.guest_type == GuestType.CORPORATE.value),
        "blacklisted": count_where(guests, lambda g: g.is_blacklisted),
        "stays": int(sum_of(guests, lambda g: g.total_stays)),
        "revenue": sum_of(guests, lambda g: g.total_spent),
    }


class GuestService(ConsoleService):
    """客人视图服务"""

    async def list_guests(
        self,
        guest_type: Optional[str] = None,
        search: Optional[str] = None,
        blacklisted_only: bool = False,
        sort_by: str = "name",
        sort_order: str = "asc",
    ) -> Dict[str, Any]:
        """
        客人列表页

        类型与搜索词交给上游过滤；黑名单开关、本地搜索和排序在取回后处理，
        统计基于过滤后的结果。
        """
        term = normalize_search_term(search, settings.SEARCH_MAX_LENGTH)
        payload = await self.api.get(
            "/api/guests",
            params={"guestType": guest_type, "search": term},
            fallback=self.t("تعذر جلب النزلاء", "Failed to load guests"),
        )
        guests = [Guest.model_validate(item) for item in self.unwrap_list(payload)]

        visible = [g for g in guests if g.is_blacklisted] if blacklisted_only else guests
        visible = filter_by_query(visible, term, _search_fields)
        if sort_by not in GUEST_SORT_FIELDS:
            sort_by = "name"

        return {
            "items": [self._row(g) for g in stable_sort(visible, _sort_key(sort_by), sort_order)],
            "total": len(visible),
            "fetched": len(guests),
            "stats": guest_stats(visible),
            "sortBy": sort_by,
            "sortOrder": sort_order,
        }

    def _row(self, guest: Guest) -> Dict[str, Any]:
        row = guest.to_api()
        row.update({
            "fullName": guest.full_name,
            "guestTypeLabel": label(GUEST_TYPE_LABELS, guest.guest_type, self.lang) if guest.guest_type else None,
            "idTypeLabel": label(ID_TYPE_LABELS, guest.id_type, self.lang) if guest.id_type else None,
            "totalSpentLabel": self.money(guest.total_spent or 0),
            "lastStayLabel": self.date(guest.last_stay) if guest.last_stay else None,
        })
        return row

    async def get_guest(self, guest_id: str) -> Dict[str, Any]:
        payload = await self.api.get(
            f"/api/guests/{guest_id}",
            fallback=self.t("تعذر جلب بيانات النزيل", "Failed to load guest"),
        )
        return self._row(Guest.model_validate(self.unwrap_object(payload)))

    async def create_guest(self, form: GuestCreate) -> Dict[str, Any]:
        payload = await self.api.post(
            "/api/guests",
            json=form.to_api(),
            fallback=self.t("تعذر إضافة النزيل", "Failed to create guest"),
        )
        guest = Guest.model_validate(self.unwrap_object(payload))
        logger.info(f"Guest created: {guest.id}")
        return self._row(guest)

    async def update_guest(self, guest_id: str, form: GuestUpdate) -> Dict[str, Any]:
        payload = await self.api.put(
            f"/api/guests/{guest_id}",
            json=form.to_api_patch(),
            fallback=self.t("تعذر تحديث بيانات النزيل", "Failed to update guest"),
        )
        return self._row(Guest.model_validate(self.unwrap_object(payload)))
