"""
平台用户管理服务
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status

from hms.config import settings
from hms.domain.labels import ROLE_LABELS
from hms.models.ontology import PlatformUser, UserRole
from hms.models.schemas import CreateUserRequest, UpdateUserRequest, UserActiveUpdate
from hms.security.permissions import can_manage_role
from hms.services.base import ConsoleService
from hms_core.i18n import label
from hms_core.listing import normalize_search_term

logger = logging.getLogger(__name__)

HOTEL_ROLES = [
    UserRole.ADMIN.value,
    UserRole.MANAGER.value,
    UserRole.RECEPTIONIST.value,
    UserRole.HOUSEKEEPING.value,
    UserRole.ACCOUNTANT.value,
]

# 主超级管理员可以创建子超级管理员，子超级管理员只能创建酒店角色
ALL_CREATION_ROLES = [UserRole.SUB_SUPER_ADMIN.value] + HOTEL_ROLES


def creatable_roles(current_role: Optional[str]) -> List[str]:
    if current_role == UserRole.SUB_SUPER_ADMIN.value:
        return [role for role in ALL_CREATION_ROLES if can_manage_role(current_role, role)]
    return list(ALL_CREATION_ROLES)


class UserAdminService(ConsoleService):
    """平台用户视图服务"""

    async def list_users(
        self,
        search: Optional[str] = None,
        role: Optional[str] = None,
        hotel_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload = await self.api.get(
            "/api/super-admin/users",
            params={
                "limit": settings.OPTIONS_PAGE_LIMIT,
                "search": normalize_search_term(search, settings.SEARCH_MAX_LENGTH),
                "role": role,
                "hotelId": hotel_id,
            },
            fallback="تعذر تحميل المستخدمين",
        )
        users = [PlatformUser.model_validate(item) for item in self.unwrap_list(payload)]
        return {
            "items": [self._row(user) for user in users],
            "total": len(users),
            "creatableRoles": self.role_options(),
        }

    def role_options(self) -> List[Dict[str, str]]:
        current_role = self.context.role if self.context else None
        return [
            {"value": role, "label": label(ROLE_LABELS, role, self.lang)}
            for role in creatable_roles(current_role)
        ]

    async def hotel_options(self) -> List[Dict[str, Any]]:
        """创建用户表单中的酒店下拉选项"""
        payload = await self.api.get(
            "/api/super-admin/hotels",
            params={"limit": settings.OPTIONS_PAGE_LIMIT},
            fallback="تعذر تحميل الفنادق",
        )
        return [
            {"id": item.get("_id"), "name": item.get("name") or ""}
            for item in self.unwrap_list(payload)
        ]

    def _row(self, user: PlatformUser) -> Dict[str, Any]:
        row = user.to_api()
        hotel = user.hotel_id if isinstance(user.hotel_id, dict) else None
        row.update({
            "roleLabel": label(ROLE_LABELS, user.role, self.lang),
            "hotelName": hotel.get("name") if hotel else None,
        })
        return row

    async def create_user(self, form: CreateUserRequest) -> Dict[str, Any]:
        """
        创建平台用户

        子超级管理员只能创建酒店角色，越权时返回 403 而不调用上游。
        """
        allowed = creatable_roles(self.context.role if self.context else None)
        if form.role.value not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="غير مصرح لك بإنشاء هذا الدور")

        payload = await self.api.post(
            "/api/super-admin/users",
            json=form.to_api(),
            fallback="فشل إنشاء المستخدم",
        )
        logger.info(f"Platform user created: {form.email} ({form.role.value})")
        return self._row(PlatformUser.model_validate(self.unwrap_object(payload)))

    async def _patch_user(self, user_id: str, body: Dict[str, Any], fallback: str) -> Dict[str, Any]:
        payload = await self.api.patch(f"/api/super-admin/users/{user_id}", json=body, fallback=fallback)
        return self._row(PlatformUser.model_validate(self.unwrap_object(payload)))

    async def set_active(self, user_id: str, form: UserActiveUpdate) -> Dict[str, Any]:
        logger.info(f"Platform user {user_id} active -> {form.is_active}")
        return await self._patch_user(user_id, form.to_api(), "فشل تحديث حالة الحساب")

    async def update_user(self, user_id: str, form: UpdateUserRequest) -> Dict[str, Any]:
        return await self._patch_user(user_id, form.to_api(), "فشل تحديث المستخدم")
