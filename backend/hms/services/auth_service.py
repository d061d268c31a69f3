"""
认证服务 - 登录 / 登出
令牌由上游签发，这里只转发请求并把会话 Cookie 交给浏览器
"""
import logging
from typing import Any, Dict

from fastapi import HTTPException, status

from hms.api_client import ApiClient, ApiError
from hms.models.ontology import UserRole
from hms.models.schemas import LoginRequest

logger = logging.getLogger(__name__)

LOGIN_FAILED = "حدث خطأ أثناء تسجيل الدخول"


def landing_page(role: str) -> str:
    """登录后的落地页"""
    if role == UserRole.SUPER_ADMIN.value:
        return "/super-admin"
    return "/dashboard"


class AuthService:
    """认证服务"""

    def __init__(self, api: ApiClient):
        self.api = api

    async def login(self, form: LoginRequest) -> Dict[str, Any]:
        """
        登录

        Returns:
            {"user": ..., "redirect": "/super-admin" | "/dashboard"}
        """
        # 登录失败的 401 不应触发会话刷新
        payload = await self.api.post(
            "/api/auth/login", json=form.to_api(), fallback=LOGIN_FAILED, refresh=False
        )
        user = payload.get("user")
        if not isinstance(user, dict):
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=LOGIN_FAILED)
        logger.info(f"User logged in: {user.get('email')} ({user.get('role')})")
        return {"user": user, "redirect": landing_page(user.get("role") or "")}

    async def logout(self) -> None:
        """通知上游注销；上游失败时仍清除本地会话"""
        try:
            await self.api.post("/api/auth/logout", refresh=False)
        except ApiError as e:
            logger.warning(f"Upstream logout failed with {e.status_code}, clearing local session anyway")
        self.api.clear_session()
