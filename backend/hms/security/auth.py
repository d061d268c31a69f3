"""
认证与授权依赖

控制台本身不签发也不校验令牌：会话 Cookie 透传给上游，
由 /api/auth/me 返回当前用户，再在本地按角色权限表决定页面是否可用。
"""
import logging

from fastapi import Depends, HTTPException, status

from hms.api_client import ApiClient, ApiError, get_api
from hms.security.context import ConsoleContext
from hms.security.permissions import has_any_permission

logger = logging.getLogger(__name__)


async def get_current_user(api: ApiClient = Depends(get_api)) -> ConsoleContext:
    """获取当前登录用户及酒店设置"""
    if not api.has_session:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="غير مصرح - يرجى تسجيل الدخول"
        )

    try:
        payload = await api.get("/api/auth/me")
    except ApiError as e:
        if e.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_404_NOT_FOUND):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message)
        raise

    user = payload.get("user")
    if not isinstance(user, dict):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="غير مصرح - يرجى تسجيل الدخول"
        )

    context = ConsoleContext.from_api(user)
    api.lang = context.lang
    return context


def require_permission(*permission_codes: str):
    """权限检查依赖 - 支持多个权限码（OR 逻辑）"""
    async def permission_checker(current_user: ConsoleContext = Depends(get_current_user)):
        if has_any_permission(current_user.role, current_user.permissions, permission_codes):
            return current_user
        logger.info(f"Permission denied for role {current_user.role}: {', '.join(permission_codes)}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Missing permission: {', '.join(permission_codes)}"
        )
    return permission_checker


def require_role(*roles: str):
    """角色检查依赖"""
    async def role_checker(current_user: ConsoleContext = Depends(get_current_user)):
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="غير مصرح لك بالوصول"
            )
        return current_user
    return role_checker


# 平台管理视图：主/子超级管理员都可访问；风险监控仅限主超级管理员
require_platform_admin = require_role("super_admin", "sub_super_admin")
require_super_admin = require_role("super_admin")
