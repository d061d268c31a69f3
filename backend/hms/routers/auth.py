"""
认证路由 - 登录、登出与当前会话
"""
from fastapi import APIRouter, Depends, Response

from hms.api_client import ApiClient, clear_session_cookies, get_api
from hms.models.schemas import LoginRequest, LoginResponse, MessageResponse
from hms.security.auth import get_current_user
from hms.security.context import ConsoleContext
from hms.services.auth_service import AuthService

router = APIRouter(prefix="/console/auth", tags=["认证"])


@router.post("/login", response_model=LoginResponse)
async def login(data: LoginRequest, api: ApiClient = Depends(get_api)):
    """用户登录，上游下发的会话 Cookie 由中间件写回浏览器"""
    service = AuthService(api)
    return await service.login(data)


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response, api: ApiClient = Depends(get_api)):
    """用户登出并清除会话 Cookie"""
    await AuthService(api).logout()
    clear_session_cookies(response)
    return {"message": "تم تسجيل الخروج بنجاح"}


@router.get("/session")
async def get_session(current_user: ConsoleContext = Depends(get_current_user)):
    """当前用户与酒店设置"""
    result = current_user.to_dict()
    result["notifications"] = current_user.notifications
    return result
