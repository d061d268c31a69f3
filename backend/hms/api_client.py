"""
上游 REST API 客户端
控制台不直接持久化任何数据，所有读写都经由上游 API 完成

每个进入的请求对应一个 ApiClient（生成器依赖，响应结束后关闭），
请求者的会话 Cookie 透传到上游，上游轮换后的 Cookie 再回传给浏览器。
"""
import logging
from typing import Any, AsyncGenerator, Dict, Optional

import httpx
from fastapi import Request, Response

from hms.config import settings
from hms_core.http import RefreshingClient
from hms_core.i18n import t

logger = logging.getLogger(__name__)

NETWORK_ERROR = ("حدث خطأ في الاتصال بالخادم", "Network error, please try again")
REQUEST_FAILED = ("تعذر تنفيذ الطلب", "Request failed")


class ApiError(Exception):
    """
    上游调用失败

    Attributes:
        status_code: HTTP 状态码（网络错误为 503）
        message: 展示给用户的错误文案
        payload: 上游返回的 JSON（如果有）
    """

    def __init__(self, status_code: int, message: str, payload: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.payload = payload or {}

    @property
    def is_network_error(self) -> bool:
        return self.status_code == 503 and not self.payload


class ApiClient:
    """
    上游 API 客户端

    解析 {success, data, error} 信封：非 2xx 转为 ApiError(status, error 文案)，
    传输层失败转为 ApiError(503, 网络错误)。

    Example:
        >>> api = ApiClient(cookies={"access_token": "..."})
        >>> payload = await api.get("/api/rooms", params={"status": "available"})
        >>> rooms = payload.get("data", [])
    """

    def __init__(
        self,
        cookies: Optional[Dict[str, str]] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        http = httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            timeout=timeout or settings.API_TIMEOUT,
            transport=transport,
        )
        self.session = RefreshingClient(http, refresh_path=settings.REFRESH_PATH, cookies=cookies)
        self.lang = settings.DEFAULT_LANGUAGE
        self.session_cleared = False

    @property
    def rotated_cookies(self) -> Dict[str, str]:
        """上游在本次请求期间新下发的 Cookie"""
        if self.session_cleared:
            return {}
        return dict(self.session.rotated)

    @property
    def has_session(self) -> bool:
        return bool(self.session.cookies)

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        fallback: Optional[str] = None,
        refresh: bool = True,
    ) -> Dict[str, Any]:
        """
        调用上游接口并返回解析后的 JSON

        Args:
            method: HTTP 方法
            path: 上游路径，如 /api/bookings/123
            params: 查询参数，值为 None 或空字符串的参数不会发送
            json: 请求体
            fallback: 上游没有给出 error 文案时使用的提示
            refresh: 401 时是否尝试刷新会话（登录请求不需要）

        Returns:
            上游返回的 JSON 对象

        Raises:
            ApiError: 上游返回非 2xx 或网络错误
        """
        query = {key: value for key, value in (params or {}).items() if value is not None and value != ""}
        kwargs: Dict[str, Any] = {}
        if query:
            kwargs["params"] = query
        if json is not None:
            kwargs["json"] = json

        try:
            response = await self.session.request(method, path, refresh=refresh, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Upstream {method} {path} unreachable: {e}")
            raise ApiError(503, t(self.lang, *NETWORK_ERROR))

        payload = self._decode(response)
        if response.is_success:
            return payload

        message = payload.get("error")
        if not isinstance(message, str) or not message.strip():
            message = fallback or t(self.lang, *REQUEST_FAILED)
        logger.warning(f"Upstream {method} {path} failed with {response.status_code}: {message}")
        raise ApiError(response.status_code, message, payload)

    @staticmethod
    def _decode(response: httpx.Response) -> Dict[str, Any]:
        try:
            payload = response.json()
        except ValueError:
            return {}
        if isinstance(payload, dict):
            return payload
        return {"data": payload}

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None,
                  fallback: Optional[str] = None) -> Dict[str, Any]:
        return await self.request("GET", path, params=params, fallback=fallback)

    async def post(self, path: str, json: Any = None, fallback: Optional[str] = None,
                   refresh: bool = True) -> Dict[str, Any]:
        return await self.request("POST", path, json=json, fallback=fallback, refresh=refresh)

    async def put(self, path: str, json: Any = None, fallback: Optional[str] = None) -> Dict[str, Any]:
        return await self.request("PUT", path, json=json, fallback=fallback)

    async def patch(self, path: str, json: Any = None, fallback: Optional[str] = None) -> Dict[str, Any]:
        return await self.request("PATCH", path, json=json, fallback=fallback)

    async def delete(self, path: str, fallback: Optional[str] = None) -> Dict[str, Any]:
        return await self.request("DELETE", path, fallback=fallback)

    def clear_session(self) -> None:
        """登出后不再回传任何 Cookie"""
        self.session_cleared = True
        self.session.cookies.clear()

    async def aclose(self) -> None:
        await self.session.aclose()


async def get_api(request: Request) -> AsyncGenerator[ApiClient, None]:
    """依赖注入：获取携带当前会话 Cookie 的上游客户端"""
    cookie_names = (settings.ACCESS_COOKIE_NAME, settings.REFRESH_COOKIE_NAME)
    cookies = {name: request.cookies[name] for name in cookie_names if request.cookies.get(name)}
    api = ApiClient(cookies=cookies)
    request.state.api = api
    try:
        yield api
    finally:
        await api.aclose()


# ============== 会话 Cookie ==============

def _cookie_max_age(name: str) -> Optional[int]:
    if name == settings.ACCESS_COOKIE_NAME:
        return settings.ACCESS_COOKIE_MAX_AGE
    if name == settings.REFRESH_COOKIE_NAME:
        return settings.REFRESH_COOKIE_MAX_AGE
    return None


def relay_session_cookies(api: Optional[ApiClient], response: Response) -> None:
    """把上游轮换后的会话 Cookie 写回浏览器"""
    if api is None:
        return
    for name, value in api.rotated_cookies.items():
        if name not in (settings.ACCESS_COOKIE_NAME, settings.REFRESH_COOKIE_NAME):
            continue
        response.set_cookie(
            name,
            value,
            max_age=_cookie_max_age(name),
            httponly=True,
            secure=settings.COOKIE_SECURE,
            samesite="lax",
            path="/",
        )


def clear_session_cookies(response: Response) -> None:
    """删除浏览器上的两个会话 Cookie"""
    for name in (settings.ACCESS_COOKIE_NAME, settings.REFRESH_COOKIE_NAME):
        response.delete_cookie(name, path="/", secure=settings.COOKIE_SECURE, httponly=True, samesite="lax")
