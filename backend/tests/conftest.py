"""
Pytest 配置和共享 fixtures

控制台不持有数据库，所有数据来自上游 REST API。
测试用 httpx.MockTransport 模拟上游：按 (方法, 路径) 注册响应，并记录收到的每个请求。
"""
import asyncio
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest
from fastapi import Request
from fastapi.testclient import TestClient

from hms.api_client import ApiClient, get_api
from hms.main import app
from hms.security.context import ConsoleContext

UPSTREAM_URL = "http://upstream.test"

Handler = Callable[[httpx.Request], httpx.Response]


class FakeUpstream:
    """
    模拟上游 API

    Example:
        >>> upstream.add("GET", "/api/rooms", json={"success": True, "data": []})
        >>> upstream.calls_to("PUT", "/api/bookings/b1")
        []
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Handler] = {}
        self.calls: List[httpx.Request] = []

    def add(self, method: str, path: str, json: Any = None, status_code: int = 200,
            headers: Optional[List[Tuple[str, str]]] = None, handler: Optional[Handler] = None) -> None:
        if handler is None:
            def handler(request: httpx.Request) -> httpx.Response:
                return httpx.Response(status_code, json=json, headers=headers)
        self.routes[(method.upper(), path)] = handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"success": False, "error": "Not found"})
        return route(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def calls_to(self, method: str, path: str) -> List[httpx.Request]:
        return [c for c in self.calls if c.method == method.upper() and c.url.path == path]

    def api_client(self, cookies: Optional[Dict[str, str]] = None) -> ApiClient:
        return ApiClient(
            cookies={"access_token": "test-access", "refresh_token": "test-refresh"} if cookies is None else cookies,
            base_url=UPSTREAM_URL,
            transport=self.transport,
        )


def make_user(role: str = "admin", language: str = "en", **overrides: Any) -> Dict[str, Any]:
    """/api/auth/me 返回的用户对象"""
    hotel_roles = role not in ("super_admin", "sub_super_admin")
    user: Dict[str, Any] = {
        "id": f"user-{role}",
        "name": f"Test {role}",
        "email": f"{role}@hotel.test",
        "role": role,
        "hotelId": "65f000000000000000000001" if hotel_roles else None,
        "permissions": [],
    }
    if hotel_roles:
        user["hotel"] = {
            "name": "Test Hotel",
            "email": "hotel@hotel.test",
            "phone": "0500000000",
            "settings": {"language": language, "currency": "SAR", "timezone": "UTC", "taxRate": 15},
            "notificationsLog": [],
        }
    user.update(overrides)
    return user


def make_context(role: str = "admin", language: str = "en", **overrides: Any) -> ConsoleContext:
    context = ConsoleContext.from_api(make_user(role, language, **overrides))
    if role in ("super_admin", "sub_super_admin"):
        context.hotel_settings.language = language
    return context


def make_booking(**overrides: Any) -> Dict[str, Any]:
    """上游预订记录（默认：已确认，总价 1000，已付 800）"""
    booking: Dict[str, Any] = {
        "_id": "b1",
        "bookingNumber": "BK-1001",
        "roomId": {"_id": "r1", "roomNumber": "101", "type": "double", "floor": 1},
        "guestId": {"_id": "g1", "firstName": "Sara", "lastName": "Ali", "phone": "0501234567"},
        "checkInDate": "2024-01-01T00:00:00.000Z",
        "checkOutDate": "2024-01-04T00:00:00.000Z",
        "numberOfGuests": {"adults": 2, "children": 1},
        "source": "direct",
        "status": "confirmed",
        "pricing": {"roomRate": 300, "numberOfNights": 3, "subtotal": 900, "taxes": 100, "total": 1000},
        "payment": {
            "status": "partial",
            "method": "cash",
            "paidAmount": 800,
            "transactions": [
                {"amount": 800, "method": "card", "date": "2024-01-01T10:00:00.000Z", "reference": "TX-1"},
            ],
        },
        "createdAt": "2023-12-20T09:00:00.000Z",
    }
    for key, value in overrides.items():
        if key in ("pricing", "payment") and isinstance(value, dict):
            booking[key] = {**booking[key], **value}
        else:
            booking[key] = value
    return booking


def envelope(data: Any, **extra: Any) -> Dict[str, Any]:
    return {"success": True, "data": data, **extra}


@pytest.fixture(scope="function")
def upstream():
    """模拟上游 API"""
    return FakeUpstream()


@pytest.fixture(scope="function")
def client(upstream):
    """创建测试客户端（已携带会话 Cookie）"""
    async def override_get_api(request: Request):
        cookie_names = ("access_token", "refresh_token")
        cookies = {name: request.cookies[name] for name in cookie_names if request.cookies.get(name)}
        api = upstream.api_client(cookies)
        request.state.api = api
        try:
            yield api
        finally:
            await api.aclose()

    app.dependency_overrides[get_api] = override_get_api
    with TestClient(app) as test_client:
        test_client.cookies.set("access_token", "test-access")
        test_client.cookies.set("refresh_token", "test-refresh")
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def login_as(upstream) -> Callable[..., Dict[str, Any]]:
    """注册 /api/auth/me，返回当前用户"""
    def _login_as(role: str = "admin", language: str = "en", **overrides: Any) -> Dict[str, Any]:
        user = make_user(role, language, **overrides)
        upstream.add("GET", "/api/auth/me", json={"success": True, "user": user})
        return user
    return _login_as


@pytest.fixture
def admin_session(login_as):
    """酒店管理员会话（英语界面）"""
    return login_as("admin")


@pytest.fixture
def receptionist_session(login_as):
    return login_as("receptionist")


@pytest.fixture
def accountant_session(login_as):
    return login_as("accountant")


@pytest.fixture
def super_admin_session(login_as):
    return login_as("super_admin")


@pytest.fixture
def sub_super_admin_session(login_as):
    return login_as("sub_super_admin")


@pytest.fixture
def booking_factory() -> Callable[..., Dict[str, Any]]:
    """上游预订记录工厂"""
    return make_booking


@pytest.fixture
def context_factory() -> Callable[..., ConsoleContext]:
    """会话上下文工厂"""
    return make_context


@pytest.fixture
def wrap() -> Callable[..., Dict[str, Any]]:
    """上游 {success, data} 信封"""
    return envelope


@pytest.fixture
def call_service(upstream) -> Callable[..., Any]:
    """
    在新的事件循环中调用服务方法

    Example:
        >>> call_service(BookingService, context, "get_booking", "b1")
    """
    def _call(service_cls, context, method: str, *args: Any, **kwargs: Any) -> Any:
        async def main():
            api = upstream.api_client()
            try:
                return await getattr(service_cls(api, context), method)(*args, **kwargs)
            finally:
                await api.aclose()
        return asyncio.run(main())
    return _call
