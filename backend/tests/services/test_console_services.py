"""
Tests for api_client, auth_service, dashboard_service and settings_service
"""
import asyncio
import json

import httpx
import pytest
from fastapi import HTTPException

from hms.api_client import ApiError
from hms.models.schemas import HotelSettingsUpdate, LoginRequest
from hms.services.auth_service import AuthService, landing_page
from hms.services.dashboard_service import DashboardService
from hms.services.settings_service import SettingsService
from hms_core.formatting import NBSP


def _run_api(upstream, scenario, cookies=None):
    async def main():
        api = upstream.api_client(cookies)
        try:
            return await scenario(api)
        finally:
            await api.aclose()
    return asyncio.run(main())


class TestApiClient:
    """上游客户端测试"""

    def test_envelope_error_message(self, upstream):
        upstream.add("GET", "/api/rooms", status_code=400, json={"success": False, "error": "Invalid floor"})

        async def scenario(api):
            await api.get("/api/rooms")

        with pytest.raises(ApiError) as exc_info:
            _run_api(upstream, scenario)
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Invalid floor"
        assert exc_info.value.payload["success"] is False

    def test_fallback_message(self, upstream):
        upstream.add("GET", "/api/rooms", status_code=500, json={"success": False, "error": "  "})

        async def scenario(api):
            await api.get("/api/rooms", fallback="Failed to load rooms")

        with pytest.raises(ApiError) as exc_info:
            _run_api(upstream, scenario)
        assert exc_info.value.message == "Failed to load rooms"

    def test_default_message_uses_language(self, upstream):
        upstream.add("GET", "/api/rooms", status_code=500, handler=lambda r: httpx.Response(500, text="oops"))

        async def scenario(api):
            api.lang = "en"
            await api.get("/api/rooms")

        with pytest.raises(ApiError) as exc_info:
            _run_api(upstream, scenario)
        assert exc_info.value.message == "Request failed"

    def test_network_error(self, upstream):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)
        upstream.add("GET", "/api/rooms", handler=handler)

        async def scenario(api):
            api.lang = "en"
            await api.get("/api/rooms")

        with pytest.raises(ApiError) as exc_info:
            _run_api(upstream, scenario)
        assert exc_info.value.status_code == 503
        assert exc_info.value.is_network_error
        assert exc_info.value.message == "Network error, please try again"

    def test_empty_params_not_sent(self, upstream):
        upstream.add("GET", "/api/bookings", json={"success": True, "data": []})

        async def scenario(api):
            return await api.get("/api/bookings", params={"status": None, "search": "", "page": 1})

        _run_api(upstream, scenario)
        assert dict(upstream.calls[0].url.params) == {"page": "1"}

    def test_rotated_cookies_after_refresh(self, upstream):
        """测试 401 刷新后记录上游轮换的 Cookie"""
        def me(request):
            if "access_token=rotated" in request.headers.get("cookie", ""):
                return httpx.Response(200, json={"success": True, "user": {"role": "admin"}})
            return httpx.Response(401, json={"success": False, "error": "expired"})

        upstream.add("GET", "/api/auth/me", handler=me)
        upstream.add("POST", "/api/auth/refresh", headers=[("set-cookie", "access_token=rotated; Path=/")],
                     json={"success": True})

        async def scenario(api):
            payload = await api.get("/api/auth/me")
            return payload, api.rotated_cookies

        payload, rotated = _run_api(upstream, scenario)
        assert payload["user"]["role"] == "admin"
        assert rotated == {"access_token": "rotated"}

    def test_cleared_session_relays_nothing(self, upstream):
        upstream.add("POST", "/api/auth/login", headers=[("set-cookie", "access_token=abc; Path=/")],
                     json={"success": True})

        async def scenario(api):
            await api.post("/api/auth/login", refresh=False)
            api.clear_session()
            return api.rotated_cookies, api.has_session

        rotated, has_session = _run_api(upstream, scenario)
        assert rotated == {}
        assert has_session is False


class TestAuthService:
    """登录/登出测试"""

    def test_landing_page(self):
        assert landing_page("super_admin") == "/super-admin"
        assert landing_page("sub_super_admin") == "/dashboard"
        assert landing_page("receptionist") == "/dashboard"

    def test_login(self, upstream):
        upstream.add("POST", "/api/auth/login", json={"success": True, "user": {"email": "a@b.co", "role": "super_admin"}})

        async def scenario(api):
            return await AuthService(api).login(LoginRequest(email=" A@B.co ", password="password123"))

        result = _run_api(upstream, scenario, cookies={})
        assert result["redirect"] == "/super-admin"
        body = json.loads(upstream.calls[0].content)
        assert body == {"email": "a@b.co", "password": "password123"}

    def test_login_rejected_does_not_refresh(self, upstream):
        upstream.add("POST", "/api/auth/login", status_code=401,
                     json={"success": False, "error": "Invalid credentials"})

        async def scenario(api):
            return await AuthService(api).login(LoginRequest(email="a@b.co", password="password123"))

        with pytest.raises(ApiError) as exc_info:
            _run_api(upstream, scenario, cookies={})
        assert exc_info.value.message == "Invalid credentials"
        assert upstream.calls_to("POST", "/api/auth/refresh") == []

    def test_login_without_user(self, upstream):
        upstream.add("POST", "/api/auth/login", json={"success": True})

        async def scenario(api):
            return await AuthService(api).login(LoginRequest(email="a@b.co", password="password123"))

        with pytest.raises(HTTPException) as exc_info:
            _run_api(upstream, scenario, cookies={})
        assert exc_info.value.status_code == 502

    def test_logout_clears_session_even_on_upstream_failure(self, upstream):
        upstream.add("POST", "/api/auth/logout", status_code=500, json={"success": False})

        async def scenario(api):
            await AuthService(api).logout()
            return api.has_session, api.session_cleared

        has_session, cleared = _run_api(upstream, scenario)
        assert has_session is False
        assert cleared is True


class TestDashboardService:
    """仪表盘测试"""

    def test_overview(self, call_service, context_factory, upstream, wrap):
        upstream.add("GET", "/api/dashboard/stats", json=wrap({
            "totalRooms": 20, "occupiedRooms": 7, "monthlyRevenue": 12000, "lastMonthRevenue": 10000,
            "todayCheckIns": None,
        }))
        context = context_factory("admin", "en")
        context.notifications = [{"title": f"n{i}", "createdAt": "2024-03-01T10:00:00Z"} for i in range(8)]
        result = call_service(DashboardService, context, "overview")
        assert result["occupancyRate"] == 35
        assert result["revenueTrend"] == {"isUp": True, "percent": 20}
        assert result["monthlyRevenueLabel"] == f"SAR{NBSP}12,000"
        assert result["stats"]["todayCheckIns"] == 0
        assert result["stats"]["pendingBookings"] == 0
        assert len(result["notifications"]) == 6
        assert result["notifications"][0]["createdAtLabel"] == "Mar 1, 2024, 10:00 AM"

    def test_empty_hotel(self, call_service, context_factory, upstream, wrap):
        upstream.add("GET", "/api/dashboard/stats", json=wrap({}))
        result = call_service(DashboardService, context_factory("admin", "en"), "overview")
        assert result["occupancyRate"] == 0
        assert result["revenueTrend"] is None


class TestSettingsService:
    """酒店设置测试"""

    FORM = {
        "hotelName": "Palm Resort",
        "email": "palm@hotel.test",
        "phone": "0500000000",
        "settings": {
            "currency": "USD", "timezone": "UTC", "language": "en",
            "checkInTime": "15:00", "checkOutTime": "11:00", "taxRate": 5,
        },
    }

    def test_current(self, context_factory, upstream):
        result = SettingsService(upstream.api_client(), context_factory("admin", "en")).current()
        assert result["hotel"]["name"] == "Test Hotel"
        assert result["settings"]["taxRate"] == 15

    def test_update_rebuilds_context(self, call_service, context_factory, upstream):
        user = {
            "id": "u1", "role": "admin", "name": "A", "email": "a@hotel.test",
            "hotel": {"name": "Palm Resort", "settings": {"currency": "USD", "language": "en", "taxRate": 5}},
        }
        upstream.add("PATCH", "/api/auth/me", json={"success": True, "user": user})
        result = call_service(SettingsService, context_factory("admin", "ar"), "update",
                              HotelSettingsUpdate.model_validate(self.FORM))
        assert result["hotel"]["name"] == "Palm Resort"
        assert result["settings"]["currency"] == "USD"
        assert result["settings"]["taxRate"] == 5
        assert result["message"] == "Settings saved successfully"
