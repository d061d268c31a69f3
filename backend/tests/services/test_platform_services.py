"""
Tests for platform administration services
Covers: hotel_admin_service, user_admin_service, monitoring_service
"""
import json

import pytest
from fastapi import HTTPException

from hms.models.schemas import (
    CreateUserRequest, HotelVerifiedUpdate, SubscriptionUpdate, SubSuperAdminUpdate, UpdateUserRequest,
)
from hms.services.hotel_admin_service import HotelAdminService, clamp_window_days
from hms.services.monitoring_service import MonitoringFilters, MonitoringService, normalize_summary_buckets
from hms.services.user_admin_service import UserAdminService, creatable_roles

HOTELS = [
    {"_id": "h1", "name": "Palm Resort", "email": "palm@hotel.test", "isActive": True,
     "subscription": {"plan": "premium", "status": "active"}, "verification": {"isVerified": True},
     "createdAt": "2024-01-10T00:00:00Z"},
    {"_id": "h2", "name": "Desert Inn", "email": "desert@hotel.test", "isActive": False},
    {"_id": "h3", "name": "Sea View", "email": "sea@hotel.test", "isActive": True,
     "subscription": {"plan": "basic", "status": "suspended"}},
]


@pytest.fixture
def super_admin(context_factory):
    return context_factory("super_admin", "en")


@pytest.fixture
def sub_super_admin(context_factory):
    return context_factory("sub_super_admin", "en")


class TestHotelAdmin:
    """平台酒店管理测试"""

    @pytest.fixture
    def hotels(self, upstream, wrap):
        upstream.add("GET", "/api/super-admin/hotels", json=wrap(HOTELS))

    def test_list_hotels(self, call_service, super_admin, hotels):
        result = call_service(HotelAdminService, super_admin, "list_hotels")
        assert result["total"] == 3
        assert result["stats"] == {"total": 3, "active": 2, "verified": 1}
        rows = {row["_id"]: row for row in result["items"]}
        assert rows["h1"]["planLabel"] == "Premium"
        assert rows["h1"]["createdAtLabel"] == "Jan 10, 2024"
        assert rows["h2"]["plan"] == "free"
        assert rows["h2"]["createdAtLabel"] == "-"
        assert rows["h3"]["subscriptionStatusLabel"] == "Suspended"

    def test_missing_plan_filters_as_free(self, call_service, super_admin, hotels):
        result = call_service(HotelAdminService, super_admin, "list_hotels", plan="free")
        assert [row["_id"] for row in result["items"]] == ["h2"]

    def test_status_filter(self, call_service, super_admin, hotels):
        result = call_service(HotelAdminService, super_admin, "list_hotels", status="inactive")
        assert [row["_id"] for row in result["items"]] == ["h2"]
        assert result["stats"]["total"] == 3

    def test_search_name_and_email(self, call_service, super_admin, hotels, upstream):
        result = call_service(HotelAdminService, super_admin, "list_hotels", search=" sea@ ")
        assert [row["_id"] for row in result["items"]] == ["h3"]
        params = upstream.calls_to("GET", "/api/super-admin/hotels")[0].url.params
        assert params["search"] == "sea@"
        assert params["limit"] == "200"

    def test_set_verified(self, call_service, super_admin, upstream, wrap):
        upstream.add("PATCH", "/api/super-admin/hotels/h2", json=wrap({**HOTELS[1], "verification": {"isVerified": True}}))
        row = call_service(HotelAdminService, super_admin, "set_verified", "h2", HotelVerifiedUpdate(is_verified=True))
        assert row["isVerified"] is True
        assert json.loads(upstream.calls_to("PATCH", "/api/super-admin/hotels/h2")[0].content) == {"isVerified": True}

    def test_save_subscription(self, call_service, super_admin, upstream, wrap):
        upstream.add("PATCH", "/api/super-admin/hotels/h3", json=wrap(HOTELS[2]))
        form = SubscriptionUpdate(is_active=True, plan="enterprise", status="active", end_date="2025-01-01")
        call_service(HotelAdminService, super_admin, "save_subscription", "h3", form)
        body = json.loads(upstream.calls_to("PATCH", "/api/super-admin/hotels/h3")[0].content)
        assert body["isActive"] is True
        assert body["subscription"]["plan"] == "enterprise"
        assert body["subscription"]["endDate"] == "2025-01-01"


class TestSubscriptionAlerts:
    """订阅到期提醒测试"""

    def test_window_clamped(self):
        assert clamp_window_days(None) == 7
        assert clamp_window_days(0) == 1
        assert clamp_window_days(90) == 30

    def test_alerts(self, call_service, super_admin, upstream):
        upstream.add("GET", "/api/super-admin/subscription-alerts", json={
            "success": True,
            "data": [
                {"hotelId": "h1", "daysRemaining": -2, "severity": "expired"},
                {"hotelId": "h3", "daysRemaining": 1, "severity": "critical"},
                {"hotelId": "h4", "severity": "info"},
            ],
            "summary": {"totalAlerts": 3, "expired": 1, "critical": 1, "info": 1},
        })
        result = call_service(HotelAdminService, super_admin, "subscription_alerts", 14, True)
        labels = [item["daysRemainingLabel"] for item in result["items"]]
        assert labels == ["Expired 2 days ago", "Expires tomorrow", "-"]
        assert result["items"][0]["tone"] == "danger"
        assert result["items"][1]["severityLabel"] == "Critical"
        assert result["summary"]["windowDays"] == 14
        assert result["summary"]["warning"] == 0
        params = upstream.calls_to("GET", "/api/super-admin/subscription-alerts")[0].url.params
        assert params["windowDays"] == "14"
        assert params["runMaintenance"] == "true"

    def test_unknown_severity_shown_as_info(self, call_service, super_admin, upstream):
        upstream.add("GET", "/api/super-admin/subscription-alerts", json={
            "success": True,
            "data": [{"hotelId": "h1", "daysRemaining": 20, "severity": "notice"}, {"hotelId": "h2"}],
        })
        items = call_service(HotelAdminService, super_admin, "subscription_alerts")["items"]
        assert [item["severityLabel"] for item in items] == ["Follow up", "Follow up"]
        assert [item["tone"] for item in items] == ["primary", "primary"]
        assert items[0]["severity"] == "notice"


class TestUserAdmin:
    """平台用户管理测试"""

    def test_creatable_roles(self):
        assert "sub_super_admin" in creatable_roles("super_admin")
        assert "sub_super_admin" not in creatable_roles("sub_super_admin")
        assert "super_admin" not in creatable_roles("super_admin")
        assert creatable_roles("sub_super_admin") == ["admin", "manager", "receptionist", "housekeeping", "accountant"]

    def test_sub_super_admin_cannot_create_platform_roles(self, call_service, sub_super_admin, upstream):
        """测试越权创建角色时返回 403 且不调用上游"""
        form = CreateUserRequest(name="New Sub", email="sub@platform.test", password="password123",
                                 role="sub_super_admin")
        with pytest.raises(HTTPException) as exc_info:
            call_service(UserAdminService, sub_super_admin, "create_user", form)
        assert exc_info.value.status_code == 403
        assert upstream.calls_to("POST", "/api/super-admin/users") == []

    def test_create_hotel_user(self, call_service, sub_super_admin, upstream, wrap):
        upstream.add("POST", "/api/super-admin/users", status_code=201, json=wrap({
            "_id": "u9", "name": "Front Desk", "email": "front@hotel.test", "role": "receptionist",
            "hotelId": {"_id": "65f000000000000000000001", "name": "Palm Resort"},
        }))
        form = CreateUserRequest(name="Front Desk", email="Front@Hotel.test", password="password123",
                                 role="receptionist", hotel_id="65f000000000000000000001")
        row = call_service(UserAdminService, sub_super_admin, "create_user", form)
        assert row["roleLabel"] == "Receptionist"
        assert row["hotelName"] == "Palm Resort"
        body = json.loads(upstream.calls_to("POST", "/api/super-admin/users")[0].content)
        assert body["email"] == "front@hotel.test"
        assert body["hotelId"] == "65f000000000000000000001"

    def test_create_platform_user_has_no_hotel(self, call_service, super_admin, upstream, wrap):
        upstream.add("POST", "/api/super-admin/users", json=wrap({"_id": "u8", "role": "sub_super_admin"}))
        form = CreateUserRequest(name="Sub Admin", email="sub@platform.test", password="password123",
                                 role="sub_super_admin")
        call_service(UserAdminService, super_admin, "create_user", form)
        body = json.loads(upstream.calls_to("POST", "/api/super-admin/users")[0].content)
        assert body["hotelId"] is None
        assert body["role"] == "sub_super_admin"

    def test_blank_phone_clears_value(self, call_service, super_admin, upstream, wrap):
        upstream.add("PATCH", "/api/super-admin/users/u1", json=wrap({"_id": "u1", "role": "admin"}))
        call_service(UserAdminService, super_admin, "update_user", "u1", UpdateUserRequest(phone="   "))
        body = json.loads(upstream.calls_to("PATCH", "/api/super-admin/users/u1")[0].content)
        assert body == {"phone": None}

    def test_role_options(self, sub_super_admin, upstream):
        options = UserAdminService(upstream.api_client(), sub_super_admin).role_options()
        assert [option["value"] for option in options] == [
            "admin", "manager", "receptionist", "housekeeping", "accountant",
        ]
        assert options[0]["label"] == "Hotel admin"


class TestMonitoring:
    """子超级管理员监控测试"""

    def test_default_params(self):
        assert MonitoringFilters().to_params() == {
            "page": 1, "limit": 20, "sortBy": "riskScore", "sortOrder": "desc",
        }

    def test_all_values_not_forwarded(self):
        """测试 'all' 与空值不转发给上游"""
        params = MonitoringFilters(
            search="  ali ", status="active", verification="all", activity="", date_from="2024-01-01",
        ).to_params()
        assert params["search"] == "ali"
        assert params["status"] == "active"
        assert "verification" not in params and "activity" not in params
        assert params["from"] == "2024-01-01"
        assert "to" not in params

    def test_invalid_paging_and_sort(self):
        params = MonitoringFilters(page=0, limit=500, sort_by="password", sort_order="up").to_params()
        assert params["page"] == 1
        assert params["limit"] == 100
        assert params["sortBy"] == "riskScore"
        assert params["sortOrder"] == "desc"

    def test_normalize_summary_buckets(self):
        buckets = normalize_summary_buckets([
            {"_id": "create_hotel", "count": 3},
            {"_id": None, "count": 1},
            {"_id": "", "count": 2},
            {"_id": 5, "count": 1},
            {"_id": "update", "count": "many"},
            {"_id": "flag", "count": True},
            "garbage",
        ])
        assert buckets == [
            {"_id": "create_hotel", "count": 3},
            {"_id": "-", "count": 1},
            {"_id": "-", "count": 2},
        ]
        assert normalize_summary_buckets(None) == []

    def test_overview_labels(self, call_service, super_admin, upstream):
        upstream.add("GET", "/api/super-admin/sub-super-admins", json={
            "success": True,
            "overview": {"totalSubSuperAdmins": 1},
            "data": [{
                "_id": "s1", "name": "Sub One", "email": "s1@platform.test",
                "risk": {"score": 72, "level": "high", "flags": ["unverified_account", "custom_flag"]},
            }],
        })
        result = call_service(MonitoringService, super_admin, "overview", MonitoringFilters(status="all"))
        risk = result["items"][0]["risk"]
        assert risk["levelLabel"] == "High"
        assert risk["tone"] == "danger"
        assert risk["flagLabels"] == ["Unverified account", "custom_flag"]
        assert result["pagination"] == {"page": 1, "limit": 20, "total": 0, "pages": 0}
        assert "status" not in upstream.calls_to("GET", "/api/super-admin/sub-super-admins")[0].url.params

    def test_activity_summary(self, call_service, super_admin, upstream):
        upstream.add("GET", "/api/super-admin/sub-super-admins/s1/activity", json={
            "success": True,
            "data": [{"action": "create_hotel"}],
            "summary": {"totalOperations": None, "byAction": [{"_id": "create_hotel", "count": 1}], "byEntity": "x"},
            "pagination": {"page": 1, "limit": 15, "total": 1, "pages": 1},
        })
        result = call_service(MonitoringService, super_admin, "activity", "s1", action="create_hotel")
        assert result["summary"] == {
            "totalOperations": 0,
            "byAction": [{"_id": "create_hotel", "count": 1}],
            "byEntity": [],
        }
        params = upstream.calls_to("GET", "/api/super-admin/sub-super-admins/s1/activity")[0].url.params
        assert params["limit"] == "15"
        assert params["action"] == "create_hotel"

    def test_update_sub_super_admin(self, call_service, super_admin, upstream, wrap):
        upstream.add("PATCH", "/api/super-admin/users/s1", json=wrap({"_id": "s1", "isActive": False}))
        result = call_service(MonitoringService, super_admin, "update", "s1",
                              SubSuperAdminUpdate(is_active=False, admin_note="suspicious"))
        assert result == {"_id": "s1", "isActive": False}
        body = json.loads(upstream.calls_to("PATCH", "/api/super-admin/users/s1")[0].content)
        assert body["isActive"] is False
