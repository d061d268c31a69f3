"""
仪表盘、酒店设置、房间与客人 API 测试
"""
import json

import pytest

ROOMS = [
    {"_id": "r1", "roomNumber": "10", "floor": 1, "type": "double", "status": "available", "pricePerNight": 300},
    {"_id": "r2", "roomNumber": "9", "floor": 1, "type": "suite", "status": "reserved", "pricePerNight": 800},
]

GUESTS = [
    {"_id": "g1", "firstName": "Sara", "lastName": "Ali", "guestType": "individual", "totalSpent": 1000},
    {"_id": "g2", "firstName": "Omar", "lastName": "Hassan", "guestType": "vip", "isBlacklisted": True,
     "totalSpent": 4000},
]


class TestDashboard:
    """仪表盘 API 测试"""

    def test_dashboard(self, client, receptionist_session, upstream, wrap):
        upstream.add("GET", "/api/dashboard/stats", json=wrap({"totalRooms": 8, "occupiedRooms": 3}))
        response = client.get("/console/dashboard")
        assert response.status_code == 200
        assert response.json()["occupancyRate"] == 38

    def test_requires_session(self, client, upstream):
        upstream.add("GET", "/api/auth/me", status_code=401, json={"success": False, "error": "Unauthorized"})
        response = client.get("/console/dashboard")
        assert response.status_code == 401
        assert upstream.calls_to("GET", "/api/dashboard/stats") == []


class TestSettings:
    """酒店设置 API 测试"""

    FORM = {
        "hotelName": "Palm Resort",
        "email": "palm@hotel.test",
        "phone": "0500000000",
        "settings": {
            "currency": "SAR", "timezone": "Asia/Riyadh", "language": "en",
            "checkInTime": "15:00", "checkOutTime": "11:00", "taxRate": 10,
        },
    }

    def test_get_settings(self, client, admin_session):
        data = client.get("/console/settings").json()
        assert data["settings"]["checkOutTime"] == "12:00"
        assert data["settings"]["notifications"]["dailyReport"] is True

    def test_update_settings(self, client, admin_session, upstream):
        user = {**admin_session, "hotel": {"name": "Palm Resort", "settings": self.FORM["settings"]}}
        upstream.add("PATCH", "/api/auth/me", json={"success": True, "user": user})

        response = client.put("/console/settings", json=self.FORM)
        assert response.status_code == 200
        assert response.json()["settings"]["taxRate"] == 10
        body = json.loads(upstream.calls_to("PATCH", "/api/auth/me")[0].content)
        assert body["hotelName"] == "Palm Resort"
        assert body["settings"]["checkInTime"] == "15:00"

    @pytest.mark.parametrize("field,value", [
        ("taxRate", 31),
        ("checkInTime", "9:00"),
        ("language", "fr"),
    ])
    def test_invalid_settings(self, client, admin_session, upstream, field, value):
        form = {**self.FORM, "settings": {**self.FORM["settings"], field: value}}
        assert client.put("/console/settings", json=form).status_code == 422
        assert upstream.calls_to("PATCH", "/api/auth/me") == []

    def test_receptionist_cannot_edit(self, client, receptionist_session):
        assert client.put("/console/settings", json=self.FORM).status_code == 403


class TestRooms:
    """房间 API 测试"""

    def test_list_sorted_naturally(self, client, receptionist_session, upstream, wrap):
        upstream.add("GET", "/api/rooms", json=wrap(ROOMS))
        data = client.get("/console/rooms").json()
        assert [row["roomNumber"] for row in data["items"]] == ["9", "10"]
        assert data["stats"]["reserved"] == 1

    def test_status_forwarded_type_and_floor_local(self, client, admin_session, upstream, wrap):
        upstream.add("GET", "/api/rooms", json=wrap(ROOMS))
        data = client.get("/console/rooms", params={"status": "available", "type": "double", "floor": 1}).json()
        assert dict(upstream.calls_to("GET", "/api/rooms")[0].url.params) == {"status": "available"}
        assert [row["roomNumber"] for row in data["items"]] == ["10"]

    def test_invalid_floor(self, client, admin_session):
        assert client.get("/console/rooms", params={"floor": "top"}).status_code == 422

    def test_receptionist_cannot_create(self, client, receptionist_session, upstream):
        response = client.post("/console/rooms", json={
            "roomNumber": "401", "floor": 4, "type": "suite", "pricePerNight": 900,
        })
        assert response.status_code == 403
        assert upstream.calls_to("POST", "/api/rooms") == []

    def test_delete(self, client, admin_session, upstream):
        upstream.add("DELETE", "/api/rooms/r1", json={"success": True, "message": "Room deactivated"})
        response = client.delete("/console/rooms/r1")
        assert response.status_code == 200
        assert response.json() == {"message": "Room deactivated"}


class TestGuests:
    """客人 API 测试"""

    def test_blacklisted_filter(self, client, admin_session, upstream, wrap):
        upstream.add("GET", "/api/guests", json=wrap(GUESTS))
        data = client.get("/console/guests", params={"blacklisted": "true"}).json()
        assert [row["_id"] for row in data["items"]] == ["g2"]

    def test_sort_by_spent(self, client, admin_session, upstream, wrap):
        upstream.add("GET", "/api/guests", json=wrap(GUESTS))
        data = client.get("/console/guests", params={"sortBy": "spent", "sortOrder": "desc"}).json()
        assert [row["_id"] for row in data["items"]] == ["g2", "g1"]

    def test_upstream_error_message(self, client, admin_session, upstream):
        upstream.add("GET", "/api/guests", status_code=500, json={"success": False})
        response = client.get("/console/guests")
        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to load guests"}
