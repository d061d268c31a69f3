"""
集中定义所有权限码常量与角色权限映射

与平台侧的角色表保持一致；控制台用它来决定页面和操作是否可用，
真正的鉴权仍由上游 API 负责。
"""
from typing import Dict, FrozenSet, Iterable, Optional

# 酒店管理
HOTEL_CREATE = "hotel:create"
HOTEL_READ = "hotel:read"
HOTEL_UPDATE = "hotel:update"
HOTEL_DELETE = "hotel:delete"

# 用户管理
USER_CREATE = "user:create"
USER_READ = "user:read"
USER_UPDATE = "user:update"
USER_DELETE = "user:delete"

# 房间管理
ROOM_CREATE = "room:create"
ROOM_READ = "room:read"
ROOM_UPDATE = "room:update"
ROOM_DELETE = "room:delete"

# 预订管理
BOOKING_CREATE = "booking:create"
BOOKING_READ = "booking:read"
BOOKING_UPDATE = "booking:update"
BOOKING_DELETE = "booking:delete"
BOOKING_CONFIRM = "booking:confirm"
BOOKING_CANCEL = "booking:cancel"
BOOKING_CHECKIN = "booking:checkin"
BOOKING_CHECKOUT = "booking:checkout"

# 客人管理
GUEST_CREATE = "guest:create"
GUEST_READ = "guest:read"
GUEST_UPDATE = "guest:update"
GUEST_DELETE = "guest:delete"

# 财务
PAYMENT_CREATE = "payment:create"
PAYMENT_READ = "payment:read"
PAYMENT_REFUND = "payment:refund"
REPORT_VIEW = "report:view"
REPORT_EXPORT = "report:export"

# 设置
SETTINGS_READ = "settings:read"
SETTINGS_UPDATE = "settings:update"

# 客房
HOUSEKEEPING_READ = "housekeeping:read"
HOUSEKEEPING_UPDATE = "housekeeping:update"

ALL_PERMISSIONS: FrozenSet[str] = frozenset({
    HOTEL_CREATE, HOTEL_READ, HOTEL_UPDATE, HOTEL_DELETE,
    USER_CREATE, USER_READ, USER_UPDATE, USER_DELETE,
    ROOM_CREATE, ROOM_READ, ROOM_UPDATE, ROOM_DELETE,
    BOOKING_CREATE, BOOKING_READ, BOOKING_UPDATE, BOOKING_DELETE,
    BOOKING_CONFIRM, BOOKING_CANCEL, BOOKING_CHECKIN, BOOKING_CHECKOUT,
    GUEST_CREATE, GUEST_READ, GUEST_UPDATE, GUEST_DELETE,
    PAYMENT_CREATE, PAYMENT_READ, PAYMENT_REFUND, REPORT_VIEW, REPORT_EXPORT,
    SETTINGS_READ, SETTINGS_UPDATE,
    HOUSEKEEPING_READ, HOUSEKEEPING_UPDATE,
})

ROLE_PERMISSIONS: Dict[str, FrozenSet[str]] = {
    "super_admin": ALL_PERMISSIONS,
    "sub_super_admin": frozenset({
        HOTEL_CREATE, HOTEL_READ, HOTEL_UPDATE,
        USER_CREATE, USER_READ, USER_UPDATE,
        REPORT_VIEW, REPORT_EXPORT,
    }),
    "admin": ALL_PERMISSIONS - {HOTEL_CREATE, HOTEL_DELETE},
    "manager": frozenset({
        HOTEL_READ, USER_READ,
        ROOM_CREATE, ROOM_READ, ROOM_UPDATE,
        BOOKING_CREATE, BOOKING_READ, BOOKING_UPDATE,
        BOOKING_CONFIRM, BOOKING_CANCEL, BOOKING_CHECKIN, BOOKING_CHECKOUT,
        GUEST_CREATE, GUEST_READ, GUEST_UPDATE,
        PAYMENT_CREATE, PAYMENT_READ,
        REPORT_VIEW, SETTINGS_READ,
        HOUSEKEEPING_READ, HOUSEKEEPING_UPDATE,
    }),
    "receptionist": frozenset({
        ROOM_READ,
        BOOKING_CREATE, BOOKING_READ, BOOKING_UPDATE,
        BOOKING_CONFIRM, BOOKING_CANCEL, BOOKING_CHECKIN, BOOKING_CHECKOUT,
        GUEST_CREATE, GUEST_READ, GUEST_UPDATE,
        PAYMENT_CREATE, PAYMENT_READ,
        HOUSEKEEPING_READ,
    }),
    "housekeeping": frozenset({
        ROOM_READ, HOUSEKEEPING_READ, HOUSEKEEPING_UPDATE,
    }),
    "accountant": frozenset({
        BOOKING_READ, GUEST_READ,
        PAYMENT_CREATE, PAYMENT_READ, PAYMENT_REFUND,
        REPORT_VIEW, REPORT_EXPORT,
    }),
}

# 角色层级：只能管理层级严格低于自己的角色
ROLE_HIERARCHY: Dict[str, int] = {
    "super_admin": 100,
    "sub_super_admin": 90,
    "admin": 80,
    "manager": 60,
    "accountant": 40,
    "receptionist": 40,
    "housekeeping": 20,
}


def get_permissions_for_role(role: Optional[str]) -> FrozenSet[str]:
    return ROLE_PERMISSIONS.get(role or "", frozenset())


def has_permission(role: Optional[str], user_permissions: Optional[Iterable[str]], permission: str) -> bool:
    """先查角色权限，再查用户的自定义权限"""
    if permission in get_permissions_for_role(role):
        return True
    return permission in set(user_permissions or ())


def has_any_permission(role: Optional[str], user_permissions: Optional[Iterable[str]],
                       permissions: Iterable[str]) -> bool:
    granted = list(user_permissions or ())
    return any(has_permission(role, granted, p) for p in permissions)


def can_manage_role(manager_role: str, target_role: str) -> bool:
    """管理者层级必须严格高于目标角色"""
    return ROLE_HIERARCHY.get(manager_role, 0) > ROLE_HIERARCHY.get(target_role, 0)
