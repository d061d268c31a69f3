"""
本体对象定义 (Ontology Objects)
上游 REST API 返回的业务实体在控制台侧的镜像

控制台不拥有这些数据，只负责读取、派生和展示；
记录模型对未知字段保持宽松（extra="allow"），序列化时使用上游的 camelCase 字段名。
"""
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


# ============== 枚举定义 ==============

class BookingStatus(str, Enum):
    """预订状态"""
    PENDING = "pending"            # 待确认
    CONFIRMED = "confirmed"        # 已确认
    CHECKED_IN = "checked_in"      # 已入住
    CHECKED_OUT = "checked_out"    # 已退房
    CANCELLED = "cancelled"        # 已取消
    NO_SHOW = "no_show"            # 未到店


class PaymentStatus(str, Enum):
    """支付状态"""
    PENDING = "pending"      # 未支付
    PARTIAL = "partial"      # 部分支付
    PAID = "paid"            # 已结清
    REFUNDED = "refunded"    # 已退款


class PaymentMethod(str, Enum):
    """支付方式"""
    CASH = "cash"
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    ONLINE = "online"


class BookingSource(str, Enum):
    """预订来源"""
    DIRECT = "direct"
    WEBSITE = "website"
    PHONE = "phone"
    WALKIN = "walkin"
    OTA = "ota"


class RoomStatus(str, Enum):
    """房间状态"""
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    RESERVED = "reserved"
    MAINTENANCE = "maintenance"
    CLEANING = "cleaning"


class RoomType(str, Enum):
    """房型"""
    SINGLE = "single"
    DOUBLE = "double"
    TWIN = "twin"
    SUITE = "suite"
    DELUXE = "deluxe"
    PRESIDENTIAL = "presidential"


class GuestType(str, Enum):
    """客人类型"""
    INDIVIDUAL = "individual"
    CORPORATE = "corporate"
    VIP = "vip"


class IdType(str, Enum):
    """证件类型"""
    PASSPORT = "passport"
    NATIONAL_ID = "national_id"
    DRIVER_LICENSE = "driver_license"


class UserRole(str, Enum):
    """平台用户角色"""
    SUPER_ADMIN = "super_admin"            # 主超级管理员
    SUB_SUPER_ADMIN = "sub_super_admin"    # 子超级管理员
    ADMIN = "admin"                        # 酒店管理员
    MANAGER = "manager"                    # 运营经理
    RECEPTIONIST = "receptionist"          # 前台
    HOUSEKEEPING = "housekeeping"          # 客房
    ACCOUNTANT = "accountant"              # 会计


PLATFORM_ROLES = (UserRole.SUPER_ADMIN, UserRole.SUB_SUPER_ADMIN)


class SubscriptionPlan(str, Enum):
    """订阅套餐"""
    FREE = "free"
    BASIC = "basic"
    PREMIUM = "premium"
    ENTERPRISE = "enterprise"


class SubscriptionStatus(str, Enum):
    """订阅状态"""
    ACTIVE = "active"
    SUSPENDED = "suspended"
    CANCELLED = "cancelled"


class AlertSeverity(str, Enum):
    """订阅到期提醒等级"""
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"
    EXPIRED = "expired"


class RiskLevel(str, Enum):
    """风险等级（由上游计算）"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


# ============== 记录模型 ==============

class ApiRecord(BaseModel):
    """上游记录基类：camelCase 别名，保留未声明字段"""
    model_config = ConfigDict(extra="allow", populate_by_name=True, alias_generator=to_camel)

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        # 上游的 null 与缺省等价，交给字段默认值处理
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data

    def to_api(self) -> Dict[str, Any]:
        """按上游字段名导出"""
        return self.model_dump(by_alias=True, exclude_none=True)


class GuestCount(ApiRecord):
    adults: int = 1
    children: int = 0


class Pricing(ApiRecord):
    room_rate: Optional[float] = None
    number_of_nights: Optional[int] = None
    subtotal: Optional[float] = None
    taxes: Optional[float] = None
    discount: Optional[float] = None
    total: Optional[float] = None


class PaymentTransaction(ApiRecord):
    amount: Optional[float] = None
    method: Optional[str] = None
    date: Optional[str] = None
    reference: Optional[str] = None


class BookingPayment(ApiRecord):
    status: Optional[str] = None
    method: Optional[str] = None
    paid_amount: Optional[float] = None
    transactions: List[PaymentTransaction] = Field(default_factory=list)


class RoomRef(ApiRecord):
    """预订中被展开的房间摘要"""
    id: Optional[str] = Field(None, alias="_id")
    room_number: Optional[str] = None
    type: Optional[str] = None
    floor: Optional[int] = None


class GuestRef(ApiRecord):
    """预订中被展开的客人摘要"""
    id: Optional[str] = Field(None, alias="_id")
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class Booking(ApiRecord):
    """
    预订记录

    roomId / guestId 可能是展开后的摘要对象，也可能只是 ID 字符串。
    """
    id: Optional[str] = Field(None, alias="_id")
    booking_number: str = ""
    room_id: Union[RoomRef, str, None] = None
    guest_id: Union[GuestRef, str, None] = None
    check_in_date: Optional[str] = None
    check_out_date: Optional[str] = None
    number_of_guests: Optional[GuestCount] = None
    source: Optional[str] = None
    status: str = BookingStatus.PENDING.value
    pricing: Pricing = Field(default_factory=Pricing)
    payment: BookingPayment = Field(default_factory=BookingPayment)
    notes: Optional[str] = None
    special_requests: Optional[str] = None
    cancellation_reason: Optional[str] = None
    created_at: Optional[str] = None

    @property
    def room(self) -> Optional[RoomRef]:
        return self.room_id if isinstance(self.room_id, RoomRef) else None

    @property
    def guest(self) -> Optional[GuestRef]:
        return self.guest_id if isinstance(self.guest_id, GuestRef) else None


class RoomCapacity(ApiRecord):
    adults: int = 1
    children: int = 0


class Room(ApiRecord):
    """房间记录"""
    id: Optional[str] = Field(None, alias="_id")
    room_number: str = ""
    floor: int = 0
    type: Optional[str] = None
    status: Optional[str] = None
    price_per_night: float = 0
    capacity: Optional[RoomCapacity] = None
    amenities: List[str] = Field(default_factory=list)
    description: Optional[str] = None
    is_active: Optional[bool] = None

    @property
    def effective_status(self) -> str:
        """停用的房间统一视为 inactive"""
        if self.is_active is False:
            return "inactive"
        return self.status or ""


class Guest(ApiRecord):
    """客人记录"""
    id: Optional[str] = Field(None, alias="_id")
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    nationality: Optional[str] = None
    id_type: Optional[str] = None
    id_number: Optional[str] = None
    date_of_birth: Optional[str] = None
    guest_type: Optional[str] = None
    company_name: Optional[str] = None
    notes: Optional[str] = None
    total_stays: Optional[int] = None
    total_spent: Optional[float] = None
    last_stay: Optional[str] = None
    created_at: Optional[str] = None
    is_blacklisted: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class HotelAdmin(ApiRecord):
    id: Optional[str] = Field(None, alias="_id")
    name: str = ""
    email: str = ""
    phone: Optional[str] = None
    is_active: bool = True


class HotelSubscription(ApiRecord):
    plan: Optional[str] = None
    status: Optional[str] = None
    payment_date: Optional[str] = None
    end_date: Optional[str] = None


class HotelVerification(ApiRecord):
    is_verified: Optional[bool] = None


class Hotel(ApiRecord):
    """平台侧的酒店记录"""
    id: Optional[str] = Field(None, alias="_id")
    name: str = ""
    email: str = ""
    phone: Optional[str] = None
    address: Optional[Dict[str, Any]] = None
    subscription: Optional[HotelSubscription] = None
    verification: Optional[HotelVerification] = None
    admin: Optional[HotelAdmin] = None
    is_active: bool = True
    created_at: Optional[str] = None

    @property
    def plan(self) -> str:
        """未设置套餐的酒店按 free 处理"""
        return (self.subscription.plan if self.subscription else None) or SubscriptionPlan.FREE.value

    @property
    def is_verified(self) -> bool:
        return bool(self.verification and self.verification.is_verified)


class PlatformUser(ApiRecord):
    """平台用户"""
    id: Optional[str] = Field(None, alias="_id")
    name: str = ""
    email: str = ""
    phone: Optional[str] = None
    role: str = ""
    hotel_id: Union[Dict[str, Any], str, None] = None
    is_active: bool = True


class MonitoringRisk(ApiRecord):
    score: float = 0
    level: str = RiskLevel.LOW.value
    flags: List[str] = Field(default_factory=list)


class SubSuperAdmin(ApiRecord):
    """子超级管理员监控条目"""
    id: Optional[str] = Field(None, alias="_id")
    name: str = ""
    email: str = ""
    is_active: bool = True
    stats: Dict[str, Any] = Field(default_factory=dict)
    risk: MonitoringRisk = Field(default_factory=MonitoringRisk)
    recent_actions: List[Dict[str, Any]] = Field(default_factory=list)
