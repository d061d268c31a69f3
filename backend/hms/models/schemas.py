"""
Pydantic 模式定义
控制台表单的请求验证，校验失败时不会调用上游 API
"""
import re
from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from hms.models.ontology import (
    BookingSource, BookingStatus, GuestType, IdType, PaymentMethod, PLATFORM_ROLES,
    RoomStatus, RoomType, SubscriptionPlan, SubscriptionStatus, Theme, UserRole,
)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
TIME_PATTERN = re.compile(r"^\d{2}:\d{2}$")
OBJECT_ID_PATTERN = re.compile(r"^[a-f\d]{24}$", re.IGNORECASE)


def _normalize_email(value: str) -> str:
    value = value.strip().lower()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("البريد الإلكتروني غير صالح")
    return value


class FormModel(BaseModel):
    """表单基类：请求体使用 camelCase 字段名"""
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")

    def to_api_patch(self) -> Dict[str, Any]:
        """只包含调用方显式提交的字段"""
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")


# ============== 认证 Schemas ==============

class LoginRequest(FormModel):
    email: str
    password: str = Field(..., min_length=8)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _normalize_email(v)


class RegisterHotelRequest(FormModel):
    """创建酒店（同时创建酒店管理员账号）"""
    hotel_name: str = Field(..., min_length=2, max_length=100)
    email: str
    password: str = Field(..., min_length=8)
    phone: str = Field(..., min_length=10)
    city: str = Field(..., min_length=2)
    country: str = Field(..., min_length=2)
    admin_name: str = Field(..., min_length=2)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _normalize_email(v)


# ============== 平台用户 Schemas ==============

class CreateUserRequest(FormModel):
    """
    创建平台用户

    平台角色（super_admin / sub_super_admin）不能关联酒店，
    酒店角色必须关联一个合法的酒店 ID（24 位十六进制）。
    """
    name: str = Field(..., min_length=2, max_length=100)
    email: str
    password: str = Field(..., min_length=8)
    role: UserRole
    hotel_id: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _normalize_email(v)

    @model_validator(mode="after")
    def validate_hotel_link(self) -> "CreateUserRequest":
        if self.role in PLATFORM_ROLES:
            if self.hotel_id:
                raise ValueError("Platform roles cannot be linked to a hotel")
            return self
        if not self.hotel_id:
            raise ValueError("الفندق مطلوب لهذا الدور")
        if not OBJECT_ID_PATTERN.match(self.hotel_id):
            raise ValueError("معرف الفندق غير صالح")
        return self

    def to_api(self) -> Dict[str, Any]:
        payload = self.model_dump(by_alias=True, mode="json")
        if self.role in PLATFORM_ROLES:
            payload["hotelId"] = None
        return payload


class UpdateUserRequest(FormModel):
    """编辑平台用户（空白电话视为清空）"""
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[str] = None
    phone: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_email(v) if v is not None else v

    @field_validator("phone")
    @classmethod
    def blank_phone(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v.strip()

    def to_api(self) -> Dict[str, Any]:
        payload = self.model_dump(by_alias=True, exclude_none=True)
        if self.phone == "":
            payload["phone"] = None
        return payload


class UserActiveUpdate(FormModel):
    is_active: bool


# ============== 房间 Schemas ==============

class RoomCapacityForm(FormModel):
    adults: int = Field(..., ge=1)
    children: int = Field(default=0, ge=0)


class RoomCreate(FormModel):
    room_number: str = Field(..., min_length=1, max_length=20)
    floor: int = Field(..., ge=0)
    type: RoomType
    price_per_night: float = Field(..., gt=0)
    capacity: Optional[RoomCapacityForm] = None
    amenities: Optional[List[str]] = None
    description: Optional[str] = Field(None, max_length=500)


class RoomUpdate(FormModel):
    room_number: Optional[str] = Field(None, min_length=1, max_length=20)
    floor: Optional[int] = Field(None, ge=0)
    type: Optional[RoomType] = None
    status: Optional[RoomStatus] = None
    price_per_night: Optional[float] = Field(None, gt=0)
    capacity: Optional[RoomCapacityForm] = None
    amenities: Optional[List[str]] = None
    description: Optional[str] = Field(None, max_length=500)
    is_active: Optional[bool] = None


# ============== 预订 Schemas ==============

class GuestCountForm(FormModel):
    adults: int = Field(..., ge=1)
    children: int = Field(default=0, ge=0)


class BookingCreate(FormModel):
    room_id: str = Field(..., min_length=1)
    guest_id: str = Field(..., min_length=1)
    check_in_date: date
    check_out_date: date
    number_of_guests: GuestCountForm
    source: Optional[BookingSource] = None
    special_requests: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = Field(None, max_length=1000)

    @model_validator(mode="after")
    def validate_dates(self) -> "BookingCreate":
        if self.check_out_date <= self.check_in_date:
            raise ValueError("تاريخ المغادرة يجب أن يكون بعد تاريخ الوصول")
        return self


class BookingStatusChange(FormModel):
    status: BookingStatus


class BookingCancel(FormModel):
    cancellation_reason: Optional[str] = Field(None, max_length=500)


class BookingNotesUpdate(FormModel):
    notes: str = Field(default="", max_length=1000)
    special_requests: str = Field(default="", max_length=500)


class PricingPreviewRequest(FormModel):
    """新建预订表单的价格预估（日期无效时返回全 0）"""
    price_per_night: Optional[float] = Field(None, ge=0)
    check_in_date: Optional[str] = None
    check_out_date: Optional[str] = None


class PaymentEntry(FormModel):
    """新增付款（金额范围在服务层按剩余应付校验）"""
    amount: float
    method: PaymentMethod = PaymentMethod.CASH
    reference: Optional[str] = None


# ============== 客人 Schemas ==============

class GuestCreate(FormModel):
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    email: Optional[str] = None
    phone: str = Field(..., min_length=10)
    nationality: str = Field(..., min_length=2)
    id_type: IdType
    id_number: str = Field(..., min_length=1)
    date_of_birth: Optional[date] = None
    guest_type: Optional[GuestType] = None
    company_name: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        # 邮箱可选，允许空字符串
        if not v:
            return v
        return _normalize_email(v)


class GuestUpdate(FormModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[str] = None
    phone: Optional[str] = Field(None, min_length=10)
    nationality: Optional[str] = Field(None, min_length=2)
    id_type: Optional[IdType] = None
    id_number: Optional[str] = Field(None, min_length=1)
    date_of_birth: Optional[date] = None
    guest_type: Optional[GuestType] = None
    company_name: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=1000)
    is_blacklisted: Optional[bool] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return v
        return _normalize_email(v)


# ============== 酒店设置 Schemas ==============

class NotificationSettings(FormModel):
    new_booking: bool = True
    cancelled_booking: bool = True
    payment_received: bool = True
    daily_report: bool = True


class HotelSettingsForm(FormModel):
    currency: str = Field(..., min_length=1)
    timezone: str = Field(..., min_length=1)
    language: str = Field(..., pattern=r"^(ar|en)$")
    check_in_time: str
    check_out_time: str
    tax_rate: float = Field(..., ge=0, le=30)
    theme: Optional[Theme] = None
    notifications: Optional[NotificationSettings] = None

    @field_validator("check_in_time", "check_out_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        if not TIME_PATTERN.match(v):
            raise ValueError("تنسيق وقت غير صالح")
        return v


class HotelSettingsUpdate(FormModel):
    hotel_name: str = Field(..., min_length=2, max_length=100)
    logo: Optional[str] = Field(None, max_length=2_000_000)
    email: str
    phone: str = Field(..., min_length=10)
    settings: HotelSettingsForm

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _normalize_email(v)


# ============== 超级管理员 Schemas ==============

class HotelActiveUpdate(FormModel):
    is_active: bool


class HotelVerifiedUpdate(FormModel):
    is_verified: bool


class SubscriptionUpdate(FormModel):
    """订阅信息保存（空日期发送为 null）"""
    is_active: bool
    plan: SubscriptionPlan = SubscriptionPlan.BASIC
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    payment_date: Optional[str] = None
    end_date: Optional[str] = None

    def to_api(self) -> Dict[str, Any]:
        return {
            "isActive": self.is_active,
            "subscription": {
                "plan": self.plan.value,
                "status": self.status.value,
                "paymentDate": self.payment_date or None,
                "endDate": self.end_date or None,
            },
        }


class SubSuperAdminUpdate(FormModel):
    """子超级管理员状态调整，可附带管理备注"""
    is_active: Optional[bool] = None
    is_verified: Optional[bool] = None
    admin_note: Optional[str] = None

    @model_validator(mode="after")
    def require_change(self) -> "SubSuperAdminUpdate":
        if self.is_active is None and self.is_verified is None:
            raise ValueError("isActive or isVerified is required")
        return self

    def to_api(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self.is_active is not None:
            payload["isActive"] = self.is_active
        if self.is_verified is not None:
            payload["isVerified"] = self.is_verified
        note = (self.admin_note or "").strip()
        if note:
            payload["adminNote"] = note
        return payload


# ============== 通用响应 ==============

class MessageResponse(BaseModel):
    message: str


class LoginResponse(BaseModel):
    user: Dict[str, Any]
    redirect: str
