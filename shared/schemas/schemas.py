"""
shared/schemas/schemas.py
All Pydantic v2 request/response schemas for the portal.
"""

from datetime import date as date_type
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from config.settings import settings
from shared.models.models import (
    BookingStatus,
    PaymentMethod,
    StudioPackage,
    Theme,
    TransactionType,
)


# ── Base ──────────────────────────────────────────────────────

class BaseSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


# ── Auth ──────────────────────────────────────────────────────

class RegisterRequest(BaseSchema):
    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=2, max_length=72)


class LoginRequest(BaseSchema):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=72)
    remember: bool = False


class SessionResponse(BaseSchema):
    role: Optional[str] = None
    id: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    remembered: bool = False


class LoginResponse(BaseSchema):
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    session: SessionResponse


# ── Teacher ───────────────────────────────────────────────────

class TeacherResponse(BaseSchema):
    id: str
    name: str
    email: str
    credits: float
    is_approved: bool
    created_at: datetime


class TopUpRequest(BaseSchema):
    amount: float = Field(..., ge=0)
    hours: float = Field(..., gt=0)


# ── Booking ───────────────────────────────────────────────────

class BookingCreateRequest(BaseSchema):
    date: date_type
    start_hour: int = Field(..., ge=0, le=23)
    duration: int = Field(..., ge=1)

    @field_validator("duration")
    @classmethod
    def validate_duration(cls, v: int) -> int:
        if v > settings.MAX_BOOKING_HOURS:
            raise ValueError(f"Duration cannot exceed {settings.MAX_BOOKING_HOURS} hours")
        return v


class BookingResponse(BaseSchema):
    id: str
    teacher_id: str
    teacher_name: str
    date: str
    start_time: int
    duration: int
    status: BookingStatus
    created_at: datetime
    cost: float


class BookingCreatedResponse(BookingResponse):
    credits_remaining: float
    message_link: str


class BookingStatusRequest(BaseSchema):
    status: BookingStatus


class SlotResponse(BaseSchema):
    hour: int
    available: bool


class DayAvailabilityResponse(BaseSchema):
    date: str
    slots: List[SlotResponse]


# ── Package ───────────────────────────────────────────────────

class PackageUpsertRequest(BaseSchema):
    name: str = Field(..., min_length=1, max_length=255)
    hours: float = Field(..., gt=0)
    price: float = Field(..., ge=0)
    description: str = Field("", max_length=2000)
    thumbnail: str = ""
    badge: str = Field("", max_length=50)

    def to_package(self, package_id: str) -> StudioPackage:
        return StudioPackage(id=package_id, **self.model_dump())


class PackageResponse(BaseSchema):
    id: str
    name: str
    hours: float
    price: float
    description: str
    thumbnail: str
    badge: str


# ── Payment ───────────────────────────────────────────────────

class PurchaseRequest(BaseSchema):
    package_id: str
    method: PaymentMethod = PaymentMethod.ONLINE
    slip_image: Optional[str] = Field(None, description="data: URL of the bank slip")

    @field_validator("method")
    @classmethod
    def validate_method(cls, v: PaymentMethod) -> PaymentMethod:
        if v == PaymentMethod.MANUAL:
            raise ValueError("Admin-added payments cannot be requested by teachers")
        return v

    @field_validator("slip_image")
    @classmethod
    def validate_slip(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.startswith("data:"):
            raise ValueError("Payment slip must be a data URL")
        return v


class TransactionResponse(BaseSchema):
    id: str
    teacher_id: str
    teacher_name: str
    package_id: Optional[str]
    package_name: Optional[str]
    amount: float
    date: datetime
    method: PaymentMethod
    slip_image: Optional[str]
    verified: bool
    type: TransactionType


class FinanceSummaryResponse(BaseSchema):
    total_revenue: float
    verified_count: int
    pending_count: int
    transactions: List[TransactionResponse]


# ── CMS ───────────────────────────────────────────────────────

class ThemeRequest(BaseSchema):
    theme: Theme


class ThemeResponse(BaseSchema):
    theme: str


# ── Generic ───────────────────────────────────────────────────

class MessageResponse(BaseSchema):
    message: str
    success: bool = True


class ErrorResponse(BaseSchema):
    detail: str
    code: Optional[str] = None
    request_id: Optional[str] = None
