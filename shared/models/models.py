"""
shared/models/models.py
Persisted records for the studio portal.
Every collection is stored as a JSON snapshot of these Pydantic models.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum as PyEnum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


def _now() -> datetime:
    return datetime.now(timezone.utc)


def new_id(prefix: str) -> str:
    """Short prefixed record id, e.g. ``bk-3f9c0a1b2d4e``."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


# ── Enumerations ──────────────────────────────────────────────

class UserRole(str, PyEnum):
    TEACHER = "teacher"
    ADMIN = "admin"


class BookingStatus(str, PyEnum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    PACKED = "Packed/Ready"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class PaymentMethod(str, PyEnum):
    ONLINE = "Online"
    ONSITE = "On-Site"
    MANUAL = "Admin Added"


class TransactionType(str, PyEnum):
    PACKAGE = "Package"
    SESSION = "Session"
    MANUAL_TOP_UP = "Manual Top-up"


class Theme(str, PyEnum):
    DARK = "dark"
    LIGHT = "light"


# ── Base ──────────────────────────────────────────────────────

class Record(BaseModel):
    model_config = ConfigDict(validate_assignment=True)


# ── Teacher ───────────────────────────────────────────────────

class Teacher(Record):
    id: str = Field(default_factory=lambda: new_id("t"))
    name: str
    email: str
    password_hash: str
    credits: float = 0
    is_approved: bool = False
    created_at: datetime = Field(default_factory=_now)


# ── Booking ───────────────────────────────────────────────────

class Booking(Record):
    id: str = Field(default_factory=lambda: new_id("bk"))
    teacher_id: str
    teacher_name: str
    date: str                        # YYYY-MM-DD
    start_time: int                  # studio hour, 8..23
    duration: int                    # hours
    status: BookingStatus = BookingStatus.PENDING
    created_at: datetime = Field(default_factory=_now)
    cost: float

    @property
    def end_time(self) -> int:
        return self.start_time + self.duration

    def covers(self, hour: int) -> bool:
        return self.start_time <= hour < self.end_time


# ── Catalog ───────────────────────────────────────────────────

class StudioPackage(Record):
    id: str = Field(default_factory=lambda: new_id("p"))
    name: str
    hours: float = Field(..., gt=0)
    price: float = Field(..., ge=0)
    description: str = ""
    thumbnail: str = ""
    badge: str = ""


# ── Transaction ───────────────────────────────────────────────

class Transaction(Record):
    id: str = Field(default_factory=lambda: new_id("tx"))
    teacher_id: str
    teacher_name: str
    package_id: Optional[str] = None
    package_name: Optional[str] = None
    package_hours: Optional[float] = None    # snapshot at purchase time
    amount: float
    date: datetime = Field(default_factory=_now)
    method: PaymentMethod
    slip_image: Optional[str] = None         # data URL of the bank slip
    verified: bool = False
    type: TransactionType


# ── CMS ───────────────────────────────────────────────────────

class PricingConfig(Record):
    one_hour: float = 1000
    two_hours: float = 1500
    three_plus_hours: float = 2000

    def cost_for(self, duration: int) -> float:
        if duration == 1:
            return self.one_hour
        if duration == 2:
            return self.two_hours
        return self.three_plus_hours


class CMSConfig(Record):
    hero_title: str = "Dream Education Studio"
    hero_subtitle: str = "Premium Digital Studio"
    about_text: str = (
        "Dream Education is a high-end digital studio. We provide a professional "
        "space where teachers can record high-quality lessons. Our studio has the "
        "best 4K cameras and lighting to make your teaching look world-class. We "
        "handle all the technical parts so you can focus on teaching your students."
    )
    banner_image: str = (
        "https://images.unsplash.com/photo-1598488035139-bdbb2231ce04"
        "?q=80&w=1600&auto=format&fit=crop"
    )
    strategy_image: str = "https://images.unsplash.com/photo-1492691527719-9d1e07e534b4?q=80&w=1000"
    studio_intelligence: str = (
        "Get broadcast-quality video with our professional cinema cameras and expert "
        "lighting setup. We ensure your educational content looks sharp, clear, and "
        "authoritative."
    )
    features: List[str] = Field(default_factory=lambda: [
        "Sony 4K Cinema Cameras",
        "Soundproof Recording Space",
        "Professional Studio Lighting",
        "High-Speed Live Streaming",
    ])
    pricing: PricingConfig = Field(default_factory=PricingConfig)
    studio_logo: str = ""            # empty: frontend draws the default mark
    footer_brand_name: str = "Dream Studio"
    director_name: str = "B.A.M. Mendis"
    contact_number: str = "078 639 8066"
    footer_tagline: str = "Premium Studio Hub | Sri Lanka | 2026"


# ── Seed data ─────────────────────────────────────────────────

def initial_packages() -> List[StudioPackage]:
    return [
        StudioPackage(
            id="pkg-starter",
            name="Starter Plan",
            hours=1,
            price=1000,
            description="1 Hour recording session. Best for short lessons or high-impact social media videos.",
            thumbnail="https://images.unsplash.com/photo-1590602847861-f357a9332bbc?q=80&w=600&auto=format&fit=crop",
            badge="1 HOUR",
        ),
        StudioPackage(
            id="pkg-pro",
            name="Professional Plan",
            hours=5,
            price=4500,
            description="5 Hour recording bundle. Perfect for creating a full course or several educational modules.",
            thumbnail="https://images.unsplash.com/photo-1524178232363-1fb2b075b655?q=80&w=600&auto=format&fit=crop",
            badge="5 HOURS",
        ),
        StudioPackage(
            id="pkg-ultimate",
            name="Master Plan",
            hours=12,
            price=10000,
            description="12 Hour recording bundle. The best value for professional teachers building a complete digital academy.",
            thumbnail="https://images.unsplash.com/photo-1478737270239-2f02b77fc618?q=80&w=600&auto=format&fit=crop",
            badge="12 HOURS",
        ),
    ]
