from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Treat naive timestamps as UTC so they sort alongside aware ones."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class CamelModel(BaseModel):
    """Base model serialised with camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Customer(CamelModel):
    id: str
    first_name: str
    last_name: str
    role: str = "customer"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class FeedbackRecord(CamelModel):
    id: str
    food_item_id: str
    food_item_name: str | None = None
    user_id: str | None = None
    rating: int = Field(..., ge=1, le=5)
    comment: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    reply: str | None = None
    replied_at: datetime | None = None
    resolved: bool = False

    @field_validator("created_at", "replied_at")
    @classmethod
    def assume_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)


class FoodItem(CamelModel):
    id: str
    name: str
    price: float = Field(..., ge=0.0)
    description: str = ""
    preparation_time: int = 15
    rating: float | None = Field(default=None, ge=0.0, le=5.0)
    feedback: list[FeedbackRecord] = Field(default_factory=list)


class OrderStatus(str, Enum):
    pending = "pending"
    preparing = "preparing"
    ready = "ready"
    completed = "completed"
    cancelled = "cancelled"


class OrderItem(CamelModel):
    food_item_id: str
    quantity: int = Field(..., ge=1)
    price: float = Field(..., ge=0.0)
    special_instructions: str = ""


class Order(CamelModel):
    id: str
    user_id: str | None = None
    items: list[OrderItem]
    status: OrderStatus = OrderStatus.pending
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime | None = None
    total_amount: float = 0.0

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)


# ── Request payloads ─────────────────────────────────────────────────────


class CustomerCreate(CamelModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = ""
    role: str = "customer"


class FoodItemCreate(CamelModel):
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0.0)
    description: str = ""
    preparation_time: int = Field(default=15, ge=1)


class FeedbackCreate(CamelModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(default="", max_length=2000)
    user_id: str | None = None
    created_at: datetime | None = None


class ReplyRequest(CamelModel):
    reply: str = Field(..., min_length=1, max_length=2000)


class ReplyResponse(CamelModel):
    success: bool = True
    message: str = "Reply added successfully"
    feedback: FeedbackRecord
