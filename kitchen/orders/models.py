from __future__ import annotations

from pydantic import Field

from ..analytics.models import Recommendation
from ..store.models import CamelModel, Order


class OrderItemIn(CamelModel):
    food_item_id: str = Field(..., min_length=1)
    quantity: int = Field(default=1, ge=1)
    special_instructions: str = ""


class OrderCreate(CamelModel):
    user_id: str | None = None
    items: list[OrderItemIn] = Field(..., min_length=1)


class StatusUpdate(CamelModel):
    status: str


class FormattedItem(CamelModel):
    name: str
    quantity: int
    price: float
    preparation_time: int
    special_instructions: str = ""


class ChefOrder(Order):
    order_number: str
    order_time: str
    status_label: str
    customer_name: str
    formatted_items: list[FormattedItem]
    analysis: Recommendation | None = None
