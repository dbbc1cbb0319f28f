from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from .models import Customer, FeedbackRecord, FoodItem, Order, OrderStatus


class StoreError(RuntimeError):
    """The backing store could not be reached or failed mid-query."""


class FoodItemNotFound(LookupError):
    pass


class FeedbackNotFound(LookupError):
    pass


class OrderNotFound(LookupError):
    pass


class FeedbackStore(Protocol):
    """Read side used by the analytics core, plus the reply mutation.

    Implementations raise ``StoreError`` when the backend is unavailable.
    """

    def query_feedback(
        self,
        user_id: str | None = None,
        food_item_id: str | None = None,
    ) -> list[FeedbackRecord]: ...

    def query_orders(
        self,
        user_id: str | None = None,
        statuses: Iterable[OrderStatus] | None = None,
        food_item_id: str | None = None,
    ) -> list[Order]: ...

    def get_food_item(self, food_item_id: str) -> FoodItem | None: ...

    def list_food_items(self) -> list[FoodItem]: ...

    def get_customer(self, customer_id: str) -> Customer | None: ...

    def count_customers(self) -> int: ...

    def attach_reply(self, food_item_id: str, feedback_id: str, reply: str) -> FeedbackRecord: ...
