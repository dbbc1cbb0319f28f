from __future__ import annotations

import uuid
from collections.abc import Iterable
from datetime import datetime

from .base import FeedbackNotFound, FoodItemNotFound, OrderNotFound
from .models import Customer, FeedbackRecord, FoodItem, Order, OrderStatus, utcnow


def new_id() -> str:
    """Return a 24-character hex identifier."""
    return uuid.uuid4().hex[:24]


class MemoryStore:
    """In-process store for customers, menu items with their feedback, and orders."""

    def __init__(self) -> None:
        self._customers: dict[str, Customer] = {}
        self._food_items: dict[str, FoodItem] = {}
        self._orders: dict[str, Order] = {}

    # ── Customers ────────────────────────────────────────────────────────

    def add_customer(self, first_name: str, last_name: str, role: str = "customer") -> Customer:
        customer = Customer(id=new_id(), first_name=first_name, last_name=last_name, role=role)
        self._customers[customer.id] = customer
        return customer

    def get_customer(self, customer_id: str) -> Customer | None:
        return self._customers.get(customer_id)

    def count_customers(self) -> int:
        return len(self._customers)

    # ── Menu & feedback ──────────────────────────────────────────────────

    def add_food_item(
        self,
        name: str,
        price: float,
        description: str = "",
        preparation_time: int = 15,
    ) -> FoodItem:
        item = FoodItem(
            id=new_id(),
            name=name,
            price=price,
            description=description,
            preparation_time=preparation_time,
        )
        self._food_items[item.id] = item
        return item

    def get_food_item(self, food_item_id: str) -> FoodItem | None:
        return self._food_items.get(food_item_id)

    def list_food_items(self) -> list[FoodItem]:
        return list(self._food_items.values())

    def add_feedback(
        self,
        food_item_id: str,
        rating: int,
        comment: str = "",
        user_id: str | None = None,
        created_at: datetime | None = None,
    ) -> FeedbackRecord:
        item = self._food_items.get(food_item_id)
        if item is None:
            raise FoodItemNotFound(food_item_id)

        record = FeedbackRecord(
            id=new_id(),
            food_item_id=food_item_id,
            user_id=user_id,
            rating=rating,
            comment=comment,
            created_at=created_at or utcnow(),
        )
        item.feedback.append(record)
        item.rating = round(sum(fb.rating for fb in item.feedback) / len(item.feedback), 1)
        return record.model_copy(update={"food_item_name": item.name})

    def query_feedback(
        self,
        user_id: str | None = None,
        food_item_id: str | None = None,
    ) -> list[FeedbackRecord]:
        """Return feedback with item names resolved.

        ``user_id`` selects the items this user reviewed; every record on
        those items is returned, so callers narrow by author themselves.
        """
        if food_item_id is not None:
            item = self._food_items.get(food_item_id)
            items = [item] if item is not None else []
        else:
            items = list(self._food_items.values())

        if user_id is not None:
            items = [i for i in items if any(fb.user_id == user_id for fb in i.feedback)]

        return [
            fb.model_copy(update={"food_item_name": item.name})
            for item in items
            for fb in item.feedback
        ]

    def attach_reply(self, food_item_id: str, feedback_id: str, reply: str) -> FeedbackRecord:
        item = self._food_items.get(food_item_id)
        if item is None:
            raise FoodItemNotFound(food_item_id)

        for fb in item.feedback:
            if fb.id == feedback_id:
                fb.reply = reply
                fb.replied_at = utcnow()
                return fb.model_copy(update={"food_item_name": item.name})
        raise FeedbackNotFound(feedback_id)

    # ── Orders ───────────────────────────────────────────────────────────

    def add_order(self, order: Order) -> Order:
        self._orders[order.id] = order
        return order

    def get_order(self, order_id: str) -> Order:
        order = self._orders.get(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order

    def update_order_status(self, order_id: str, status: OrderStatus) -> Order:
        order = self.get_order(order_id)
        order.status = status
        order.updated_at = utcnow()
        return order

    def query_orders(
        self,
        user_id: str | None = None,
        statuses: Iterable[OrderStatus] | None = None,
        food_item_id: str | None = None,
    ) -> list[Order]:
        wanted = set(statuses) if statuses is not None else None
        orders = []
        for order in self._orders.values():
            if user_id is not None and order.user_id != user_id:
                continue
            if wanted is not None and order.status not in wanted:
                continue
            if food_item_id is not None and not any(i.food_item_id == food_item_id for i in order.items):
                continue
            orders.append(order)
        return orders


_store: MemoryStore | None = None


def get_store() -> MemoryStore:
    """Return the process-wide store, creating it on first call."""
    global _store
    if _store is None:
        _store = MemoryStore()
    return _store
