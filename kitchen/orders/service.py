from __future__ import annotations

from datetime import datetime

from ..analytics.aggregator import validate_identifier
from ..analytics.models import Recommendation
from ..analytics.outcome import bounded_map
from ..analytics.synthesizer import OrderLine, RecommendationSynthesizer
from ..store.base import FoodItemNotFound
from ..store.memory import MemoryStore, new_id
from ..store.models import Order, OrderItem, OrderStatus, utcnow
from .models import ChefOrder, FormattedItem, OrderCreate

CHEF_QUEUE_STATUSES = (OrderStatus.pending, OrderStatus.preparing)
_RECENT_LIMIT = 10


class InvalidOrderStatus(ValueError):
    pass


def create_order(store: MemoryStore, payload: OrderCreate) -> Order:
    if payload.user_id is not None:
        validate_identifier(payload.user_id, "customer")

    items: list[OrderItem] = []
    for line in payload.items:
        food_item = store.get_food_item(line.food_item_id)
        if food_item is None:
            raise FoodItemNotFound(line.food_item_id)
        items.append(OrderItem(
            food_item_id=food_item.id,
            quantity=line.quantity,
            price=food_item.price,
            special_instructions=line.special_instructions,
        ))

    order = Order(
        id=new_id(),
        user_id=payload.user_id,
        items=items,
        total_amount=round(sum(i.price * i.quantity for i in items), 2),
    )
    return store.add_order(order)


def recent_orders(store: MemoryStore, limit: int = _RECENT_LIMIT) -> list[Order]:
    return sorted(store.query_orders(), key=lambda o: o.created_at, reverse=True)[:limit]


def update_status(store: MemoryStore, order_id: str, status: str) -> Order:
    try:
        new_status = OrderStatus(status)
    except ValueError:
        raise InvalidOrderStatus("Invalid status value") from None
    return store.update_order_status(order_id, new_status)


def order_number(order_id: str) -> str:
    return f"#{order_id[18:24].upper()}"


def format_elapsed(created_at: datetime, now: datetime) -> str:
    minutes = max(0, int((now - created_at).total_seconds() // 60))
    return f"{minutes // 60}h {minutes % 60}m ago"


def to_chef_order(store: MemoryStore, order: Order, now: datetime) -> ChefOrder:
    customer = store.get_customer(order.user_id) if order.user_id else None

    formatted = []
    for item in order.items:
        food_item = store.get_food_item(item.food_item_id)
        formatted.append(FormattedItem(
            name=food_item.name if food_item else "Unknown",
            quantity=item.quantity,
            price=item.price,
            preparation_time=food_item.preparation_time if food_item else 15,
            special_instructions=item.special_instructions,
        ))

    return ChefOrder(
        **order.model_dump(),
        order_number=order_number(order.id),
        order_time=format_elapsed(order.created_at, now),
        status_label=order.status.value.upper(),
        customer_name=customer.full_name if customer else "Guest",
        formatted_items=formatted,
    )


async def chef_queue(
    store: MemoryStore,
    synthesizer: RecommendationSynthesizer | None = None,
    now: datetime | None = None,
) -> list[ChefOrder]:
    """Pending and preparing orders, oldest first.

    With a synthesizer each order gets an ``analysis``; guest orders receive
    the guest default without touching the models. Model calls across all
    orders share the synthesizer's analyzer slots.
    """
    now = now or utcnow()
    orders = sorted(store.query_orders(statuses=CHEF_QUEUE_STATUSES), key=lambda o: o.created_at)
    views = [to_chef_order(store, order, now) for order in orders]

    if synthesizer is None:
        return views

    async def _analyze(view: ChefOrder) -> Recommendation:
        if view.user_id is None:
            return Recommendation.guest()
        lines = [OrderLine(name=item.name, quantity=item.quantity) for item in view.formatted_items]
        return await synthesizer.synthesize(view.user_id, lines)

    analyses = await bounded_map(_analyze, views, synthesizer.config.max_concurrency)
    for view, analysis in zip(views, analyses):
        view.analysis = analysis
    return views
