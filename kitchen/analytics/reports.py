from __future__ import annotations

import re
from collections import Counter
from collections.abc import Sequence
from datetime import datetime, timedelta

from ..store.base import FeedbackStore, FoodItemNotFound
from ..store.models import FeedbackRecord, Order, OrderStatus, utcnow
from .aggregator import FeedbackAggregator, FeedbackScope, InvalidScopeIdentifier, validate_identifier
from .models import (
    CustomerFeedbackEntry,
    CustomerMetrics,
    CustomerSatisfaction,
    DashboardMetrics,
    FoodItemMetrics,
    FoodItemSatisfaction,
    IssuesReported,
    ItemFeedbackEntry,
    NoFeedback,
    OrderHistoryEntry,
    RecentFeedbackEntry,
    RecentOrderEntry,
    SatisfactionDashboard,
    SatisfactionProfile,
    SatisfactionTrend,
    TrendingItem,
    TrendPeriod,
)
from .scoring import ClassifiedFeedback, SatisfactionScorer
from .trends import TrendBucketer

ISSUE_RE = re.compile(r"(bad|poor|terrible|horrible|awful|disappointing|issue|problem)", re.IGNORECASE)

_RECENT_FEEDBACK_LIMIT = 5
_ORDER_HISTORY_LIMIT = 10
_TRENDING_LIMIT = 5
_TRENDING_WINDOW = timedelta(days=7)


def count_reported_issues(records: Sequence[FeedbackRecord]) -> IssuesReported:
    """Feedback rated below 3 or mentioning a complaint keyword."""
    issues = [r for r in records if r.rating < 3 or ISSUE_RE.search(r.comment or "")]
    return IssuesReported(count=len(issues), unresolved=sum(1 for r in issues if not r.resolved))


def _newest_first(classified: Sequence[ClassifiedFeedback], limit: int) -> list[ClassifiedFeedback]:
    return sorted(classified, key=lambda c: c.record.created_at, reverse=True)[:limit]


def _orders_newest_first(orders: Sequence[Order], limit: int | None = None) -> list[Order]:
    ordered = sorted(orders, key=lambda o: o.created_at, reverse=True)
    return ordered[:limit] if limit is not None else ordered


class SatisfactionReports:
    """Dashboard, trend and per-entity satisfaction reports over a store."""

    def __init__(self, store: FeedbackStore, scorer: SatisfactionScorer, bucketer: TrendBucketer) -> None:
        self.store = store
        self.aggregator = FeedbackAggregator(store)
        self.scorer = scorer
        self.bucketer = bucketer

    async def _score(self, records: Sequence[FeedbackRecord], scope_id: str) -> tuple[SatisfactionProfile, list[ClassifiedFeedback]]:
        if not records:
            return SatisfactionProfile.empty(scope_id), []
        return await self.scorer.score_detailed(records, scope_id)

    def _customer_name(self, user_id: str | None, first_name_only: bool = False) -> str:
        customer = self.store.get_customer(user_id) if user_id else None
        if customer is None:
            return "Anonymous"
        return customer.first_name if first_name_only else customer.full_name

    def _item_name(self, food_item_id: str) -> str:
        item = self.store.get_food_item(food_item_id)
        return item.name if item is not None else "Unknown"

    # ── Global dashboard ─────────────────────────────────────────────────

    def trending_items(self, now: datetime | None = None) -> list[TrendingItem]:
        since = (now or utcnow()) - _TRENDING_WINDOW
        orders = self.store.query_orders()

        items = []
        for food_item in self.store.list_food_items():
            containing = [o for o in orders if any(i.food_item_id == food_item.id for i in o.items)]
            items.append(TrendingItem(
                id=food_item.id,
                name=food_item.name,
                total_orders=len(containing),
                recent_orders=sum(1 for o in containing if o.created_at >= since),
                rating=food_item.rating,
            ))

        items.sort(key=lambda t: (t.recent_orders, t.rating or 0.0), reverse=True)
        return items[:_TRENDING_LIMIT]

    async def dashboard(self) -> SatisfactionDashboard:
        scope = FeedbackScope.everything()
        records = self.aggregator.collect(scope)
        profile, classified = await self._score(records, scope.key)

        orders = self.store.query_orders()
        completed = Counter(o.user_id for o in orders if o.status == OrderStatus.completed and o.user_id)

        metrics = DashboardMetrics(
            total_customers=self.store.count_customers(),
            active_customers=len({o.user_id for o in orders if o.user_id}),
            repeat_customers=sum(1 for count in completed.values() if count > 1),
            total_reviews=profile.total_feedback,
            average_rating=profile.average_rating,
            sentiment_distribution=profile.sentiment_distribution,
            satisfaction_score=profile.satisfaction_score,
            trending_items=self.trending_items(),
            issues_reported=count_reported_issues(records),
        )
        recent = [
            RecentFeedbackEntry(
                id=c.record.id,
                food_item=c.record.food_item_name or "Unknown",
                user=self._customer_name(c.record.user_id, first_name_only=True),
                rating=c.record.rating,
                comment=c.record.comment,
                sentiment=c.label,
                date=c.record.created_at,
                replied=bool(c.record.reply),
                reply=c.record.reply,
            )
            for c in _newest_first(classified, _RECENT_FEEDBACK_LIMIT)
        ]
        return SatisfactionDashboard(metrics=metrics, recent_feedback=recent)

    async def trend(self, period: TrendPeriod = TrendPeriod.month) -> SatisfactionTrend:
        records = self.aggregator.collect(FeedbackScope.everything())
        buckets = await self.bucketer.bucket(records, period)
        return SatisfactionTrend(period=period, data=buckets)

    # ── Per-entity profiles ──────────────────────────────────────────────

    async def customer(self, customer_id: str) -> CustomerSatisfaction | NoFeedback:
        scope = FeedbackScope.for_user(customer_id)
        records = self.aggregator.collect(scope)
        if not records:
            return NoFeedback(message="No feedback found for this customer", customer_id=customer_id)

        profile, classified = await self._score(records, scope.key)

        completed = _orders_newest_first(
            self.store.query_orders(user_id=customer_id, statuses=[OrderStatus.completed]),
            _ORDER_HISTORY_LIMIT,
        )
        customer = self.store.get_customer(customer_id)

        return CustomerSatisfaction(
            customer_id=customer_id,
            customer_name=customer.full_name if customer else "Unknown",
            metrics=CustomerMetrics(
                **profile.model_dump(),
                last_order_date=completed[0].created_at if completed else None,
                total_orders=len(self.store.query_orders(user_id=customer_id)),
            ),
            recent_feedback=[
                CustomerFeedbackEntry(
                    food_item=c.record.food_item_name or "Unknown",
                    rating=c.record.rating,
                    comment=c.record.comment,
                    sentiment=c.label,
                    date=c.record.created_at,
                )
                for c in _newest_first(classified, _RECENT_FEEDBACK_LIMIT)
            ],
            order_history=[
                OrderHistoryEntry(
                    order_id=order.id,
                    date=order.created_at,
                    items=[self._item_name(i.food_item_id) for i in order.items],
                    total=order.total_amount,
                )
                for order in completed
            ],
        )

    async def food_item(self, food_item_id: str) -> FoodItemSatisfaction | NoFeedback:
        validate_identifier(food_item_id, "food item")
        item = self.store.get_food_item(food_item_id)
        if item is None:
            raise FoodItemNotFound(food_item_id)

        scope = FeedbackScope.for_item(food_item_id)
        records = self.aggregator.collect(scope)
        if not records:
            return NoFeedback(
                message="No feedback found for this item",
                food_item_id=food_item_id,
                food_item_name=item.name,
            )

        profile, classified = await self._score(records, scope.key)
        orders = _orders_newest_first(self.store.query_orders(food_item_id=food_item_id))

        recent_orders = []
        for order in orders:
            if order.user_id is None:
                continue
            quantity = sum(i.quantity for i in order.items if i.food_item_id == food_item_id)
            recent_orders.append(RecentOrderEntry(
                order_id=order.id,
                date=order.created_at,
                customer=self._customer_name(order.user_id),
                quantity=quantity,
            ))
            if len(recent_orders) == _ORDER_HISTORY_LIMIT:
                break

        return FoodItemSatisfaction(
            food_item_id=food_item_id,
            food_item_name=item.name,
            metrics=FoodItemMetrics(
                **profile.model_dump(),
                last_ordered=orders[0].created_at if orders else None,
                total_orders=len(orders),
            ),
            recent_feedback=[
                ItemFeedbackEntry(
                    customer=self._customer_name(c.record.user_id),
                    rating=c.record.rating,
                    comment=c.record.comment,
                    sentiment=c.label,
                    date=c.record.created_at,
                    reply=c.record.reply,
                )
                for c in _newest_first(classified, _RECENT_FEEDBACK_LIMIT)
            ],
            recent_orders=recent_orders,
        )

    # ── Replies ──────────────────────────────────────────────────────────

    def reply(self, food_item_id: str, feedback_id: str, reply: str) -> FeedbackRecord:
        try:
            validate_identifier(food_item_id, "food item")
            validate_identifier(feedback_id, "feedback")
        except InvalidScopeIdentifier:
            raise InvalidScopeIdentifier("Invalid food item or feedback ID") from None
        return self.store.attach_reply(food_item_id, feedback_id, reply)
