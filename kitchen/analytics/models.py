from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import Field

from ..store.models import CamelModel, utcnow


class SentimentLabel(str, Enum):
    positive = "positive"
    neutral = "neutral"
    negative = "negative"


class Priority(str, Enum):
    low = "low"
    normal = "normal"
    high = "high"


class TrendPeriod(str, Enum):
    day = "day"
    week = "week"
    month = "month"
    year = "year"


class SentimentResult(CamelModel):
    label: SentimentLabel
    score: float = Field(..., ge=0.0, le=1.0)


NEUTRAL_SENTIMENT = SentimentResult(label=SentimentLabel.neutral, score=0.5)


class SentimentDistribution(CamelModel):
    positive: int = 0
    neutral: int = 0
    negative: int = 0

    @classmethod
    def from_labels(cls, labels) -> SentimentDistribution:
        dist = cls()
        for label in labels:
            dist.add(label)
        return dist

    def add(self, label: SentimentLabel) -> None:
        setattr(self, label.value, getattr(self, label.value) + 1)

    @property
    def total(self) -> int:
        return self.positive + self.neutral + self.negative


class SatisfactionProfile(CamelModel):
    scope_id: str
    total_feedback: int
    average_rating: float = Field(..., ge=0.0, le=5.0)
    sentiment_distribution: SentimentDistribution
    # None when there is no feedback to score
    satisfaction_score: float | None = Field(default=None, ge=0.0, le=100.0)

    @classmethod
    def empty(cls, scope_id: str) -> SatisfactionProfile:
        return cls(
            scope_id=scope_id,
            total_feedback=0,
            average_rating=0.0,
            sentiment_distribution=SentimentDistribution(),
        )


class TrendBucket(CamelModel):
    period_key: str
    period_start: datetime
    count: int
    average_rating: float
    # Counted over a bounded random sample of the bucket, not every record
    sampled_sentiment: SentimentDistribution


class FeedbackSample(CamelModel):
    food_item: str
    comment: str
    rating: int
    sentiment: SentimentLabel
    date: datetime


class HistoricalData(CamelModel):
    average_rating: float
    total_feedback: int
    last_feedback_date: datetime
    negative_feedback_count: int
    positive_feedback_count: int


NO_HISTORY_TEXT = (
    "No previous feedback found from this customer. "
    "Prepare using standard recipes and presentation."
)
GUEST_TEXT = "Guest user - no feedback history available"


class Recommendation(CamelModel):
    text: str
    priority: Priority
    sentiment: SentimentLabel
    historical_data: HistoricalData | None = None
    samples: list[FeedbackSample] = Field(default_factory=list)
    analyzed_at: datetime = Field(default_factory=utcnow)
    # Stages whose content is a fallback ("sentiment", "summary", "generation")
    degraded: list[str] = Field(default_factory=list)

    @classmethod
    def no_history(cls) -> Recommendation:
        return cls(text=NO_HISTORY_TEXT, priority=Priority.normal, sentiment=SentimentLabel.neutral)

    @classmethod
    def guest(cls) -> Recommendation:
        return cls(text=GUEST_TEXT, priority=Priority.normal, sentiment=SentimentLabel.neutral)


# ── Report payloads ──────────────────────────────────────────────────────


class RecentFeedbackEntry(CamelModel):
    id: str
    food_item: str
    user: str
    rating: int
    comment: str
    sentiment: SentimentLabel
    date: datetime
    replied: bool
    reply: str | None = None


class TrendingItem(CamelModel):
    id: str
    name: str
    total_orders: int
    recent_orders: int
    rating: float | None = None


class IssuesReported(CamelModel):
    count: int = 0
    unresolved: int = 0


class DashboardMetrics(CamelModel):
    total_customers: int
    active_customers: int
    repeat_customers: int
    total_reviews: int
    average_rating: float
    sentiment_distribution: SentimentDistribution
    satisfaction_score: float | None = None
    trending_items: list[TrendingItem]
    issues_reported: IssuesReported


class SatisfactionDashboard(CamelModel):
    success: bool = True
    metrics: DashboardMetrics
    recent_feedback: list[RecentFeedbackEntry]
    timestamp: datetime = Field(default_factory=utcnow)


class SatisfactionTrend(CamelModel):
    success: bool = True
    period: TrendPeriod
    data: list[TrendBucket]
    timestamp: datetime = Field(default_factory=utcnow)


class CustomerMetrics(SatisfactionProfile):
    last_order_date: datetime | None = None
    total_orders: int = 0


class CustomerFeedbackEntry(CamelModel):
    food_item: str
    rating: int
    comment: str
    sentiment: SentimentLabel
    date: datetime


class OrderHistoryEntry(CamelModel):
    order_id: str
    date: datetime
    items: list[str]
    total: float


class CustomerSatisfaction(CamelModel):
    success: bool = True
    customer_id: str
    customer_name: str
    has_feedback: bool = True
    metrics: CustomerMetrics
    recent_feedback: list[CustomerFeedbackEntry]
    order_history: list[OrderHistoryEntry]
    timestamp: datetime = Field(default_factory=utcnow)


class FoodItemMetrics(SatisfactionProfile):
    last_ordered: datetime | None = None
    total_orders: int = 0


class ItemFeedbackEntry(CamelModel):
    customer: str
    rating: int
    comment: str
    sentiment: SentimentLabel
    date: datetime
    reply: str | None = None


class RecentOrderEntry(CamelModel):
    order_id: str
    date: datetime
    customer: str
    quantity: int


class FoodItemSatisfaction(CamelModel):
    success: bool = True
    food_item_id: str
    food_item_name: str
    has_feedback: bool = True
    metrics: FoodItemMetrics
    recent_feedback: list[ItemFeedbackEntry]
    recent_orders: list[RecentOrderEntry]
    timestamp: datetime = Field(default_factory=utcnow)


class NoFeedback(CamelModel):
    success: bool = True
    message: str
    has_feedback: bool = False
    customer_id: str | None = None
    food_item_id: str | None = None
    food_item_name: str | None = None
