from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from ..llm.groq_client import Generator, Summarizer
from .aggregator import FeedbackAggregator, FeedbackScope
from .config import DEFAULT_ANALYTICS_CONFIG, AnalyticsConfig
from .models import (
    FeedbackSample,
    HistoricalData,
    Priority,
    Recommendation,
    SentimentLabel,
)
from .outcome import attempt
from .scoring import ClassifiedFeedback, average_rating
from .sentiment import SentimentAnalyzer

logger = logging.getLogger(__name__)

FALLBACK_SUMMARY = (
    "Customer has provided mixed feedback across various dishes. "
    "Check individual comments for details."
)
FALLBACK_RECOMMENDATION = (
    "Standard preparation recommended. "
    "Check customer's past feedback for potential preferences."
)

RECOMMENDATION_PROMPT = """\
As a professional chef, analyze this customer's feedback history and current order \
to generate specific cooking recommendations.

CUSTOMER FEEDBACK SUMMARY:
{summary}

CURRENT ORDER ITEMS:
{order_items}

Provide detailed technical suggestions including:
- Seasoning adjustments
- Cooking techniques
- Presentation tips
- Quality control measures
- Any special considerations based on their preferences"""


@dataclass(frozen=True)
class OrderLine:
    name: str
    quantity: int = 1


def compute_priority(avg_rating: float, negative_count: int, total_feedback: int) -> Priority:
    if avg_rating < 2.5 or negative_count > total_feedback * 0.5:
        return Priority.high
    if avg_rating > 4.2 and negative_count == 0:
        return Priority.low
    return Priority.normal


def overall_sentiment(avg_rating: float) -> SentimentLabel:
    if avg_rating >= 3:
        return SentimentLabel.positive
    if avg_rating >= 2:
        return SentimentLabel.neutral
    return SentimentLabel.negative


def build_digest(classified: Sequence[ClassifiedFeedback]) -> str:
    lines = []
    for item in sorted(classified, key=lambda c: c.record.created_at):
        fb = item.record
        result = item.sentiment.value
        lines.append(
            f"On {fb.created_at.date().isoformat()} for {fb.food_item_name or 'Unknown'}: "
            f'Rated {fb.rating}/5 - "{fb.comment}" '
            f"({result.label.value}, {result.score * 100:.1f}% confidence)"
        )
    return "\n".join(lines)


def build_prompt(summary: str, order_lines: Sequence[OrderLine]) -> str:
    order_items = ", ".join(f"{line.quantity}x {line.name}" for line in order_lines) or "(none)"
    return RECOMMENDATION_PROMPT.format(summary=summary, order_items=order_items)


class RecommendationSynthesizer:
    """
    Chef-facing cooking guidance for one customer and their current order.

    Steps:
    - No feedback history: return the standard-recipe default, no model calls.
    - Classify every historical comment.
    - Summarize a chronological digest of the history.
    - Generate guidance from the summary and the ordered items.
    - Derive priority and overall sentiment from ratings and labels.

    Every model call is made once and isolated; a failure swaps in that
    stage's fallback text and is recorded in ``Recommendation.degraded``.
    All calls draw on the analyzer's ``slots``.
    """

    def __init__(
        self,
        aggregator: FeedbackAggregator,
        analyzer: SentimentAnalyzer,
        summarizer: Summarizer,
        generator: Generator,
        config: AnalyticsConfig = DEFAULT_ANALYTICS_CONFIG,
    ) -> None:
        self.aggregator = aggregator
        self.analyzer = analyzer
        self.summarizer = summarizer
        self.generator = generator
        self.config = config

    async def synthesize(self, user_id: str, order_lines: Sequence[OrderLine]) -> Recommendation:
        history = self.aggregator.collect(FeedbackScope.for_user(user_id))
        if not history:
            return Recommendation.no_history()

        degraded: list[str] = []

        outcomes = await self.analyzer.classify_many(fb.comment for fb in history)
        classified = [ClassifiedFeedback(fb, outcome) for fb, outcome in zip(history, outcomes)]
        if any(outcome.degraded for outcome in outcomes):
            degraded.append("sentiment")

        digest = build_digest(classified)
        summary = await attempt(
            "Feedback summarization",
            lambda: self.summarizer.summarize(
                digest,
                max_length=self.config.summary_max_length,
                min_length=self.config.summary_min_length,
            ),
            FALLBACK_SUMMARY,
            timeout=self.config.capability_timeout,
            slots=self.analyzer.slots,
        )
        if summary.degraded:
            degraded.append("summary")

        prompt = build_prompt(summary.value, order_lines)
        guidance = await attempt(
            "Recommendation generation",
            lambda: self.generator.generate(
                prompt,
                max_tokens=self.config.generation_max_tokens,
                temperature=self.config.generation_temperature,
            ),
            FALLBACK_RECOMMENDATION,
            timeout=self.config.capability_timeout,
            slots=self.analyzer.slots,
        )
        if guidance.degraded:
            degraded.append("generation")

        avg = average_rating(history)
        negative = sum(1 for c in classified if c.label == SentimentLabel.negative)
        positive = sum(1 for c in classified if c.label == SentimentLabel.positive)

        # Newest first
        recent = classified[-self.config.sample_count:][::-1]

        logger.debug(
            "Recommendation for user %s: %d records, avg %.2f, degraded=%s",
            user_id, len(history), avg, degraded,
        )
        return Recommendation(
            text=guidance.value.strip(),
            priority=compute_priority(avg, negative, len(history)),
            sentiment=overall_sentiment(avg),
            historical_data=HistoricalData(
                average_rating=round(avg, 1),
                total_feedback=len(history),
                last_feedback_date=history[-1].created_at,
                negative_feedback_count=negative,
                positive_feedback_count=positive,
            ),
            samples=[
                FeedbackSample(
                    food_item=c.record.food_item_name or "Unknown",
                    comment=c.record.comment,
                    rating=c.record.rating,
                    sentiment=c.label,
                    date=c.record.created_at,
                )
                for c in recent
            ],
            degraded=degraded,
        )
