from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..store.models import FeedbackRecord
from .config import DEFAULT_ANALYTICS_CONFIG, AnalyticsConfig
from .models import SatisfactionProfile, SentimentDistribution, SentimentLabel, SentimentResult
from .outcome import Outcome
from .sentiment import SentimentAnalyzer


@dataclass(frozen=True)
class ClassifiedFeedback:
    record: FeedbackRecord
    sentiment: Outcome[SentimentResult]

    @property
    def label(self) -> SentimentLabel:
        return self.sentiment.value.label


def average_rating(records: Sequence[FeedbackRecord]) -> float:
    return sum(r.rating for r in records) / len(records)


def sentiment_ratio(distribution: SentimentDistribution) -> float:
    """Positive count over the largest single-label count; 0.5 when nothing was counted."""
    top = max(distribution.positive, distribution.neutral, distribution.negative)
    return distribution.positive / top if top > 0 else 0.5


def blend_score(
    avg_rating: float,
    ratio: float,
    config: AnalyticsConfig = DEFAULT_ANALYTICS_CONFIG,
) -> float:
    raw = (avg_rating / 5 * config.rating_weight) + (ratio * config.sentiment_weight)
    if config.precise_score:
        score = round(raw * 100, 1)
    else:
        # Two decimals before scaling; the outer round only strips float noise
        score = round(round(raw, 2) * 100, 2)
    return min(100.0, max(0.0, score))


class SatisfactionScorer:
    def __init__(self, analyzer: SentimentAnalyzer, config: AnalyticsConfig = DEFAULT_ANALYTICS_CONFIG) -> None:
        self.analyzer = analyzer
        self.config = config

    async def classify(self, records: Sequence[FeedbackRecord]) -> list[ClassifiedFeedback]:
        """Classify every comment, pairing each outcome with its own record."""
        outcomes = await self.analyzer.classify_many(r.comment for r in records)
        return [ClassifiedFeedback(record, outcome) for record, outcome in zip(records, outcomes)]

    def profile(self, classified: Sequence[ClassifiedFeedback], scope_id: str) -> SatisfactionProfile:
        if not classified:
            raise ValueError("Cannot score an empty feedback set")

        records = [c.record for c in classified]
        avg = average_rating(records)
        distribution = SentimentDistribution.from_labels(c.label for c in classified)

        return SatisfactionProfile(
            scope_id=scope_id,
            total_feedback=len(records),
            average_rating=round(avg, 1),
            sentiment_distribution=distribution,
            satisfaction_score=blend_score(avg, sentiment_ratio(distribution), self.config),
        )

    async def score_detailed(
        self,
        records: Sequence[FeedbackRecord],
        scope_id: str = "all",
    ) -> tuple[SatisfactionProfile, list[ClassifiedFeedback]]:
        if not records:
            raise ValueError("Cannot score an empty feedback set")
        classified = await self.classify(records)
        return self.profile(classified, scope_id), classified

    async def score(self, records: Sequence[FeedbackRecord], scope_id: str = "all") -> SatisfactionProfile:
        """Blend average rating and sentiment ratio into a 0-100 profile.

        Callers must check for an empty record set first; an empty scope has
        no score (see ``SatisfactionProfile.empty``).
        """
        profile, _ = await self.score_detailed(records, scope_id)
        return profile
