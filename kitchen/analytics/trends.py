from __future__ import annotations

from collections.abc import Sequence
from datetime import timezone

import numpy as np
import pandas as pd

from ..store.models import FeedbackRecord
from .config import DEFAULT_ANALYTICS_CONFIG, AnalyticsConfig
from .models import SentimentDistribution, TrendBucket, TrendPeriod
from .sentiment import SentimentAnalyzer

_PERIOD_FREQ: dict[TrendPeriod, str] = {
    TrendPeriod.day: "D",
    TrendPeriod.week: "W",
    TrendPeriod.month: "M",
    TrendPeriod.year: "Y",
}


class TrendBucketer:
    """
    Group feedback into calendar periods.

    Each bucket's ``average_rating`` and ``count`` cover every record in the
    period. ``sampled_sentiment`` is an approximation: only a random sample of
    at most ``trend_sample_size`` records per bucket is classified, which keeps
    classifier traffic bounded no matter how busy a period was.

    Buckets are ordered oldest first and only the newest ``trend_bucket_limit``
    periods are returned.
    """

    def __init__(
        self,
        analyzer: SentimentAnalyzer,
        config: AnalyticsConfig = DEFAULT_ANALYTICS_CONFIG,
        seed: int | None = None,
    ) -> None:
        self.analyzer = analyzer
        self.config = config
        self._rng = np.random.default_rng(seed)

    async def bucket(
        self,
        records: Sequence[FeedbackRecord],
        period: TrendPeriod | str = TrendPeriod.month,
    ) -> list[TrendBucket]:
        period = TrendPeriod(period)
        records = list(records)
        if not records:
            return []

        frame = pd.DataFrame({
            "created_at": pd.to_datetime([r.created_at for r in records], utc=True),
            "rating": [r.rating for r in records],
            "position": range(len(records)),
        })
        frame["period"] = frame["created_at"].dt.tz_localize(None).dt.to_period(_PERIOD_FREQ[period])

        stats = (
            frame.groupby("period")
            .agg(total=("rating", "size"), average=("rating", "mean"))
            .sort_index()
            .tail(self.config.trend_bucket_limit)
        )

        # Sample per bucket, then classify every sampled comment in one batch
        kept = set(stats.index)
        sampled: list[tuple[pd.Period, int]] = []
        for key, group in frame.groupby("period"):
            if key not in kept:
                continue
            size = min(len(group), self.config.trend_sample_size)
            for position in group.sample(n=size, random_state=self._rng)["position"]:
                sampled.append((key, int(position)))

        outcomes = await self.analyzer.classify_many(records[pos].comment for _, pos in sampled)

        sentiment = {key: SentimentDistribution() for key in stats.index}
        for (key, _), outcome in zip(sampled, outcomes):
            sentiment[key].add(outcome.value.label)

        return [
            TrendBucket(
                period_key=str(row.Index),
                period_start=row.Index.start_time.to_pydatetime().replace(tzinfo=timezone.utc),
                count=int(row.total),
                average_rating=round(float(row.average), 2),
                sampled_sentiment=sentiment[row.Index],
            )
            for row in stats.itertuples()
        ]
