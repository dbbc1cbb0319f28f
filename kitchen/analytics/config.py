from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AnalyticsConfig:
    rating_weight: float = 0.6
    sentiment_weight: float = 0.4
    # Round the blended score to whole percents before scaling, matching
    # the legacy dashboard figures. True keeps one decimal of precision.
    precise_score: bool = False

    max_concurrency: int = 8
    classify_timeout: float = 5.0  # seconds per classification call
    capability_timeout: float = 20.0  # seconds per summary / generation call

    trend_bucket_limit: int = 30
    trend_sample_size: int = 10

    summary_max_length: int = 150
    summary_min_length: int = 50
    generation_max_tokens: int = 500
    generation_temperature: float = 0.7
    sample_count: int = 3


DEFAULT_ANALYTICS_CONFIG = AnalyticsConfig()
