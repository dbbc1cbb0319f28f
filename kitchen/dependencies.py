from __future__ import annotations

from fastapi import Depends

from .analytics.aggregator import FeedbackAggregator
from .analytics.config import DEFAULT_ANALYTICS_CONFIG, AnalyticsConfig
from .analytics.reports import SatisfactionReports
from .analytics.scoring import SatisfactionScorer
from .analytics.sentiment import SentimentAnalyzer
from .analytics.synthesizer import RecommendationSynthesizer
from .analytics.trends import TrendBucketer
from .llm.groq_client import (
    Classifier,
    Generator,
    GroqClassifier,
    GroqGenerator,
    GroqSummarizer,
    Summarizer,
)
from .store.memory import MemoryStore, get_store

_classifier = GroqClassifier()
_summarizer = GroqSummarizer()
_generator = GroqGenerator()


def get_analytics_config() -> AnalyticsConfig:
    return DEFAULT_ANALYTICS_CONFIG


def get_classifier() -> Classifier:
    return _classifier


def get_summarizer() -> Summarizer:
    return _summarizer


def get_generator() -> Generator:
    return _generator


def get_analyzer(
    classifier: Classifier = Depends(get_classifier),
    config: AnalyticsConfig = Depends(get_analytics_config),
) -> SentimentAnalyzer:
    return SentimentAnalyzer(classifier, config)


def get_reports(
    store: MemoryStore = Depends(get_store),
    analyzer: SentimentAnalyzer = Depends(get_analyzer),
    config: AnalyticsConfig = Depends(get_analytics_config),
) -> SatisfactionReports:
    return SatisfactionReports(
        store,
        SatisfactionScorer(analyzer, config),
        TrendBucketer(analyzer, config),
    )


def get_synthesizer(
    store: MemoryStore = Depends(get_store),
    analyzer: SentimentAnalyzer = Depends(get_analyzer),
    summarizer: Summarizer = Depends(get_summarizer),
    generator: Generator = Depends(get_generator),
    config: AnalyticsConfig = Depends(get_analytics_config),
) -> RecommendationSynthesizer:
    return RecommendationSynthesizer(FeedbackAggregator(store), analyzer, summarizer, generator, config)
