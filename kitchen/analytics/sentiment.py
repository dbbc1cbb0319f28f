from __future__ import annotations

import asyncio
from collections.abc import Iterable

from ..llm.groq_client import Classifier
from .config import DEFAULT_ANALYTICS_CONFIG, AnalyticsConfig
from .models import NEUTRAL_SENTIMENT, SentimentLabel, SentimentResult
from .outcome import Ok, Outcome, attempt


# Hosted sentiment models disagree on label spelling; the LABEL_n forms
# follow the cardiffnlp twitter-roberta ordering.
_LABEL_ALIASES: dict[str, SentimentLabel] = {
    "positive": SentimentLabel.positive,
    "pos": SentimentLabel.positive,
    "label_2": SentimentLabel.positive,
    "neutral": SentimentLabel.neutral,
    "neu": SentimentLabel.neutral,
    "label_1": SentimentLabel.neutral,
    "negative": SentimentLabel.negative,
    "neg": SentimentLabel.negative,
    "label_0": SentimentLabel.negative,
}


def normalize_label(label: str) -> SentimentLabel:
    try:
        return _LABEL_ALIASES[label.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown sentiment label: {label!r}") from None


class SentimentAnalyzer:
    """Fault-isolating adapter around a sentiment ``Classifier``.

    ``classify`` never raises: blank text is neutral without a call, and any
    classifier failure comes back as ``Degraded`` neutral/0.5.

    ``slots`` caps in-flight external calls at ``max_concurrency`` for
    everything sharing this analyzer, including nested fan-outs such as the
    chef queue classifying several customers' histories at once.
    """

    def __init__(self, classifier: Classifier, config: AnalyticsConfig = DEFAULT_ANALYTICS_CONFIG) -> None:
        self.classifier = classifier
        self.config = config
        self.slots = asyncio.Semaphore(max(1, config.max_concurrency))

    async def classify(self, text: str | None) -> Outcome[SentimentResult]:
        if not text or not text.strip():
            return Ok(NEUTRAL_SENTIMENT)

        return await attempt(
            "Sentiment classification",
            lambda: self._classify(text),
            NEUTRAL_SENTIMENT,
            timeout=self.config.classify_timeout,
            slots=self.slots,
        )

    async def _classify(self, text: str) -> SentimentResult:
        raw = await self.classifier.classify(text)
        # Validation rejects scores outside [0, 1]
        return SentimentResult(label=normalize_label(raw.label), score=raw.score)

    async def classify_many(self, texts: Iterable[str | None]) -> list[Outcome[SentimentResult]]:
        """Classify concurrently, returning outcomes in input order."""
        return list(await asyncio.gather(*(self.classify(text) for text in texts)))
