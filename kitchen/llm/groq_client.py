from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from groq import AsyncGroq

from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

CLASSIFIER_PROMPT = (
    "You are a sentiment classifier for restaurant customer feedback. "
    "Classify the overall sentiment of the comment as positive, neutral or negative "
    "and give your confidence between 0 and 1.\n\n"
    "Return ONLY valid JSON in this exact format:\n"
    '{"label": "positive|neutral|negative", "score": 0.0}'
)

SUMMARIZER_PROMPT = (
    "You summarize a restaurant customer's feedback history for the kitchen. "
    "Focus on recurring likes, dislikes and complaints about specific dishes. "
    "Write plain prose between {min_length} and {max_length} words. "
    "Do not invent feedback that is not in the history."
)

CHEF_SYSTEM_PROMPT = (
    "You are an experienced head chef advising the line cooks. "
    "Give concrete, technical guidance that can be applied to the dishes being cooked right now."
)


class CapabilityUnavailable(RuntimeError):
    """Raised when the Groq integration is disabled or has no API key."""


@dataclass(frozen=True)
class RawSentiment:
    label: str
    score: float


class Classifier(Protocol):
    async def classify(self, text: str) -> RawSentiment: ...


class Summarizer(Protocol):
    async def summarize(self, text: str, max_length: int, min_length: int) -> str: ...


class Generator(Protocol):
    async def generate(self, prompt: str, max_tokens: int, temperature: float) -> str: ...


class _GroqCapability:
    """Shared Groq chat-completion plumbing.

    Implementations raise on every failure (disabled config, API error, bad
    output). Callers decide what to substitute.
    """

    def __init__(self, config: LLMConfig = DEFAULT_LLM_CONFIG) -> None:
        self.config = config
        self._client: AsyncGroq | None = None

    def _get_client(self) -> AsyncGroq:
        if not self.config.enabled or not self.config.api_key:
            raise CapabilityUnavailable("Groq integration is disabled or has no API key")
        if self._client is None:
            # One attempt per call; callers substitute a fallback on failure
            self._client = AsyncGroq(api_key=self.config.api_key, timeout=self.config.timeout, max_retries=0)
        return self._client

    async def _complete(
        self,
        model: str,
        messages: list[dict[str, str]],
        max_tokens: int,
        temperature: float,
        json_mode: bool = False,
    ) -> str:
        client = self._get_client()
        extra: dict[str, Any] = {}
        if json_mode:
            extra["response_format"] = {"type": "json_object"}

        response = await client.chat.completions.create(
            model=model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
            **extra,
        )
        return (response.choices[0].message.content or "").strip()


class GroqClassifier(_GroqCapability):
    async def classify(self, text: str) -> RawSentiment:
        content = await self._complete(
            self.config.classifier_model,
            [
                {"role": "system", "content": CLASSIFIER_PROMPT},
                {"role": "user", "content": text},
            ],
            max_tokens=64,
            temperature=0.0,
            json_mode=True,
        )
        parsed = json.loads(content)
        return RawSentiment(label=str(parsed["label"]), score=float(parsed["score"]))


class GroqSummarizer(_GroqCapability):
    async def summarize(self, text: str, max_length: int, min_length: int) -> str:
        system = SUMMARIZER_PROMPT.format(min_length=min_length, max_length=max_length)
        summary = await self._complete(
            self.config.model,
            [
                {"role": "system", "content": system},
                {"role": "user", "content": text},
            ],
            # Roughly two tokens per word leaves room for the upper bound
            max_tokens=max_length * 2,
            temperature=0.3,
        )
        if not summary:
            raise ValueError("Empty summary returned by Groq")

        words = summary.split()
        if len(words) > max_length:
            logger.debug("Summary exceeded %d words, truncating", max_length)
            summary = " ".join(words[:max_length])
        return summary


class GroqGenerator(_GroqCapability):
    async def generate(self, prompt: str, max_tokens: int, temperature: float) -> str:
        text = await self._complete(
            self.config.model,
            [
                {"role": "system", "content": CHEF_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            max_tokens=max_tokens,
            temperature=temperature,
        )
        if not text:
            raise ValueError("Empty recommendation returned by Groq")
        return text
