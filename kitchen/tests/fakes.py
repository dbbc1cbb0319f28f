"""Stand-in model capabilities for fault injection."""
from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from kitchen.llm.groq_client import RawSentiment

BASE_TIME = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class FakeClassifier:
    """Keyword classifier; comments containing "FAIL" raise."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    async def classify(self, text: str) -> RawSentiment:
        self.calls.append(text)
        lower = text.lower()
        if "fail" in lower:
            raise RuntimeError("classifier unavailable")
        if any(word in lower for word in ("great", "love", "delicious", "perfect")):
            return RawSentiment("positive", 0.9)
        if any(word in lower for word in ("cold", "bland", "awful", "bad", "salty")):
            return RawSentiment("negative", 0.8)
        return RawSentiment("neutral", 0.7)


class FakeSummarizer:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[tuple[str, int, int]] = []

    async def summarize(self, text: str, max_length: int, min_length: int) -> str:
        self.calls.append((text, max_length, min_length))
        if self.fail:
            raise RuntimeError("summarizer rate limited")
        return "Customer enjoys the pasta but found the soup cold."


class FakeGenerator:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.prompts: list[str] = []

    async def generate(self, prompt: str, max_tokens: int, temperature: float) -> str:
        self.prompts.append(prompt)
        if self.fail:
            raise RuntimeError("generator timed out")
        return "  Serve the soup piping hot and go light on salt.  "


class InFlightGauge:
    """Tracks how many fake calls are running at the same time."""

    def __init__(self) -> None:
        self.current = 0
        self.peak = 0

    async def hold(self, seconds: float = 0.01) -> None:
        self.current += 1
        self.peak = max(self.peak, self.current)
        try:
            await asyncio.sleep(seconds)
        finally:
            self.current -= 1


class SlowClassifier(FakeClassifier):
    def __init__(self, gauge: InFlightGauge) -> None:
        super().__init__()
        self.gauge = gauge

    async def classify(self, text: str) -> RawSentiment:
        await self.gauge.hold()
        return await super().classify(text)


class SlowSummarizer(FakeSummarizer):
    def __init__(self, gauge: InFlightGauge) -> None:
        super().__init__()
        self.gauge = gauge

    async def summarize(self, text: str, max_length: int, min_length: int) -> str:
        await self.gauge.hold()
        return await super().summarize(text, max_length, min_length)


class SlowGenerator(FakeGenerator):
    def __init__(self, gauge: InFlightGauge) -> None:
        super().__init__()
        self.gauge = gauge

    async def generate(self, prompt: str, max_tokens: int, temperature: float) -> str:
        await self.gauge.hold()
        return await super().generate(prompt, max_tokens, temperature)
