"""
Results of external capability calls.

Every classifier, summarizer and generator call yields either ``Ok`` (the
capability answered) or ``Degraded`` (it failed and a documented default was
substituted). Both expose ``.value`` so aggregation code reads them the same
way, while tests and reports can still tell the two apart.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from contextlib import nullcontext
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def degraded(self) -> bool:
        return False


@dataclass(frozen=True)
class Degraded(Generic[T]):
    value: T
    reason: str

    @property
    def degraded(self) -> bool:
        return True


Outcome = Union[Ok[T], Degraded[T]]


async def attempt(
    label: str,
    call: Callable[[], Awaitable[T]],
    default: T,
    timeout: float,
    slots: asyncio.Semaphore | None = None,
) -> Outcome[T]:
    """Make exactly one bounded call; on any failure return ``Degraded(default)``.

    With ``slots`` the call holds one slot while in flight. The timeout starts
    once a slot is free.
    """
    try:
        async with slots if slots is not None else nullcontext():
            value = await asyncio.wait_for(call(), timeout=timeout)
    except Exception as exc:
        logger.warning("%s failed, using default", label, exc_info=True)
        return Degraded(default, f"{type(exc).__name__}: {exc}")
    return Ok(value)


async def bounded_map(
    func: Callable[[T], Awaitable[R]],
    items: Iterable[T],
    limit: int,
) -> list[R]:
    """Run ``func`` over ``items`` with at most ``limit`` calls in flight.

    Results come back in input order regardless of completion order.
    """
    semaphore = asyncio.Semaphore(max(1, limit))

    async def _run(item: T) -> R:
        async with semaphore:
            return await func(item)

    return list(await asyncio.gather(*(_run(item) for item in items)))
