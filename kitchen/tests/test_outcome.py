from __future__ import annotations

import asyncio

from kitchen.analytics.outcome import Degraded, Ok, attempt, bounded_map


async def _value():
    return 42


async def _boom():
    raise ValueError("malformed response")


async def _slow():
    await asyncio.sleep(1)
    return "late"


def test_attempt_returns_ok_on_success():
    result = asyncio.run(attempt("test", _value, default=0, timeout=1.0))

    assert result == Ok(42)
    assert not result.degraded


def test_attempt_degrades_on_exception():
    result = asyncio.run(attempt("test", _boom, default=0, timeout=1.0))

    assert isinstance(result, Degraded)
    assert result.degraded
    assert result.value == 0
    assert "malformed response" in result.reason


def test_attempt_degrades_on_timeout():
    result = asyncio.run(attempt("test", _slow, default="fallback", timeout=0.01))

    assert isinstance(result, Degraded)
    assert result.value == "fallback"


def test_bounded_map_keeps_input_order():
    async def delayed_double(n: int) -> int:
        await asyncio.sleep(0.001 * (5 - n))
        return n * 2

    result = asyncio.run(bounded_map(delayed_double, range(5), limit=3))

    assert result == [0, 2, 4, 6, 8]


def test_bounded_map_caps_concurrency():
    in_flight = 0
    peak = 0

    async def track(_: int) -> None:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.001)
        in_flight -= 1

    asyncio.run(bounded_map(track, range(20), limit=4))

    assert peak <= 4


def test_attempt_holds_a_slot_while_in_flight():
    async def scenario():
        slots = asyncio.Semaphore(1)
        seen = []

        async def call():
            seen.append(slots.locked())
            return "done"

        result = await attempt("test", call, default="", timeout=1.0, slots=slots)
        return result, seen, slots.locked()

    result, seen, locked_after = asyncio.run(scenario())

    assert result == Ok("done")
    assert seen == [True]
    assert locked_after is False


def test_attempt_timeout_starts_after_slot_is_free():
    async def scenario():
        slots = asyncio.Semaphore(1)
        await slots.acquire()
        asyncio.get_running_loop().call_later(0.05, slots.release)
        return await attempt("test", _value, default=0, timeout=0.03, slots=slots)

    assert asyncio.run(scenario()) == Ok(42)
