from __future__ import annotations

import asyncio

import pytest

from football_datacenter.ingestion.governor import RequestGovernor


def _fake_sleep(record: list[float]):
    async def sleep(seconds: float) -> None:
        record.append(seconds)
        await asyncio.sleep(0)

    return sleep


@pytest.mark.asyncio
async def test_third_call_waits_for_cooldown_after_second_release() -> None:
    governor = RequestGovernor(threshold=2, cooldown_seconds=1.0, progress_interval_s=0.5)
    loop = asyncio.get_running_loop()

    async with governor.slot():
        pass
    async with governor.slot():
        pass
    second_released_at = loop.time()
    assert governor.throttling is True

    await governor.acquire()
    third_acquired_at = loop.time()
    await governor.release()

    assert third_acquired_at - second_released_at >= 0.95
    assert governor.cooldowns_started == 1
    assert governor.call_count == 1


@pytest.mark.asyncio
async def test_cooldown_counts_down_then_resets() -> None:
    sleeps: list[float] = []
    governor = RequestGovernor(
        threshold=3, cooldown_seconds=60.0, progress_interval_s=25.0, _sleep=_fake_sleep(sleeps)
    )

    for _ in range(3):
        async with governor.slot():
            pass

    assert governor.throttling is True
    await governor.wait_idle()

    assert sleeps == [25.0, 25.0, 10.0]
    assert governor.call_count == 0
    assert governor.throttling is False


@pytest.mark.asyncio
async def test_concurrent_callers_never_overrun_the_window() -> None:
    sleeps: list[float] = []
    governor = RequestGovernor(threshold=3, cooldown_seconds=5.0, _sleep=_fake_sleep(sleeps))
    observed: list[tuple[int, int, bool]] = []

    async def call() -> None:
        async with governor.slot():
            observed.append((governor.call_count, governor.in_flight, governor.throttling))
            await asyncio.sleep(0)

    await asyncio.gather(*(call() for _ in range(10)))
    await governor.wait_idle()

    assert len(observed) == 10
    for count, in_flight, throttling in observed:
        assert throttling is False
        assert count + in_flight <= 3
    assert governor.cooldowns_started == 3
    assert governor.call_count == 1


@pytest.mark.asyncio
async def test_failed_call_still_consumes_a_slot() -> None:
    governor = RequestGovernor(threshold=5)

    with pytest.raises(RuntimeError):
        async with governor.slot():
            raise RuntimeError("provider down")

    assert governor.call_count == 1
    assert governor.in_flight == 0


def test_governor_rejects_invalid_configuration() -> None:
    with pytest.raises(ValueError):
        RequestGovernor(threshold=0)
    with pytest.raises(ValueError):
        RequestGovernor(cooldown_seconds=0)
