"""Tests for the manual clock and the cycle ticker."""

import asyncio

import pytest

from delegate.campaign import ManualClock, Ticker


async def _yield_sleep(_interval):
    await asyncio.sleep(0)


async def _wait_until(predicate, attempts=200):
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition never became true")


class TestManualClock:
    def test_advance(self):
        clock = ManualClock()
        start = clock.now()
        assert (clock.advance(90) - start).total_seconds() == 90
        assert (clock.advance(minutes=2) - start).total_seconds() == 210

    def test_cannot_go_backwards(self):
        with pytest.raises(ValueError):
            ManualClock().advance(-1)

    def test_timezone_aware(self):
        assert ManualClock().now().tzinfo is not None


class TestTicker:
    async def test_runs_until_stopped_from_callback(self):
        calls = []
        ticker = None

        async def callback():
            calls.append(len(calls))
            if len(calls) == 3:
                ticker.stop()

        ticker = Ticker(15, callback, sleep=_yield_sleep)
        ticker.start()
        await _wait_until(lambda: not ticker.running)
        assert calls == [0, 1, 2]
        assert ticker.ticks == 3

    async def test_cycles_never_overlap(self):
        in_flight = 0
        peak = 0
        count = 0

        async def callback():
            nonlocal in_flight, peak, count
            in_flight += 1
            peak = max(peak, in_flight)
            for _ in range(3):
                await asyncio.sleep(0)
            in_flight -= 1
            count += 1

        ticker = Ticker(15, callback, sleep=_yield_sleep)
        ticker.start()
        await _wait_until(lambda: count >= 5)
        await ticker.wait_stopped()
        assert peak == 1

    async def test_callback_errors_do_not_stop_the_loop(self):
        calls = 0

        async def callback():
            nonlocal calls
            calls += 1
            raise RuntimeError("cycle blew up")

        ticker = Ticker(15, callback, sleep=_yield_sleep)
        ticker.start()
        await _wait_until(lambda: calls >= 3)
        await ticker.wait_stopped()
        assert not ticker.running

    async def test_stop_before_start_and_twice(self):
        async def callback():
            raise AssertionError("should never run")

        ticker = Ticker(15, callback)
        ticker.stop()
        ticker.stop()
        await ticker.wait_stopped()
        assert not ticker.running

    async def test_stop_while_sleeping_cancels(self):
        async def callback():
            raise AssertionError("should never run")

        ticker = Ticker(3600, callback)
        ticker.start()
        await asyncio.sleep(0)
        await ticker.wait_stopped()
        assert not ticker.running
        assert ticker.ticks == 0

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            Ticker(0, lambda: None)
