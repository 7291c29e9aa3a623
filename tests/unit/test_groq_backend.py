"""Unit tests for the Groq request limiter."""

import asyncio
import time

import pytest

from helpdesk.llm.backends.groq import RateLimiter


class TestRateLimiter:

    @pytest.mark.unit
    def test_survives_successive_event_loops(self):
        limiter = RateLimiter(per_minute=6000)
        stamps: list[float] = []

        async def burst():
            async def one():
                await limiter.wait()
                stamps.append(time.monotonic())

            await asyncio.gather(*(one() for _ in range(3)))

        asyncio.run(burst())
        asyncio.run(burst())
        assert len(stamps) == 6

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_requests_are_spaced(self):
        limiter = RateLimiter(per_minute=1200)
        stamps: list[float] = []

        async def one():
            await limiter.wait()
            stamps.append(time.monotonic())

        await asyncio.gather(*(one() for _ in range(4)))
        gaps = [b - a for a, b in zip(stamps, stamps[1:])]
        assert all(gap >= limiter.min_interval * 0.9 for gap in gaps)
