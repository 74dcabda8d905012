"""
代际令牌单元测试
"""

import asyncio
import pytest

from ghostpay.core.generation import GenerationGuard
from ghostpay.errors import StaleGenerationError


class TestGenerationGuard:

    def test_advance_is_monotonic(self, guard):
        first = guard.advance()
        second = guard.advance()

        assert second == first + 1
        assert guard.is_current(second)
        assert not guard.is_current(first)

    def test_invalidate_makes_current_stale(self, guard):
        gen = guard.advance()
        guard.invalidate()

        with pytest.raises(StaleGenerationError) as exc:
            guard.check(gen)
        assert exc.value.generation == gen
        assert exc.value.current == gen + 1

    def test_pause_returns_when_current(self, guard):
        gen = guard.advance()

        asyncio.run(guard.pause(gen, 0))

    def test_pause_raises_when_invalidated_while_waiting(self, guard):
        gen = guard.advance()

        async def scenario():
            waiter = asyncio.ensure_future(guard.pause(gen, 0.01))
            await asyncio.sleep(0)
            guard.invalidate()
            await waiter

        with pytest.raises(StaleGenerationError):
            asyncio.run(scenario())

    def test_negative_pause_is_clamped(self, guard):
        gen = guard.advance()

        asyncio.run(guard.pause(gen, -1))
