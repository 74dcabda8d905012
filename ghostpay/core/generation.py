"""
代际令牌

每次支付尝试分配一个单调递增的代际 ID。所有计划中的恢复点
（定位重试、按键间隔、分框间隔、轮询 tick）醒来后先核对代际，
已被取消或被新尝试取代的运行不再动页面。
"""

import asyncio
import threading

from ghostpay.errors import StaleGenerationError


class GenerationGuard:
    """
    代际守卫

    宿主线程调用 advance()/invalidate()，引擎协程调用 pause()/check()，
    所以计数器用锁保护。
    """

    def __init__(self):
        self._current = 0
        self._lock = threading.Lock()

    @property
    def current(self) -> int:
        with self._lock:
            return self._current

    def advance(self) -> int:
        """开启新一代，旧代全部失效"""
        with self._lock:
            self._current += 1
            return self._current

    def invalidate(self) -> None:
        """取消当前运行（不开启新尝试）"""
        self.advance()

    def is_current(self, generation: int) -> bool:
        return generation == self.current

    def check(self, generation: int) -> None:
        current = self.current
        if generation != current:
            raise StaleGenerationError(generation, current)

    async def pause(self, generation: int, seconds: float) -> None:
        """
        挂起指定秒数，恢复后核对代际

        Raises:
            StaleGenerationError: 恢复时代际已失效
        """
        self.check(generation)
        await asyncio.sleep(max(0.0, seconds))
        self.check(generation)
