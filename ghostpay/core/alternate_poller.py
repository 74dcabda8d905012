"""
备用路径轮询器

与填充状态机互不阻塞：每隔 2-3 秒扫描一次，
发现文本含标记（如 "UPI"）的可点击元素就点一下。
点击已激活的标签页没有副作用，所以可以无限重复；
代际失效（支付窗口关闭或开始新尝试）时退出。

扫描和点击都是同步的浏览器调用，放到线程池里执行，
事件循环上的逐字符输入节奏不受影响。
"""

import asyncio
import random
from typing import Optional

from ghostpay.config import PollerConfig
from ghostpay.errors import StaleGenerationError
from ghostpay.core.generation import GenerationGuard
from ghostpay.core.diagnostics import DiagnosticsChannel
from ghostpay.core.field_locator import FieldLocator
from ghostpay.utils.logger import get_logger


logger = get_logger(__name__)


class AlternatePathPoller:
    """备用支付方式轮询"""

    def __init__(
        self,
        locator: FieldLocator,
        config: PollerConfig,
        guard: GenerationGuard,
        channel: Optional[DiagnosticsChannel] = None,
        rng: Optional[random.Random] = None
    ):
        self.locator = locator
        self.config = config
        self.guard = guard
        self.channel = channel or DiagnosticsChannel()
        self.rng = rng or random.Random()
        self.clicks = 0
        self.ticks = 0

    def _interval(self) -> float:
        low = self.config.interval_min
        return self.rng.uniform(low, max(low, self.config.interval_max))

    def scan_once(self, generation: Optional[int] = None) -> bool:
        """
        扫描一次，找到就点击

        Args:
            generation: 给定时，扫描结束后代际已失效则不点击
        """
        self.ticks += 1
        try:
            element = self.locator.find_clickable_by_text(self.config.marker, self.config.clickable_tags)
            if element is None:
                return False
            if generation is not None and not self.guard.is_current(generation):
                return False
            element.click()
        except Exception as e:
            logger.debug(f"备用路径点击失败: {e}")
            return False
        self.clicks += 1
        self.channel.emit(f"alternate path '{self.config.marker}' clicked")
        return True

    async def run(self, generation: int) -> None:
        """按间隔轮询，直到代际失效"""
        loop = asyncio.get_running_loop()
        try:
            while self.guard.is_current(generation):
                await self.guard.pause(generation, self._interval())
                await loop.run_in_executor(None, self.scan_once, generation)
        except StaleGenerationError:
            pass
        logger.debug(f"备用路径轮询结束 (gen={generation}, ticks={self.ticks}, clicks={self.clicks})")
