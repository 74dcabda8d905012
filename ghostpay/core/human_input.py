"""
人工输入模拟器

直接赋值不会触发目标页自己的校验监听，所以逐字符模拟按键。

事件链:
1. focus
2. 清空 -> input
3. 每个字符: 追加 -> keydown -> keypress -> input -> keyup -> change
   字符之间随机等待 50-100ms
4. blur
5. 回读校验（页面重渲染会让旧句柄脱离文档，事件静默失效）
"""

import random
from typing import Optional

from ghostpay.config import SimulatorConfig
from ghostpay.domain.interfaces import IElementHandle
from ghostpay.core.generation import GenerationGuard
from ghostpay.core.diagnostics import DiagnosticsChannel
from ghostpay.utils.logger import get_logger


logger = get_logger(__name__)

KEY_EVENTS = ('keydown', 'keypress', 'input', 'keyup', 'change')


class HumanInputSimulator:
    """
    按键模拟

    重复调用是幂等的：每次都先清空再重打，最终值不变。
    """

    def __init__(
        self,
        config: SimulatorConfig,
        guard: GenerationGuard,
        channel: Optional[DiagnosticsChannel] = None,
        rng: Optional[random.Random] = None
    ):
        self.config = config
        self.guard = guard
        self.channel = channel or DiagnosticsChannel()
        self.rng = rng or random.Random()

    def _keystroke_delay(self) -> float:
        low = self.config.keystroke_delay_min
        high = max(low, self.config.keystroke_delay_max)
        return self.rng.uniform(low, high)

    async def type_text(self, element: IElementHandle, value: str, generation: int, label: str = '') -> bool:
        """
        逐字符输入

        Args:
            element: 目标元素
            value: 目标值
            generation: 本次运行代际
            label: 字段名（日志用）

        Returns:
            回读值与目标一致返回 True

        Raises:
            StaleGenerationError: 等待期间本次运行已失效
        """
        name = label or element.attr('name') or element.tag
        self.guard.check(generation)

        element.dispatch_event('focus')
        element.write_value('')
        element.dispatch_event('input')

        for index, char in enumerate(value):
            element.write_value(element.read_value() + char)
            for kind in KEY_EVENTS:
                element.dispatch_event(kind, key=char)
            if index < len(value) - 1:
                await self.guard.pause(generation, self._keystroke_delay())

        element.dispatch_event('blur')
        return self._verify(element, value, name)

    async def paste_value(self, element: IElementHandle, value: str, generation: int, label: str = '') -> bool:
        """
        一次性写入（分框卡号用）

        focus -> 写值 -> input -> change -> blur，不逐字符。
        """
        name = label or element.attr('name') or element.tag
        self.guard.check(generation)

        element.dispatch_event('focus')
        element.write_value(value)
        element.dispatch_event('input')
        element.dispatch_event('change')
        element.dispatch_event('blur')
        return self._verify(element, value, name)

    def _verify(self, element: IElementHandle, expected: str, name: str) -> bool:
        """写入后回读，不一致时记录而不是假设成功"""
        try:
            attached = element.is_attached()
            actual = element.read_value() if attached else None
        except Exception as e:
            attached, actual = False, None
            logger.debug(f"回读失败 [{name}]: {e}")

        if attached and actual == expected:
            self.channel.emit(f"typed {name} ({len(expected)} chars)")
            return True

        reason = 'element detached' if not attached else f'expected {len(expected)} chars, got {len(actual or "")}'
        self.channel.emit(f"value mismatch on {name}: {reason}")
        logger.warning(f"⚠️ 字段值不一致 [{name}]: {reason}")
        return False
