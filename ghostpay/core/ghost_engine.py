"""
Ghost 自动化引擎（驱动模式门面）

把定位器、输入模拟器、填充状态机和备用路径轮询器组装起来，
在单个 asyncio 事件循环里协作执行：
- 填充状态机顺序写字段，一个字段的所有等待结束后才开始下一个
- 轮询器与之并发，但同一时刻只有一方在动文档
- 代际失效后所有挂起的恢复点都变成空操作

使用示例:
    engine = GhostEngine(document, settings, guard, channel)
    report = asyncio.run(engine.run(context, generation))
"""

import asyncio
from typing import Optional

from ghostpay.config import EngineSettings
from ghostpay.domain.entities import FillContext, FillReport
from ghostpay.domain.interfaces import IDocument
from ghostpay.errors import StaleGenerationError
from ghostpay.core.generation import GenerationGuard
from ghostpay.core.diagnostics import DiagnosticsChannel
from ghostpay.core.field_locator import FieldLocator
from ghostpay.core.human_input import HumanInputSimulator
from ghostpay.core.layout_filler import LayoutAwareFiller
from ghostpay.core.alternate_poller import AlternatePathPoller
from ghostpay.utils.logger import get_logger


logger = get_logger(__name__)


class GhostEngine:
    """
    页面侧自动化引擎

    Args:
        document: 页面文档
        settings: 引擎配置
        guard: 代际守卫（与宿主共享）
        channel: 诊断通道
    """

    def __init__(
        self,
        document: IDocument,
        settings: EngineSettings,
        guard: GenerationGuard,
        channel: Optional[DiagnosticsChannel] = None
    ):
        self.settings = settings
        self.guard = guard
        self.channel = channel or DiagnosticsChannel()

        self.locator = FieldLocator(document, settings.locator, guard, self.channel)
        self.simulator = HumanInputSimulator(settings.simulator, guard, self.channel)
        self.filler = LayoutAwareFiller(self.locator, self.simulator, settings.filler, guard, self.channel)
        self.poller = AlternatePathPoller(self.locator, settings.poller, guard, self.channel)

    async def run(self, context: FillContext, generation: int, keep_polling: bool = True) -> Optional[FillReport]:
        """
        执行一次支付尝试的页面侧自动化

        Args:
            context: 填充上下文
            generation: 本次尝试的代际
            keep_polling: 填充结束后是否继续轮询备用路径直到代际失效

        Returns:
            填充报告；代际中途失效或引擎意外出错时返回 None
        """
        self.channel.emit(f"engine start (gen={generation}, card={context.card.masked_number})")
        poll_task = asyncio.ensure_future(self.poller.run(generation))

        report: Optional[FillReport] = None
        try:
            report = await self.filler.run(context, generation)
        except StaleGenerationError:
            logger.debug(f"填充被取消 (gen={generation})")
        except Exception as e:
            # 引擎没有致命错误类：记下来，剩下的交给用户手动完成
            self.channel.emit(f"engine error: {e}")
            logger.error(f"❌ 引擎异常: {e}")

        if keep_polling and report is not None:
            await poll_task
        else:
            poll_task.cancel()
            try:
                await poll_task
            except asyncio.CancelledError:
                pass
        return report

    def run_blocking(self, context: FillContext, generation: int) -> Optional[FillReport]:
        """在当前线程新建事件循环执行（宿主工作线程用）"""
        return asyncio.run(self.run(context, generation))
