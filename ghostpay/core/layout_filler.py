"""
布局感知填充器

状态机:
    SCANNING -> SELECTING_NETWORK -> FILLING_NUMBER -> FILLING_CONTACT -> DONE

没有 FAILED 状态：单个字段失败原地降级，状态机照样走到 DONE。
是否真的支付成功由宿主的完成监视器判断，不归这里管。
"""

from typing import List, Optional

from ghostpay.config import FillerConfig
from ghostpay.domain.entities import FieldRole, FillContext, FillReport, FillState, FormLayout
from ghostpay.domain.interfaces import IElementHandle
from ghostpay.errors import StaleGenerationError
from ghostpay.core.generation import GenerationGuard
from ghostpay.core.diagnostics import DiagnosticsChannel
from ghostpay.core.field_locator import FieldLocator
from ghostpay.core.human_input import HumanInputSimulator
from ghostpay.utils.logger import get_logger


logger = get_logger(__name__)

SPLIT_GROUPS = 4
GROUP_SIZE = 4


def split_card_number(number: str, groups: int = SPLIT_GROUPS, size: int = GROUP_SIZE) -> List[str]:
    """
    卡号切分为连续的定长分组

    16 位卡号得到 4 组 4 位，拼回去与原串一致；
    超出 groups*size 的位数被截掉，不足时最后几组变短或为空。
    """
    return [number[i * size:(i + 1) * size] for i in range(groups)]


def network_token_for(number: str, config: FillerConfig) -> str:
    """首位为 4 是 Visa，否则按另一种卡组织处理"""
    return config.visa_token if number.startswith('4') else config.other_network_token


class LayoutAwareFiller:
    """
    填充状态机

    Args:
        locator: 字段定位器
        simulator: 输入模拟器
        config: 填充配置
        guard: 代际守卫
        channel: 诊断通道
    """

    def __init__(
        self,
        locator: FieldLocator,
        simulator: HumanInputSimulator,
        config: FillerConfig,
        guard: GenerationGuard,
        channel: Optional[DiagnosticsChannel] = None
    ):
        self.locator = locator
        self.simulator = simulator
        self.config = config
        self.guard = guard
        self.channel = channel or DiagnosticsChannel()

    async def run(self, context: FillContext, generation: int) -> FillReport:
        """
        执行一次完整填充

        Raises:
            StaleGenerationError: 运行期间代际失效（由引擎门面吞掉）
        """
        report = FillReport()

        self._enter(report, FillState.SCANNING)
        report.layout = self._classify(generation)

        self._enter(report, FillState.SELECTING_NETWORK)
        await self._select_network(context, report, generation)

        self._enter(report, FillState.FILLING_NUMBER)
        if report.layout is FormLayout.SPLIT_BOXES:
            await self._fill_split_boxes(context.card.number, report, generation)
        else:
            await self._fill_role(FieldRole.CARD_NUMBER, context.card.number, report, generation)

        self._enter(report, FillState.FILLING_CONTACT)
        await self._fill_role(FieldRole.EMAIL, context.email, report, generation)
        await self._fill_role(FieldRole.PHONE, context.phone, report, generation)
        await self._fill_role(FieldRole.AMOUNT, context.amount, report, generation)

        self._enter(report, FillState.DONE)
        summary = f"fill done: {len(report.filled)} filled, {len(report.skipped)} skipped, {len(report.mismatched)} mismatched"
        self.channel.emit(summary)
        if report.is_degraded:
            logger.warning(f"⚠️ 填充降级完成 - 跳过: {report.skipped} 不一致: {report.mismatched}")
        else:
            logger.success(f"填充完成 ({report.layout.value})")
        return report

    def _enter(self, report: FillReport, state: FillState):
        report.enter(state)
        self.channel.emit(f"state -> {state.value}")

    # ==================== 各状态 ====================

    def _classify(self, generation: int) -> FormLayout:
        """布局判定出错时按单输入框处理"""
        self.guard.check(generation)
        try:
            return self.locator.classify_layout()
        except StaleGenerationError:
            raise
        except Exception as e:
            self.channel.emit(f"layout scan failed ({e}), assuming {FormLayout.SINGLE_FIELD.value}")
            logger.warning(f"⚠️ 布局判定异常，按单输入框处理: {e}")
            return FormLayout.SINGLE_FIELD

    async def _select_network(self, context: FillContext, report: FillReport, generation: int):
        token = network_token_for(context.card.number, self.config)
        report.network_token = token
        self.guard.check(generation)

        try:
            radio = self.locator.find_radio_by_label(token)
        except StaleGenerationError:
            raise
        except Exception as e:
            logger.warning(f"⚠️ 查找卡组织单选框异常 [{token}]: {e}")
            radio = None
        if radio is None:
            self.channel.emit(f"no network selector for {token}")
            return
        try:
            radio.click()
            report.network_selected = True
            self.channel.emit(f"network {token} selected")
        except Exception as e:
            logger.warning(f"⚠️ 点击卡组织失败 [{token}]: {e}")

    async def _fill_split_boxes(self, number: str, report: FillReport, generation: int):
        groups = split_card_number(number)
        if len(number) != SPLIT_GROUPS * GROUP_SIZE:
            self.channel.emit(f"card number has {len(number)} digits, split boxes expect {SPLIT_GROUPS * GROUP_SIZE}")

        try:
            boxes = self.locator.split_box_candidates()
        except StaleGenerationError:
            raise
        except Exception as e:
            self.channel.emit(f"split boxes unreadable: {e}")
            boxes = []
        if not boxes:
            report.skipped.append(FieldRole.CARD_NUMBER.value)
            return
        entry, confirm = boxes[:SPLIT_GROUPS], boxes[SPLIT_GROUPS:SPLIT_GROUPS * 2]

        # 录入 4 格 + 确认 4 格，写法相同
        for section, targets in (('entry', entry), ('confirm', confirm)):
            for index, (box, group) in enumerate(zip(targets, groups), start=1):
                label = f"{FieldRole.CARD_NUMBER.value}[{section}{index}]"
                await self._write_box(box, group, label, report, generation)
                await self.guard.pause(generation, self.config.group_delay)

    async def _write_box(self, box: IElementHandle, group: str, label: str, report: FillReport, generation: int):
        try:
            ok = await self.simulator.paste_value(box, group, generation, label=label)
        except StaleGenerationError:
            raise
        except Exception as e:
            logger.warning(f"⚠️ 分框写入异常 [{label}]: {e}")
            ok = False
        (report.filled if ok else report.mismatched).append(label)

    async def _fill_role(self, role: FieldRole, value: str, report: FillReport, generation: int):
        """定位并逐字符输入；缺失或异常只影响本字段"""
        if not value:
            self.channel.emit(f"{role.value} has no value, skipped")
            report.skipped.append(role.value)
            return

        try:
            element = await self.locator.locate(role, generation)
            if element is None:
                report.skipped.append(role.value)
                return
            ok = await self.simulator.type_text(element, value, generation, label=role.value)
        except StaleGenerationError:
            raise
        except Exception as e:
            self.channel.emit(f"{role.value} failed: {e}")
            logger.warning(f"⚠️ 字段填充异常 [{role.value}]: {e}")
            ok = False

        (report.filled if ok else report.mismatched).append(role.value)
