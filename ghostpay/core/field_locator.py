"""
字段定位器

按语义角色（卡号、邮箱、电话、金额、卡组织单选框）在当前文档中找元素。
目标页异步渲染，找不到时按固定间隔重试；超出次数返回 None，
调用方跳过该字段继续执行（降级而不是中止）。

过滤规则: 隐藏或禁用的元素一律不要，它们往往是会吞掉输入的“孪生”字段。
"""

from typing import Dict, List, Optional

from ghostpay.config import LocatorConfig
from ghostpay.domain.entities import FieldRole, FormLayout
from ghostpay.domain.interfaces import IDocument, IElementHandle
from ghostpay.core.generation import GenerationGuard
from ghostpay.core.diagnostics import DiagnosticsChannel
from ghostpay.core.selectors import CandidateSelector, load_role_selectors, split_box_selector
from ghostpay.utils.logger import get_logger


logger = get_logger(__name__)


def is_usable(element: IElementHandle) -> bool:
    """可见且可用"""
    try:
        return element.is_visible() and element.is_enabled()
    except Exception:
        return False


class FieldLocator:
    """
    多策略字段定位器

    Args:
        document: 页面文档
        config: 定位配置
        guard: 代际守卫（重试等待用）
        channel: 诊断通道
        role_selectors: 角色 → 有序候选规则；None 时从配置加载
    """

    def __init__(
        self,
        document: IDocument,
        config: LocatorConfig,
        guard: GenerationGuard,
        channel: Optional[DiagnosticsChannel] = None,
        role_selectors: Optional[Dict[FieldRole, List[CandidateSelector]]] = None
    ):
        self.document = document
        self.config = config
        self.guard = guard
        self.channel = channel or DiagnosticsChannel()
        self.role_selectors = role_selectors or load_role_selectors(config.selectors_file)

    # ==================== 单次扫描 ====================

    def find_once(self, role: FieldRole) -> Optional[IElementHandle]:
        """
        扫描一次文档

        按规则顺序尝试，第一个命中且可见可用的元素胜出。
        """
        rules = self.role_selectors.get(role, [])
        cache: Dict[str, List[IElementHandle]] = {}

        for rule in rules:
            if rule.tag not in cache:
                cache[rule.tag] = self.document.query(rule.tag)
            for element in cache[rule.tag]:
                if rule.matches(element) and is_usable(element):
                    logger.debug(f"找到 [{role.value}] - 使用策略: {rule.description or rule.tag}")
                    return element
        return None

    # ==================== 带重试的定位 ====================

    async def locate(self, role: FieldRole, generation: int) -> Optional[IElementHandle]:
        """
        定位字段（带重试）

        最多扫描 max_attempts 次，两次之间等待 retry_interval。

        Returns:
            元素句柄；超出重试次数返回 None

        Raises:
            StaleGenerationError: 等待期间本次运行已失效
        """
        attempts = max(1, self.config.max_attempts)

        for attempt in range(1, attempts + 1):
            self.guard.check(generation)
            element = self.find_once(role)
            if element is not None:
                if attempt > 1:
                    self.channel.emit(f"{role.value} found on attempt {attempt}")
                return element
            if attempt < attempts:
                await self.guard.pause(generation, self.config.retry_interval)

        self.channel.emit(f"{role.value} not found after {attempts} attempts, skipped")
        logger.warning(f"⚠️ 未找到字段 [{role.value}]（已尝试 {attempts} 次）")
        return None

    # ==================== 布局判定 ====================

    def split_box_candidates(self) -> List[IElementHandle]:
        """文档顺序下所有 maxlength=4、可见、可用的输入框"""
        rule = split_box_selector(self.config.split_box_max_length)
        return [el for el in self.document.query(rule.tag) if rule.matches(el) and is_usable(el)]

    def classify_layout(self) -> FormLayout:
        """分框候选数达到阈值即为 SPLIT_BOXES，每次调用都重新计数"""
        count = len(self.split_box_candidates())
        layout = FormLayout.SPLIT_BOXES if count >= self.config.split_box_threshold else FormLayout.SINGLE_FIELD
        self.channel.emit(f"layout {layout.value} ({count} split-box candidates)")
        return layout

    # ==================== 其他查找 ====================

    def find_radio_by_label(self, token: str) -> Optional[IElementHandle]:
        """第一个关联 label 文本包含 token（不区分大小写）的可用 radio"""
        needle = token.lower()
        for rule in self.role_selectors.get(FieldRole.NETWORK_RADIO, []):
            for element in self.document.query(rule.tag):
                if not rule.matches(element) or not is_usable(element):
                    continue
                if needle in (element.label_text() or '').lower():
                    return element
        return None

    def find_clickable_by_text(self, marker: str, tags) -> Optional[IElementHandle]:
        """
        文本含 marker（区分大小写）的可点击元素

        文本恰好等于 marker 的优先；否则取文本最短的命中，
        避免点到包着整排标签页的外层容器。
        """
        matches = self.document.find_text_matches(marker, tuple(tags))
        if not matches:
            return None

        texts = [(element, (element.text() or '').strip()) for element in matches]
        for element, text in texts:
            if text == marker:
                return element
        return min(texts, key=lambda pair: len(pair[1]))[0]
