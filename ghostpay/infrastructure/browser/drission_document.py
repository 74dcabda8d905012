"""
DrissionPage 文档适配器 - 基础设施层实现

把 DrissionPage 的标签页/元素包装成引擎使用的 IDocument / IElementHandle。
读写值和派发事件都通过元素级 JS 完成（this 绑定到元素）。
"""

from typing import Any, Iterator, List, Sequence

from DrissionPage.errors import ContextLostError, ElementLostError

from ghostpay.infrastructure.js import ScriptStore
from ghostpay.utils.logger import get_logger


logger = get_logger(__name__)

# 元素已脱离文档 / 页面已刷新
_LOST_ERRORS = (ElementLostError, ContextLostError)


class DrissionElement:
    """DrissionPage 元素句柄"""

    def __init__(self, ele: Any):
        self._ele = ele

    @property
    def tag(self) -> str:
        return (self._ele.tag or '').lower()

    def attr(self, name: str):
        try:
            return self._ele.attr(name)
        except _LOST_ERRORS:
            return None

    def text(self) -> str:
        try:
            return self._ele.text or ''
        except _LOST_ERRORS:
            return ''

    def label_text(self) -> str:
        try:
            return self._ele.run_js(ScriptStore.LABEL_TEXT) or ''
        except _LOST_ERRORS:
            return ''

    def read_value(self) -> str:
        try:
            value = self._ele.run_js(ScriptStore.READ_VALUE)
        except _LOST_ERRORS:
            return ''
        return '' if value is None else str(value)

    def write_value(self, value: str) -> None:
        try:
            self._ele.run_js(ScriptStore.WRITE_VALUE, value)
        except _LOST_ERRORS:
            pass  # 脱离文档的句柄静默失效，由回读校验发现

    def dispatch_event(self, kind: str, key: str = '') -> None:
        try:
            self._ele.run_js(ScriptStore.DISPATCH_EVENT, kind, key)
        except _LOST_ERRORS:
            pass

    def click(self) -> None:
        self._ele.click()

    def is_visible(self) -> bool:
        try:
            return bool(self._ele.states.is_displayed)
        except _LOST_ERRORS:
            return False

    def is_enabled(self) -> bool:
        try:
            return bool(self._ele.states.is_enabled)
        except _LOST_ERRORS:
            return False

    def is_attached(self) -> bool:
        try:
            return bool(self._ele.states.is_alive) and bool(self._ele.run_js(ScriptStore.IS_ATTACHED))
        except _LOST_ERRORS:
            return False


class DrissionDocument:
    """
    DrissionPage 文档

    先返回主文档的元素，再按顺序递归 iframe（支付表单常嵌在 iframe 里）。

    Args:
        tab: DrissionPage 的 tab 或 frame 对象
        frame_depth: iframe 最大递归深度
    """

    def __init__(self, tab: Any, frame_depth: int = 2):
        self.tab = tab
        self.frame_depth = frame_depth

    def query(self, tag: str) -> List[DrissionElement]:
        results: List[DrissionElement] = []
        for frame_obj in self._frames(self.tab, 0):
            try:
                results.extend(DrissionElement(e) for e in frame_obj.eles(f'tag:{tag}', timeout=0))
            except _LOST_ERRORS:
                continue
        return results

    def find_text_matches(self, marker: str, tags: Sequence[str]) -> List[DrissionElement]:
        """每个文档一次 JS 调用，页面内完成文本匹配、可见性和最内层筛选"""
        results: List[DrissionElement] = []
        for frame_obj in self._frames(self.tab, 0):
            try:
                found = frame_obj.run_js(ScriptStore.TEXT_MATCHES, marker, list(tags))
            except _LOST_ERRORS:
                continue
            results.extend(DrissionElement(e) for e in found or [])
        return results

    def _frames(self, frame_obj: Any, depth: int) -> Iterator[Any]:
        """主文档在前，iframe 按文档顺序深度优先"""
        yield frame_obj
        if depth >= self.frame_depth:
            return

        try:
            frames = frame_obj.eles('tag:iframe', timeout=0)
        except _LOST_ERRORS:
            return
        for frame_ele in frames:
            try:
                child = frame_obj.get_frame(frame_ele)
            except Exception as e:
                logger.debug(f"跳过无法进入的 iframe: {e}")
                continue
            if child:
                yield from self._frames(child, depth + 1)
