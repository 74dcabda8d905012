"""
页面元素接口

定位器、输入模拟器和轮询器只依赖这两个协议，
真实浏览器（DrissionPage）和测试用的假 DOM 都实现它们。
"""

from typing import Protocol, List, Optional, Sequence


class IElementHandle(Protocol):
    """
    元素句柄

    职责:
    - 读写值
    - 派发事件（focus/blur/keydown/keypress/input/keyup/change）
    - 报告可见性、可用性和是否仍在文档中
    """

    @property
    def tag(self) -> str:
        """小写标签名"""
        ...

    def attr(self, name: str) -> Optional[str]:
        """读取属性，不存在返回 None"""
        ...

    def text(self) -> str:
        """元素文本内容"""
        ...

    def label_text(self) -> str:
        """关联 <label> 的文本（radio 按钮用）"""
        ...

    def read_value(self) -> str:
        ...

    def write_value(self, value: str) -> None:
        ...

    def dispatch_event(self, kind: str, key: str = '') -> None:
        """派发事件；元素已脱离文档时静默无效"""
        ...

    def click(self) -> None:
        ...

    def is_visible(self) -> bool:
        ...

    def is_enabled(self) -> bool:
        ...

    def is_attached(self) -> bool:
        """元素是否仍挂在文档上（页面重渲染后会失效）"""
        ...


class IDocument(Protocol):
    """
    页面文档

    按文档顺序返回指定标签的所有元素。
    """

    def query(self, tag: str) -> List[IElementHandle]:
        ...

    def find_text_matches(self, marker: str, tags: Sequence[str]) -> List[IElementHandle]:
        """
        文本包含 marker 的可见元素（文档顺序）

        真实浏览器里一次往返完成，且只返回最内层的命中（外层容器被排除）。
        """
        ...
