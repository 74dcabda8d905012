"""
外部 URL 分发接口
"""

from typing import Protocol


class IUrlDispatcher(Protocol):
    """
    系统级 URL 分发

    把 upi:// 等深链交给系统打开对应 App。
    失败（没有注册处理程序）时抛出 UrlDispatchError，不重试。
    """

    def open(self, url: str) -> None:
        ...
