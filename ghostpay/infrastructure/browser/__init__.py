"""
浏览器基础设施模块

DrissionPage 连接、支付标签页、文档适配器和系统 URL 分发。
"""

from .browser_manager import BrowserManager
from .drission_document import DrissionDocument, DrissionElement
from .launcher import BrowserLauncher
from .url_dispatcher import SystemUrlDispatcher

__all__ = [
    'BrowserManager',
    'DrissionDocument',
    'DrissionElement',
    'BrowserLauncher',
    'SystemUrlDispatcher',
]
