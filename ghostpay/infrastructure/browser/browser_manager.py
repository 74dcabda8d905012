"""
浏览器管理器 - 基础设施层实现

封装 DrissionPage 的浏览器连接和支付标签页管理。
"""

import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from DrissionPage import ChromiumPage

from ghostpay.errors import BrowserConnectionError
from ghostpay.infrastructure.js import ScriptStore
from ghostpay.utils.port_check import PortChecker
from ghostpay.utils.logger import get_logger


logger = get_logger(__name__)

# Fetch 只暂停文档请求（主框架和 iframe），子资源不受影响
DOCUMENT_REQUEST_PATTERN = {'urlPattern': '*', 'resourceType': 'Document', 'requestStage': 'Request'}

# 这些地址会发出网络请求，交给 Fetch 判定
NETWORK_SCHEMES = ('http:', 'https:', 'about:', 'data:', 'blob:', 'javascript:', 'chrome-error:')

EXTERNAL_DEDUP_SECONDS = 1.0


class BrowserManager:
    """
    浏览器管理器

    职责:
    - 连接浏览器
    - 打开/关闭支付标签页
    - 在 CDP 层拦截导航、收取页面消息
    - 同步页面内的代际
    """

    def __init__(self, addr: str = '127.0.0.1:9222'):
        """
        Args:
            addr: 浏览器调试地址
        """
        self.addr = addr
        self.page: Optional[ChromiumPage] = None
        self._last_external: Tuple[str, float] = ('', 0.0)

    def connect(self) -> ChromiumPage:
        """
        连接浏览器

        Raises:
            BrowserConnectionError: 调试端口未开启
        """
        host, port = PortChecker.split_address(self.addr)
        if not PortChecker.is_port_open(port, host):
            raise BrowserConnectionError(f"无法连接到 {self.addr}。请先打开专用浏览器。")

        self.page = ChromiumPage(addr_or_opts=self.addr)
        return self.page

    def attach(self, page: ChromiumPage) -> None:
        """使用已启动的浏览器（BrowserLauncher 返回的页面对象）"""
        self.page = page

    def is_connected(self) -> bool:
        return self.page is not None

    def _ensure_page(self) -> ChromiumPage:
        if not self.page:
            self.connect()
        return self.page

    # ============================================================
    # 支付标签页
    # ============================================================

    def open_payment_tab(self) -> Any:
        """新开空白标签页，装好导航守卫后再由宿主加载支付页"""
        page = self._ensure_page()
        return page.new_tab()

    def navigate(self, tab: Any, url: str) -> None:
        """由宿主执行页面跳转（加载支付页、放行的 window.open）"""
        tab.get(url)
        logger.info(f"🌐 已打开: {url}")

    def close_tab(self, tab: Any) -> None:
        """关闭支付标签页（页面内的定时器随之销毁）"""
        try:
            tab.close()
        except Exception as e:
            logger.debug(f"关闭标签页失败: {e}")

    def current_url(self, tab: Any) -> str:
        return tab.url or ''

    def run_js(self, script: str, tab: Optional[Any] = None) -> Any:
        """在标签页中执行 JavaScript"""
        target = tab or self.page
        if target:
            return target.run_js(script)
        return None

    # ============================================================
    # 导航守卫
    # ============================================================

    def install_navigation_guard(self, tab: Any, decide: Callable[[str], bool]) -> bool:
        """
        在 CDP 层拦截标签页的所有跳转

        - Fetch 暂停每个 Document 请求（链接、location 赋值、表单提交、iframe），
          decide 放行则继续，否则中止
        - upi:// 等非网络地址不会产生请求，从 Page.frameRequestedNavigation /
          frameScheduledNavigation 事件里拿到后交给 decide（由它分发给系统）
        - window.open 垫片作为新文档初始化脚本注册，消息走发件箱

        Args:
            tab: 支付标签页（须在加载支付页之前安装）
            decide: url -> 是否允许页面内跳转

        Returns:
            是否安装成功
        """
        try:
            driver = tab.driver
            tab.run_cdp('Page.enable')
            tab.add_init_js(ScriptStore.NAVIGATION_SHIM)
            for event in ('Page.frameRequestedNavigation', 'Page.frameScheduledNavigation'):
                driver.set_callback(
                    event, lambda **params: self._on_requested_navigation(params, decide), immediate=True)
            driver.set_callback(
                'Fetch.requestPaused', lambda **params: self._on_request_paused(tab, params, decide), immediate=True)
            tab.run_cdp('Fetch.enable', patterns=[DOCUMENT_REQUEST_PATTERN])
        except Exception as e:
            logger.warning(f"⚠️ 导航守卫安装失败: {e}")
            return False
        return True

    def _on_request_paused(self, tab: Any, params: Dict[str, Any], decide: Callable[[str], bool]) -> None:
        request_id = params.get('requestId')
        url = (params.get('request') or {}).get('url', '')
        try:
            allowed = decide(url)
        except Exception as e:
            logger.warning(f"⚠️ 导航判定异常，放行: {e}")
            allowed = True

        try:
            if allowed:
                tab.run_cdp('Fetch.continueRequest', requestId=request_id)
            else:
                tab.run_cdp('Fetch.failRequest', requestId=request_id, errorReason='BlockedByClient')
        except Exception as e:
            logger.debug(f"请求已失效 {request_id}: {e}")

    def _on_requested_navigation(self, params: Dict[str, Any], decide: Callable[[str], bool]) -> None:
        url = params.get('url') or ''
        if not url or url.lower().startswith(NETWORK_SCHEMES):
            return  # 网络地址由 Fetch 拦截处理

        # 同一次跳转两个事件都会报
        now = time.monotonic()
        last_url, last_at = self._last_external
        if url == last_url and now - last_at < EXTERNAL_DEDUP_SECONDS:
            return
        self._last_external = (url, now)

        try:
            decide(url)
        except Exception as e:
            logger.warning(f"⚠️ 外部跳转处理异常: {e}")

    # ============================================================
    # 页面 <-> 宿主 通道
    # ============================================================

    def drain_outbox(self, tab: Any) -> List[Any]:
        """取走页面发件箱里的全部消息"""
        try:
            messages = tab.run_js(ScriptStore.OUTBOX_DRAIN)
        except Exception as e:
            logger.debug(f"读取页面消息失败: {e}")
            return []
        return messages if isinstance(messages, list) else []

    def set_page_generation(self, tab: Any, generation: int) -> None:
        """同步页面内的代际（注入模式的定时器据此自停）"""
        try:
            tab.run_js(ScriptStore.get_set_generation_js(generation))
        except Exception as e:
            logger.debug(f"写入页面代际失败: {e}")
