"""
支付会话控制器

负责一次支付尝试的宿主侧编排：打开支付页、启动引擎、
监视导航与页面消息、检测完成并写入交易历史。

原则:
- 不包含任何 UI 代码
- 通过回调与 UI 层通信
- 宿主回调（导航请求/导航状态/页面消息）是普通方法，可独立测试

线程模型:
- 打开线程: 开标签页、安装导航守卫、加载支付页，然后启动下面两个线程
- 引擎线程: 驱动模式下跑 asyncio 事件循环；注入模式下只负责注入脚本
- 监视线程: 轮询标签页 URL 和页面发件箱
- CDP 事件线程: 导航守卫回调 decide_navigation
这些线程都绑定本次尝试的代际，取消或开始新尝试后自行退出。
"""

import threading
import time
from typing import Any, Callable, Optional

from ghostpay.config import EngineSettings, BrowserConfig, get_engine_settings, browser_config
from ghostpay.domain.entities import CardRecord, FillContext, FillReport, TransactionRecord
from ghostpay.domain.interfaces import ICardVault, IUrlDispatcher
from ghostpay.core.generation import GenerationGuard
from ghostpay.core.diagnostics import DiagnosticsChannel, DiagnosticsReceiver, NAVIGATE_KIND
from ghostpay.core.navigation_policy import NavigationPolicy
from ghostpay.core.completion_monitor import CompletionMonitor
from ghostpay.core.ghost_engine import GhostEngine
from ghostpay.core.script_builder import build_engine_script
from ghostpay.infrastructure.browser import BrowserManager, DrissionDocument, SystemUrlDispatcher
from ghostpay.utils.logger import get_logger


class PaymentSession:
    """
    支付会话

    Args:
        browser_mgr: 浏览器管理器
        vault: 卡包（写入交易历史）
        settings: 引擎配置
        browser_cfg: 浏览器配置（引擎模式）
        dispatcher: 系统 URL 分发器
        log_callback: 日志回调 (message, level)
        notice_callback: 用户提示回调 (message)
        complete_callback: 支付完成回调 (TransactionRecord)
    """

    def __init__(
        self,
        browser_mgr: BrowserManager,
        vault: ICardVault,
        settings: Optional[EngineSettings] = None,
        browser_cfg: Optional[BrowserConfig] = None,
        dispatcher: Optional[IUrlDispatcher] = None,
        log_callback: Optional[Callable[[str, str], None]] = None,
        notice_callback: Optional[Callable[[str], None]] = None,
        complete_callback: Optional[Callable[[TransactionRecord], None]] = None
    ):
        self.browser_mgr = browser_mgr
        self.vault = vault
        self.settings = settings or get_engine_settings()
        self.browser_cfg = browser_cfg or browser_config
        self.logger = get_logger(__name__, ui_callback=log_callback)
        self._notice = notice_callback or (lambda m: self.logger.warning(m))
        self._complete = complete_callback or (lambda r: None)

        self.guard = GenerationGuard()
        self.receiver = DiagnosticsReceiver(ui_callback=log_callback)
        self.policy = NavigationPolicy(
            self.settings.navigation.external_schemes,
            dispatcher or SystemUrlDispatcher(),
            notice_callback=self._notice,
        )
        self.monitor = CompletionMonitor(
            self.settings.navigation.success_keyword,
            on_complete=self._on_complete,
        )

        self.tab: Any = None
        self.context: Optional[FillContext] = None
        self.generation = 0
        self.last_report: Optional[FillReport] = None
        self._last_url = ''
        self._tab_lock = threading.Lock()

    # ==================== 生命周期 ====================

    @property
    def is_active(self) -> bool:
        return self.context is not None and self.guard.is_current(self.generation)

    def start(
        self,
        card: CardRecord,
        amount: str,
        email: Optional[str] = None,
        phone: Optional[str] = None
    ) -> int:
        """
        开始一次支付尝试

        之前的尝试（如果还在）随代际推进自动失效。
        打开标签页和加载支付页在工作线程里完成，调用方（UI 线程）不被阻塞。

        Returns:
            本次尝试的代际

        Raises:
            ValueError: 金额不合法
        """
        context = FillContext.create(card, amount, email=email, phone=phone)
        self._teardown_tab()

        generation = self.guard.advance()
        self.context = context
        self.generation = generation
        self.last_report = None
        self._last_url = ''
        self.monitor.begin(context)

        self.logger.info(f"💳 开始支付: {card.bank_name} {card.masked_number} ₹{context.amount} (gen={generation})")
        self._spawn(self._open_attempt, generation)
        return generation

    def cancel(self) -> None:
        """用户关闭支付视图：使本次尝试失效并销毁页面"""
        if self.context is None:
            return
        self.logger.info("🛑 支付已取消")
        self.guard.invalidate()
        self.monitor.reset()
        self.context = None
        self._teardown_tab()

    def _teardown_tab(self):
        with self._tab_lock:
            tab, self.tab = self.tab, None
        if tab is not None:
            self.browser_mgr.set_page_generation(tab, self.guard.current)
            self.browser_mgr.close_tab(tab)

    def _spawn(self, target: Callable, *args) -> threading.Thread:
        thread = threading.Thread(target=target, args=args, daemon=True)
        thread.start()
        return thread

    def _open_attempt(self, generation: int) -> None:
        """工作线程：开空白页 -> 装导航守卫 -> 加载支付页 -> 启动引擎和监视"""
        try:
            tab = self.browser_mgr.open_payment_tab()
        except Exception as e:
            self.logger.error(f"❌ 打开支付页失败: {e}")
            self._notice(f"❌ 打开支付页失败: {e}")
            return

        with self._tab_lock:
            current = self.guard.is_current(generation)
            if current:
                self.tab = tab
        if not current:
            self.browser_mgr.close_tab(tab)
            return

        if not self.browser_mgr.install_navigation_guard(tab, self.decide_navigation):
            self.logger.warning("⚠️ 导航守卫未生效，外部支付链接可能无法拦截")
        try:
            self.browser_mgr.navigate(tab, self.settings.navigation.target_url)
        except Exception as e:
            self.logger.error(f"❌ 支付页加载失败: {e}")

        if self.guard.is_current(generation):
            self._spawn(self._run_engine, generation)
            self._spawn(self._watch, generation)

    # ==================== 引擎 ====================

    def _run_engine(self, generation: int) -> None:
        context, tab = self.context, self.tab
        if context is None or tab is None or not self.guard.is_current(generation):
            return

        if self.browser_cfg.engine_mode == 'inject':
            script = build_engine_script(context, self.settings, generation)
            self.browser_mgr.run_js(script, tab)
            self.logger.info("💉 引擎脚本已注入")
            return

        engine = GhostEngine(
            DrissionDocument(tab),
            self.settings,
            self.guard,
            DiagnosticsChannel(self.handle_message),
        )
        report = engine.run_blocking(context, generation)
        if report is not None and self.guard.is_current(generation):
            self.last_report = report

    # ==================== 监视 ====================

    def _watch(self, generation: int) -> None:
        """轮询 URL 变化和页面消息，直到代际失效"""
        interval = self.settings.navigation.watch_interval
        while self.guard.is_current(generation):
            self.poll_once(generation)
            time.sleep(interval)

    def poll_once(self, generation: int) -> None:
        tab = self.tab
        if tab is None or not self.guard.is_current(generation):
            return
        try:
            url = self.browser_mgr.current_url(tab)
            if url and url != self._last_url:
                self._last_url = url
                self.handle_navigation_state(url)
            for message in self.browser_mgr.drain_outbox(tab):
                self.handle_message(message)
        except Exception as e:
            # 页面跳转过程中读不到是常态，下一轮再试
            self.logger.debug(f"监视轮询失败: {e}")

    # ==================== 宿主回调 ====================

    def handle_message(self, message: Any) -> None:
        """页面消息：NAVIGATE 走导航策略，其余交给诊断接收端"""
        if isinstance(message, dict) and message.get("type") == NAVIGATE_KIND:
            self.handle_navigation_request(str(message.get("url", "")))
            return
        self.receiver.receive(message)

    def decide_navigation(self, url: str) -> bool:
        """
        导航守卫回调（CDP 事件线程，跳转发生之前）

        本次尝试进行中才走导航策略；外部意图在这里被分发给系统。

        Returns:
            是否允许页面内跳转
        """
        if not self.is_active:
            return True
        return self.policy.should_allow(url)

    def handle_navigation_request(self, url: str) -> bool:
        """
        页面发件箱里的 NAVIGATE（window.open 被垫片挂起）

        放行时由宿主在当前标签页打开。

        Returns:
            是否允许页面内跳转
        """
        allowed = self.policy.should_allow(url)
        tab = self.tab
        if allowed and tab is not None and self.is_active:
            self.browser_mgr.navigate(tab, url)
        return allowed

    def handle_navigation_state(self, url: str) -> Optional[TransactionRecord]:
        """导航状态（页面加载完成后）"""
        self.logger.debug(f"页面地址: {url}")
        return self.monitor.on_navigation_state(url)

    def _on_complete(self, record: TransactionRecord) -> None:
        try:
            self.vault.append_history(record)
        except OSError as e:
            self.logger.error(f"❌ 交易记录保存失败: {e}")

        self.guard.invalidate()
        self.context = None
        self._teardown_tab()
        self._complete(record)
