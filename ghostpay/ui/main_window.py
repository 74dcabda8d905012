import customtkinter as ctk
from tkinter import messagebox
import threading

from ghostpay.config import browser_config, ui_config, get_engine_settings
from ghostpay.ui.styles import ThemeColors, UIStyles
from ghostpay.ui.components import GradientFrame, StatusBadge, AnimatedButton, CardTile
from ghostpay.ui.view_state import ViewState
from ghostpay.ui.payment_window import PaymentWindow
from ghostpay.ui.dialogs.add_card_dialog import AddCardDialog
from ghostpay.infrastructure.browser import BrowserManager, BrowserLauncher
from ghostpay.infrastructure.persistence import CardVault
from ghostpay.application.payment_session import PaymentSession
from ghostpay.errors import VaultError
from ghostpay.utils.port_check import PortChecker


class GhostPayApp(ctk.CTk):
    def __init__(self, vault=None):
        super().__init__()

        # --- 窗口基础设置 ---
        self.title("GhostPay - 幽灵支付")
        self.geometry("900x620")
        self.minsize(760, 540)
        self.configure(fg_color=ThemeColors.BG_DARK)

        # 控制器
        self.vault = vault or CardVault()
        self.browser_mgr = BrowserManager(browser_config.address)
        self.session = PaymentSession(
            self.browser_mgr,
            self.vault,
            settings=get_engine_settings(),
            browser_cfg=browser_config,
            log_callback=self._route_log,
            notice_callback=self._show_notice,
            complete_callback=self._on_payment_complete,
        )

        # 状态变量
        self.view_state = ViewState.HOME
        self.payment_window = None

        # 构建界面
        self._create_header()
        self.body = ctk.CTkFrame(self, fg_color="transparent")
        self.body.grid(row=1, column=0, sticky="nsew", padx=25, pady=20)
        self._create_footer()

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=1)

        self.show_view(ViewState.HOME)

    def _create_header(self):
        header_frame = ctk.CTkFrame(self, fg_color=ThemeColors.BG_SECONDARY, corner_radius=0, height=80)
        header_frame.grid(row=0, column=0, sticky="ew")
        header_frame.grid_columnconfigure(1, weight=1)
        header_frame.grid_propagate(False)

        logo_frame = ctk.CTkFrame(header_frame, fg_color="transparent")
        logo_frame.grid(row=0, column=0, padx=25, pady=15, sticky="w")
        ctk.CTkLabel(logo_frame, text="👻", font=ctk.CTkFont(family=UIStyles.FONT_FAMILY, size=34), text_color=ThemeColors.ACCENT_PRIMARY).pack(side="left", padx=(0, 10))

        title_frame = ctk.CTkFrame(logo_frame, fg_color="transparent")
        title_frame.pack(side="left")
        ctk.CTkLabel(title_frame, text="GhostPay", font=ctk.CTkFont(family=UIStyles.FONT_FAMILY, size=22, weight="bold"), text_color=ThemeColors.ACCENT_PRIMARY).pack(anchor="w")
        ctk.CTkLabel(title_frame, text="卡片自动填写 · UPI 直达", font=ctk.CTkFont(family=UIStyles.FONT_FAMILY, size=12), text_color=ThemeColors.TEXT_SECONDARY).pack(anchor="w")

        nav_frame = ctk.CTkFrame(header_frame, fg_color="transparent")
        nav_frame.grid(row=0, column=2, padx=25, pady=15, sticky="e")
        self.status_badge = StatusBadge(nav_frame, text="● 就绪", color=ThemeColors.SUCCESS)
        self.status_badge.pack(side="right", padx=(10, 0))
        AnimatedButton(nav_frame, text="🕘 历史", width=80, height=32,
                       command=lambda: self.show_view(ViewState.HISTORY)).pack(side="right", padx=5)
        AnimatedButton(nav_frame, text="💳 卡片", width=80, height=32,
                       command=lambda: self.show_view(ViewState.HOME)).pack(side="right", padx=5)

    def _create_footer(self):
        footer_frame = ctk.CTkFrame(self, fg_color=ThemeColors.BG_SECONDARY, corner_radius=0, height=40)
        footer_frame.grid(row=2, column=0, sticky="ew")
        self.sys_info = ctk.CTkLabel(footer_frame, text=f"浏览器: {browser_config.address} | 模式: {browser_config.engine_mode}", font=ctk.CTkFont(family=UIStyles.FONT_FAMILY, size=10), text_color=ThemeColors.TEXT_MUTED)
        self.sys_info.pack(side="left", padx=25)

    # --- 视图切换 ---
    def show_view(self, state):
        if state is ViewState.ADD:
            self.view_state = state
            AddCardDialog(self, on_confirm=self._on_card_added).bind(
                "<Destroy>", lambda e: self._leave_add(), add="+")
            return

        self.view_state = state
        for child in self.body.winfo_children():
            child.destroy()
        if state is ViewState.HISTORY:
            self._build_history_view()
        else:
            self._build_home_view()

    def _leave_add(self):
        if self.view_state is ViewState.ADD:
            self.view_state = ViewState.HOME

    def _build_home_view(self):
        toolbar = ctk.CTkFrame(self.body, fg_color="transparent")
        toolbar.pack(fill="x", pady=(0, 12))
        ctk.CTkLabel(toolbar, text="我的卡片", font=ctk.CTkFont(family=UIStyles.FONT_FAMILY, size=16, weight="bold"), text_color=ThemeColors.TEXT_PRIMARY).pack(side="left")
        AnimatedButton(toolbar, text="＋ 添加卡片", height=34,
                       command=lambda: self.show_view(ViewState.ADD)).pack(side="right")
        self.launch_btn = AnimatedButton(toolbar, text="🌐 打开专用浏览器", height=34,
                                         command=self.action_launch_browser)
        self.launch_btn.pack(side="right", padx=10)

        carousel = ctk.CTkScrollableFrame(self.body, orientation="horizontal", height=240,
                                          fg_color=ThemeColors.BG_DARK)
        carousel.pack(fill="x")

        try:
            cards = self.vault.get_cards()
        except VaultError as e:
            cards = []
            self._show_notice(f"❌ 无法读取卡片: {e}")
        if not cards:
            ctk.CTkLabel(carousel, text="还没有卡片，点击右上角添加。", font=ctk.CTkFont(family=UIStyles.FONT_FAMILY, size=12), text_color=ThemeColors.TEXT_MUTED).pack(padx=20, pady=40)
            return
        for card in cards:
            CardTile(carousel, card, on_pay=self.action_pay, on_remove=self.action_remove_card).pack(side="left", padx=10, pady=10)

    def _build_history_view(self):
        panel = GradientFrame(self.body)
        panel.pack(fill="both", expand=True)
        ctk.CTkLabel(panel, text="🕘 交易历史", font=ctk.CTkFont(family=UIStyles.FONT_FAMILY, size=15, weight="bold"), text_color=ThemeColors.ACCENT_PRIMARY).pack(anchor="w", padx=20, pady=15)

        rows = ctk.CTkScrollableFrame(panel, fg_color="transparent")
        rows.pack(fill="both", expand=True, padx=15, pady=(0, 15))
        history = self.vault.get_history()
        if not history:
            ctk.CTkLabel(rows, text="暂无交易记录", text_color=ThemeColors.TEXT_MUTED).pack(pady=20)
        for record in history:
            row = ctk.CTkFrame(rows, fg_color=ThemeColors.BG_SECONDARY, corner_radius=8)
            row.pack(fill="x", pady=4)
            ctk.CTkLabel(row, text=record.bank_name, text_color=ThemeColors.TEXT_PRIMARY).pack(side="left", padx=12, pady=8)
            ctk.CTkLabel(row, text=record.timestamp.replace("T", " "), text_color=ThemeColors.TEXT_MUTED).pack(side="left", padx=12)
            ctk.CTkLabel(row, text=f"₹ {record.amount}", font=ctk.CTkFont(family=UIStyles.FONT_FAMILY, size=13, weight="bold"), text_color=ThemeColors.ACCENT_PRIMARY).pack(side="right", padx=12)

    # --- 交互动作 ---
    def _on_card_added(self, card):
        try:
            self.vault.add_card(card)
        except VaultError as e:
            self._show_notice(f"❌ 卡片保存失败: {e}")
            return
        self.view_state = ViewState.HOME
        self.show_view(ViewState.HOME)

    def action_remove_card(self, card):
        if messagebox.askyesno("删除卡片", f"删除 {card.bank_name} {card.masked_number}？"):
            self.vault.remove_card(card.card_id)
            self.show_view(ViewState.HOME)

    def action_launch_browser(self):
        self.launch_btn.configure(state="disabled", text="⏳ 正在启动浏览器...")

        def run():
            try:
                _, port = PortChecker.split_address(browser_config.address)
                page = BrowserLauncher.launch(port, browser_config.profile_dir)
                self.browser_mgr.attach(page)
                self.after(0, lambda: [
                    self.launch_btn.configure(state="normal", text="✅ 浏览器已就绪"),
                    self.status_badge.set_status("● 浏览器已连接", ThemeColors.SUCCESS)
                ])
            except Exception as e:
                self.after(0, lambda: [
                    self.launch_btn.configure(state="normal", text="🌐 重新启动浏览器"),
                    self._show_notice(f"❌ 启动失败: {e}")
                ])
        threading.Thread(target=run, daemon=True).start()

    def action_pay(self, card):
        dialog = ctk.CTkInputDialog(text=f"支付金额（留空为 {ui_config.default_amount}）", title="SECURE PAY")
        raw = dialog.get_input()
        if raw is None:
            return
        amount = raw.strip() or ui_config.default_amount

        # 连接浏览器、开标签页都在会话的工作线程里完成，失败经 notice 回调提示
        self.view_state = ViewState.PAY
        window = PaymentWindow(self, card, amount)
        window.on_close = lambda: self._on_payment_closed(window)
        self.payment_window = window
        self.status_badge.set_status("● 支付中", ThemeColors.WARNING)
        try:
            self.session.start(card, amount)
        except ValueError as e:
            window.on_closing()
            self._show_notice(f"⚠️ 金额无效: {e}")

    def _on_payment_closed(self, window=None):
        if window is not self.payment_window:
            return  # 旧窗口延迟关闭，当前支付不受影响
        self.session.cancel()
        self.payment_window = None
        if self.view_state is ViewState.PAY:
            self.view_state = ViewState.HOME
        self.status_badge.set_status("● 就绪", ThemeColors.SUCCESS)

    # --- 会话回调（任意线程） ---
    def _route_log(self, message, level="info"):
        window = self.payment_window
        if window is not None:
            window.post_log(message, level)

    def _show_notice(self, message):
        self.after(0, lambda: messagebox.showwarning("GhostPay", message))

    def _on_payment_complete(self, record):
        window = self.payment_window
        if window is not None:
            window.post_complete(record)
            window.after(1500, window.on_closing)
        self.after(0, lambda: [
            self.show_view(ViewState.HISTORY),
            self.status_badge.set_status("● 支付成功", ThemeColors.SUCCESS)
        ])
