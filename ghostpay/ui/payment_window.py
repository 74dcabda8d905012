# PaymentWindow - 支付视图（SECURE PAY）
import time
import customtkinter as ctk

from ghostpay.config import ui_config
from ghostpay.ui.styles import ThemeColors, UIStyles
from ghostpay.ui.components import AnimatedButton, StatusBadge


class PaymentWindow(ctk.CTkToplevel):
    """
    支付窗口

    显示 "SECURE PAY" 头、关闭按钮和实时诊断日志。
    关闭窗口即取消本次支付（由 on_close 回调通知会话）。
    """

    def __init__(self, master, card, amount, on_close=None):
        super().__init__(master)

        self.title("GhostPay - SECURE PAY")
        self.geometry("520x560")
        self.configure(fg_color=ThemeColors.BG_DARK)
        self.attributes("-topmost", True)

        self.card = card
        self.amount = amount
        self.on_close = on_close
        self._closed = False

        self._setup_layout()
        self.protocol("WM_DELETE_WINDOW", self.on_closing)

    def _setup_layout(self):
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(2, weight=1)

        header = ctk.CTkFrame(self, fg_color=ThemeColors.BG_SECONDARY, corner_radius=0, height=64)
        header.grid(row=0, column=0, sticky="ew")
        header.grid_columnconfigure(1, weight=1)
        header.grid_propagate(False)

        ctk.CTkLabel(header, text="🔒 SECURE PAY",
                     font=ctk.CTkFont(family=UIStyles.FONT_FAMILY, size=18, weight="bold"),
                     text_color=ThemeColors.ACCENT_PRIMARY).grid(row=0, column=0, padx=20, pady=16, sticky="w")
        AnimatedButton(header, text="✕", width=36, height=32,
                       command=self.on_closing).grid(row=0, column=2, padx=16, pady=16, sticky="e")

        summary = ctk.CTkFrame(self, fg_color="transparent")
        summary.grid(row=1, column=0, sticky="ew", padx=20, pady=(14, 6))
        summary.grid_columnconfigure(0, weight=1)
        ctk.CTkLabel(summary, text=f"{self.card.bank_name}  {self.card.masked_number}",
                     font=ctk.CTkFont(family=UIStyles.MONO_FAMILY, size=13),
                     text_color=ThemeColors.TEXT_SECONDARY).grid(row=0, column=0, sticky="w")
        ctk.CTkLabel(summary, text=f"₹ {self.amount}",
                     font=ctk.CTkFont(family=UIStyles.FONT_FAMILY, size=20, weight="bold"),
                     text_color=ThemeColors.TEXT_PRIMARY).grid(row=1, column=0, sticky="w")
        self.status_badge = StatusBadge(summary, text="● 处理中", color=ThemeColors.WARNING)
        self.status_badge.grid(row=0, column=1, rowspan=2, sticky="e")

        self.log_text = ctk.CTkTextbox(self,
                                       font=ctk.CTkFont(family=UIStyles.MONO_FAMILY, size=12),
                                       fg_color=ThemeColors.BG_CARD,
                                       text_color=ThemeColors.TEXT_SECONDARY,
                                       border_color=ThemeColors.BORDER, border_width=1)
        self.log_text.grid(row=2, column=0, sticky="nsew", padx=20, pady=(6, 20))
        for level, color in ThemeColors.LOG_LEVELS.items():
            self.log_text.tag_config(level, foreground=color)
        self.log_text.configure(state="disabled")

    # --- 线程安全入口 ---
    def post_log(self, message, level="info"):
        """可从任意线程调用"""
        if not self._closed:
            self.after(0, lambda: self.add_log(message, level))

    def post_complete(self, record):
        if not self._closed:
            self.after(0, lambda: self.show_complete(record))

    # --- UI 线程 ---
    def add_log(self, message, level="info"):
        if self._closed:
            return
        self.log_text.configure(state="normal")
        t = time.strftime("%H:%M:%S")
        self.log_text.insert("end", f"[{t}] {message}\n", level)
        lines = int(self.log_text.index("end-1c").split(".")[0])
        if lines > ui_config.log_max_lines:
            self.log_text.delete("1.0", f"{lines - ui_config.log_max_lines}.0")
        self.log_text.see("end")
        self.log_text.configure(state="disabled")

    def show_complete(self, record):
        self.status_badge.set_status("● 支付成功", ThemeColors.SUCCESS)
        self.add_log(f"✅ 支付完成 ₹{record.amount}", "success")

    def on_closing(self):
        if self._closed:
            return
        self._closed = True
        if self.on_close:
            self.on_close()
        self.destroy()
