"""
添加卡片对话框

收集银行名、卡号、持卡人、有效期，以及可选的邮箱和手机号。
"""

import customtkinter as ctk
from typing import Optional, Callable

from ghostpay.domain.entities import CardRecord
from ghostpay.errors import InvalidCardError
from ghostpay.ui.styles import ThemeColors, UIStyles
from ghostpay.ui.components import AnimatedButton


# (字段名, 标签, 占位提示)
CARD_FIELDS = [
    ("bank_name", "银行", "Axis"),
    ("number", "卡号", "4598 1234 5678 9012"),
    ("holder_name", "持卡人", "NAME ON CARD"),
    ("expiry", "有效期", "MM/YY"),
    ("email", "邮箱（可选）", "you@example.com"),
    ("phone", "手机号（可选）", "9876543210"),
]


class AddCardDialog(ctk.CTkToplevel):
    """添加卡片对话框，确认时回调 on_confirm(CardRecord)"""

    def __init__(self, master, on_confirm: Optional[Callable[[CardRecord], None]] = None):
        super().__init__(master)

        self.on_confirm = on_confirm
        self.entries = {}

        self.title("添加卡片")
        self.configure(fg_color=ThemeColors.BG_DARK)
        self.transient(master)
        self.grab_set()

        # 居中显示
        self.update_idletasks()
        x = (self.winfo_screenwidth() - 420) // 2
        y = (self.winfo_screenheight() - 520) // 2
        self.geometry(f"420x520+{x}+{y}")

        self._build_ui()

    def _build_ui(self):
        ctk.CTkLabel(
            self,
            text="💳 添加新卡片",
            font=ctk.CTkFont(family=UIStyles.FONT_FAMILY, size=18, weight="bold"),
            text_color=ThemeColors.ACCENT_PRIMARY
        ).pack(anchor="w", padx=24, pady=(20, 10))

        form = ctk.CTkFrame(self, fg_color="transparent")
        form.pack(fill="both", expand=True, padx=24)
        form.grid_columnconfigure(1, weight=1)

        for row, (key, label, hint) in enumerate(CARD_FIELDS):
            ctk.CTkLabel(form, text=label,
                         font=ctk.CTkFont(family=UIStyles.FONT_FAMILY, size=12),
                         text_color=ThemeColors.TEXT_SECONDARY).grid(row=row, column=0, sticky="w", pady=6, padx=(0, 12))
            entry = ctk.CTkEntry(form, placeholder_text=hint, height=34,
                                 fg_color=ThemeColors.BG_CARD,
                                 border_color=ThemeColors.BORDER,
                                 text_color=ThemeColors.TEXT_PRIMARY)
            entry.grid(row=row, column=1, sticky="ew", pady=6)
            self.entries[key] = entry

        self.error_label = ctk.CTkLabel(self, text="",
                                        font=ctk.CTkFont(family=UIStyles.FONT_FAMILY, size=11),
                                        text_color=ThemeColors.ERROR)
        self.error_label.pack(anchor="w", padx=24)

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.pack(fill="x", padx=24, pady=(10, 20))

        AnimatedButton(btn_frame, text="✅ 保存", height=40,
                       font=(UIStyles.FONT_FAMILY, 13, "bold"),
                       command=self._on_confirm).pack(side="left", fill="x", expand=True, padx=(0, 10))
        AnimatedButton(btn_frame, text="取消", height=40, width=100,
                       text_color=ThemeColors.TEXT_MUTED, border_color=ThemeColors.BORDER,
                       command=self.destroy).pack(side="right")

    def _collect(self) -> dict:
        values = {key: entry.get().strip() for key, entry in self.entries.items()}
        values["bank_name"] = values["bank_name"] or "Axis"
        return values

    def _on_confirm(self):
        try:
            card = CardRecord(**self._collect())
        except InvalidCardError as e:
            self.error_label.configure(text=f"⚠️ {e}")
            return
        if self.on_confirm:
            self.on_confirm(card)
        self.destroy()
