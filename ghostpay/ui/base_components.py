import customtkinter as ctk
from ghostpay.ui.styles import ThemeColors, UIStyles

class GradientFrame(ctk.CTkFrame):
    def __init__(self, master, **kwargs):
        super().__init__(master,
                        fg_color=ThemeColors.BG_CARD,
                        border_width=1,
                        border_color=ThemeColors.BORDER,
                        corner_radius=12,
                        **kwargs)

class StatusBadge(ctk.CTkFrame):
    def __init__(self, master, text="就绪", color=ThemeColors.SUCCESS, **kwargs):
        super().__init__(master, fg_color=color, corner_radius=8, **kwargs)
        self.label = ctk.CTkLabel(self, text=text,
                                  font=ctk.CTkFont(family=UIStyles.FONT_FAMILY, size=11, weight="bold"),
                                  text_color=ThemeColors.BG_DARK)
        self.label.pack(padx=10, pady=3)

    def set_status(self, text, color):
        self.configure(fg_color=color)
        self.label.configure(text=text)

class AnimatedButton(ctk.CTkButton):
    def __init__(self, master, **kwargs):
        # 黑金风格：黑底金字金框，悬停转金底黑字
        defaults = {
            "fg_color": ThemeColors.BG_DARK,
            "text_color": ThemeColors.ACCENT_PRIMARY,
            "border_width": 1,
            "border_color": ThemeColors.ACCENT_PRIMARY,
            "hover_color": ThemeColors.BG_HOVER,
            "text_color_disabled": ThemeColors.TEXT_MUTED,
            "corner_radius": 6,
            "font": (UIStyles.FONT_FAMILY, 13)
        }
        for k, v in defaults.items():
            if k not in kwargs:
                kwargs[k] = v

        super().__init__(master, **kwargs)

class CardTile(GradientFrame):
    """卡片轮播中的一张卡：银行名、分组卡号、持卡人、有效期"""

    def __init__(self, master, card, on_pay=None, on_remove=None, **kwargs):
        super().__init__(master, width=340, height=200, **kwargs)
        self.card = card
        self.grid_propagate(False)
        self.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(self, text=card.bank_name.upper(),
                     font=ctk.CTkFont(family=UIStyles.FONT_FAMILY, size=16, weight="bold"),
                     text_color=ThemeColors.ACCENT_PRIMARY).grid(row=0, column=0, padx=20, pady=(18, 0), sticky="w")
        ctk.CTkLabel(self, text=card.grouped_number,
                     font=ctk.CTkFont(family=UIStyles.MONO_FAMILY, size=20),
                     text_color=ThemeColors.TEXT_PRIMARY).grid(row=1, column=0, padx=20, pady=(24, 8), sticky="w")

        bottom = ctk.CTkFrame(self, fg_color="transparent")
        bottom.grid(row=2, column=0, padx=20, sticky="ew")
        bottom.grid_columnconfigure(0, weight=1)
        ctk.CTkLabel(bottom, text=card.holder_name.upper(),
                     font=ctk.CTkFont(family=UIStyles.FONT_FAMILY, size=12),
                     text_color=ThemeColors.TEXT_SECONDARY).grid(row=0, column=0, sticky="w")
        ctk.CTkLabel(bottom, text=card.expiry,
                     font=ctk.CTkFont(family=UIStyles.MONO_FAMILY, size=12),
                     text_color=ThemeColors.TEXT_SECONDARY).grid(row=0, column=1, sticky="e")

        actions = ctk.CTkFrame(self, fg_color="transparent")
        actions.grid(row=3, column=0, padx=20, pady=(12, 0), sticky="ew")
        if on_pay:
            AnimatedButton(actions, text="PAY", width=90, height=28,
                           command=lambda: on_pay(card)).pack(side="left")
        if on_remove:
            AnimatedButton(actions, text="✕", width=28, height=28,
                           text_color=ThemeColors.TEXT_MUTED, border_color=ThemeColors.BORDER,
                           command=lambda: on_remove(card)).pack(side="right")
