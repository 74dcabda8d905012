import customtkinter as ctk

class ThemeColors:
    """系统配色系统 (Luxury Dark - 黑金)"""
    # 背景色
    BG_DARK = "#0B0B0B"           # 近乎纯黑的主背景
    BG_SECONDARY = "#151515"      # 顶栏/底栏
    BG_CARD = "#1C1C1C"           # 卡片背景
    BG_HOVER = "#2A2A2A"          # 悬停深灰

    # 强调色 - 金
    ACCENT_PRIMARY = "#D4AF37"    # 香槟金
    ACCENT_SECONDARY = "#B8962E"  # 暗金（悬停）

    # 功能色
    SUCCESS = "#D4AF37"           # 成功用金色
    WARNING = "#C9A227"
    ERROR = "#B3261E"             # 暗红
    INFO = "#8A8A8A"

    # 文本色
    TEXT_PRIMARY = "#F5F5F5"
    TEXT_SECONDARY = "#BDBDBD"
    TEXT_MUTED = "#7A7A7A"

    # 边框
    BORDER = "#3A3222"            # 暗金细线
    BORDER_FOCUS = "#D4AF37"

    # 日志级别 -> 颜色
    LOG_LEVELS = {
        "debug": TEXT_MUTED,
        "info": TEXT_SECONDARY,
        "success": ACCENT_PRIMARY,
        "warning": WARNING,
        "error": ERROR,
        "critical": ERROR,
    }

class UIStyles:
    """UI 样式配置"""
    FONT_FAMILY = "Segoe UI"
    MONO_FAMILY = "Consolas"

    @staticmethod
    def apply_global_styles():
        ctk.set_appearance_mode("dark")
        ctk.set_default_color_theme("dark-blue")
