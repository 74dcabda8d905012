from enum import Enum


class ViewState(str, Enum):
    """主界面视图状态"""
    HOME = "HOME"         # 卡片轮播
    ADD = "ADD"           # 添加卡片
    PAY = "PAY"           # 支付进行中
    HISTORY = "HISTORY"   # 交易历史
