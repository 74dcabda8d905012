"""
填充相关数据模型

包含:
- FieldRole: 字段语义角色
- FormLayout: 表单布局变体
- FillState: 填充状态机状态
- FillReport: 一次填充的结果汇总
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class FieldRole(str, Enum):
    """字段语义角色"""
    CARD_NUMBER = "cardNumber"
    EMAIL = "email"
    PHONE = "phone"
    AMOUNT = "amount"
    NETWORK_RADIO = "networkRadio"


class FormLayout(str, Enum):
    """卡号输入布局（每次运行重新判定，不可缓存）"""
    SINGLE_FIELD = "SINGLE_FIELD"
    SPLIT_BOXES = "SPLIT_BOXES"


class FillState(str, Enum):
    """填充状态机，DONE 为终态，没有 FAILED"""
    SCANNING = "SCANNING"
    SELECTING_NETWORK = "SELECTING_NETWORK"
    FILLING_NUMBER = "FILLING_NUMBER"
    FILLING_CONTACT = "FILLING_CONTACT"
    DONE = "DONE"


@dataclass
class FillReport:
    """填充结果汇总"""
    layout: Optional[FormLayout] = None
    state: FillState = FillState.SCANNING
    visited: List[FillState] = field(default_factory=list)
    filled: List[str] = field(default_factory=list)       # 写入成功的字段
    skipped: List[str] = field(default_factory=list)      # 未找到而跳过
    mismatched: List[str] = field(default_factory=list)   # 写入后值不一致
    network_token: str = ""
    network_selected: bool = False

    def enter(self, state: FillState):
        self.state = state
        self.visited.append(state)

    @property
    def is_done(self) -> bool:
        return self.state is FillState.DONE

    @property
    def is_degraded(self) -> bool:
        return bool(self.skipped or self.mismatched)
