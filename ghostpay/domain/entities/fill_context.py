"""
填充上下文

引擎唯一需要的输入。每次支付尝试新建，结束即丢弃，构造后不可修改。
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional

from .card import CardRecord


@dataclass(frozen=True)
class FillContext:
    """
    一次支付尝试的填充数据

    Attributes:
        card: 卡片记录（只读借用）
        amount: 金额（十进制字符串）
        email: 联系邮箱
        phone: 联系电话
    """
    card: CardRecord
    amount: str
    email: str
    phone: str

    def __post_init__(self):
        try:
            value = Decimal(self.amount)
        except (InvalidOperation, TypeError):
            raise ValueError(f"金额格式不正确: {self.amount!r}")
        if not value.is_finite() or value <= 0:
            raise ValueError(f"金额必须大于 0: {self.amount!r}")

    @classmethod
    def create(
        cls,
        card: CardRecord,
        amount: str,
        email: Optional[str] = None,
        phone: Optional[str] = None
    ) -> 'FillContext':
        """
        构造填充上下文

        联系方式未指定时使用卡片上登记的邮箱和电话。
        """
        return cls(
            card=card,
            amount=str(amount).strip(),
            email=(email if email is not None else card.email).strip(),
            phone=(phone if phone is not None else card.phone).strip(),
        )
