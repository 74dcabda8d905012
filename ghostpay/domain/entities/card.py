"""
卡片实体

CardRecord 由卡包（Card Vault）持有，引擎在一次支付尝试内只读借用。
"""

import re
from dataclasses import dataclass, asdict
from typing import Any, Dict

from ghostpay.errors import InvalidCardError


_EXPIRY_PATTERN = re.compile(r'^(0[1-9]|1[0-2])/\d{2}$')


@dataclass(frozen=True)
class CardRecord:
    """
    信用卡记录

    Attributes:
        number: 卡号（13-19 位纯数字）
        holder_name: 持卡人姓名
        expiry: 有效期 MM/YY
        email: 联系邮箱
        phone: 联系电话
        bank_name: 发卡行（显示在卡面，也写入交易记录）
        card_id: 卡包内的 ID
    """
    number: str
    holder_name: str
    expiry: str
    email: str = ""
    phone: str = ""
    bank_name: str = "Axis"
    card_id: str = ""

    def __post_init__(self):
        digits = re.sub(r'[\s-]', '', self.number or '')
        if not digits.isdigit() or not 13 <= len(digits) <= 19:
            raise InvalidCardError(f"卡号必须为 13-19 位数字: {self.masked_number}")
        # frozen dataclass 只能这样规范化字段
        object.__setattr__(self, 'number', digits)
        if not _EXPIRY_PATTERN.match(self.expiry or ''):
            raise InvalidCardError(f"有效期格式应为 MM/YY: {self.expiry!r}")

    @property
    def masked_number(self) -> str:
        """只保留后 4 位，用于日志"""
        raw = self.number or ''
        return f"**** {raw[-4:]}" if len(raw) >= 4 else "****"

    @property
    def grouped_number(self) -> str:
        """卡面显示：每 4 位一组"""
        return '  '.join(self.number[i:i + 4] for i in range(0, len(self.number), 4))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CardRecord':
        return cls(
            number=str(data.get('number', '')),
            holder_name=data.get('holder_name') or data.get('name', ''),
            expiry=data.get('expiry', ''),
            email=data.get('email', ''),
            phone=data.get('phone', ''),
            bank_name=data.get('bank_name') or data.get('bankName') or 'Axis',
            card_id=str(data.get('card_id') or data.get('id') or ''),
        )
