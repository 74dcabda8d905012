"""
导航事件与交易记录
"""

from dataclasses import dataclass, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class NavigationClass(str, Enum):
    """导航分类"""
    EXTERNAL_INTENT = "EXTERNAL_INTENT"   # 交给外部 App
    IN_PAGE = "IN_PAGE"                   # 正常网页跳转


@dataclass(frozen=True)
class NavigationEvent:
    """单次导航请求，分类在产生任何副作用之前确定"""
    url: str
    classification: NavigationClass

    @property
    def is_external(self) -> bool:
        return self.classification is NavigationClass.EXTERNAL_INTENT


@dataclass(frozen=True)
class TransactionRecord:
    """
    交易记录

    只在完成监视器检测到支付成功时创建，写入卡包的历史列表。
    """
    bank_name: str
    amount: str
    timestamp: str

    @classmethod
    def now(cls, bank_name: str, amount: str, at: Optional[datetime] = None) -> 'TransactionRecord':
        moment = at or datetime.now()
        return cls(bank_name=bank_name, amount=amount, timestamp=moment.isoformat(timespec='seconds'))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TransactionRecord':
        return cls(
            bank_name=data.get('bank_name', ''),
            amount=str(data.get('amount', '')),
            timestamp=data.get('timestamp', ''),
        )
