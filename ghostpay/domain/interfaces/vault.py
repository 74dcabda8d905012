"""
卡包接口

按存储键读写卡片列表和交易历史；卡号单独存放在凭据库。
"""

from typing import Protocol, List

from ..entities import CardRecord, TransactionRecord


class ICardVault(Protocol):
    """卡包"""

    def get_cards(self) -> List[CardRecord]:
        ...

    def set_cards(self, cards: List[CardRecord]) -> List[CardRecord]:
        """保存并返回实际写入的卡片（缺 ID 的已分配）"""
        ...

    def get_history(self) -> List[TransactionRecord]:
        ...

    def set_history(self, history: List[TransactionRecord]) -> None:
        ...

    def append_history(self, record: TransactionRecord) -> None:
        ...
