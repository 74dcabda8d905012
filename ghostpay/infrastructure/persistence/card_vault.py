"""
卡包持久化适配器 - 基础设施层

按存储键（cards / history）把卡片列表和交易历史保存到本地 JSON 文件。
卡号本身存放在系统凭据库里，JSON 里只留后 4 位。
"""

import json
import os
import threading
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

from ghostpay.domain.entities import CardRecord, TransactionRecord
from ghostpay.errors import InvalidCardError
from ghostpay.infrastructure.persistence.secret_store import KeyringSecretStore
from ghostpay.utils.logger import get_logger


logger = get_logger(__name__)

CARDS_KEY = "cards"
HISTORY_KEY = "history"


def default_vault_path() -> Path:
    """GHOSTPAY_VAULT_PATH 优先，否则 ~/.ghostpay/vault.json"""
    override = os.environ.get('GHOSTPAY_VAULT_PATH')
    if override:
        return Path(override)
    return Path.home() / ".ghostpay" / "vault.json"


def _with_id(card: CardRecord) -> CardRecord:
    if card.card_id:
        return card
    return CardRecord.from_dict({**card.to_dict(), 'card_id': uuid.uuid4().hex[:12]})


def _file_fields(card: CardRecord) -> Dict[str, Any]:
    """写入 JSON 的字段：卡号换成后 4 位"""
    data = card.to_dict()
    data['last4'] = data.pop('number')[-4:]
    return data


class CardVault:
    """
    卡包存储管理器

    Args:
        path: JSON 文件路径，默认见 default_vault_path
        secrets: 卡号凭据库（get/set/delete），默认系统凭据库
    """

    def __init__(self, path: Optional[str] = None, secrets: Optional[Any] = None):
        self.path = Path(path) if path else default_vault_path()
        self.secrets = secrets or KeyringSecretStore()
        self._lock = threading.Lock()

    # ==================== 底层读写 ====================

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"⚠️ 卡包文件读取失败，按空卡包处理: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix('.tmp')
        with open(tmp, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp, self.path)

    def get_item(self, key: str) -> Any:
        with self._lock:
            return self._load().get(key)

    def set_item(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._save(data)

    # ==================== 卡片 ====================

    def get_cards(self) -> List[CardRecord]:
        """
        读取卡片，卡号从凭据库取回

        旧版文件里的明文卡号读到后立即迁入凭据库。

        Raises:
            VaultError: 凭据库不可用
        """
        cards: List[CardRecord] = []
        legacy = False
        for raw in self.get_item(CARDS_KEY) or []:
            if not isinstance(raw, dict):
                logger.warning(f"⚠️ 跳过无效卡片记录: {raw!r}")
                continue

            number = raw.get('number')
            if number:
                legacy = True
            else:
                card_id = str(raw.get('card_id') or '')
                number = self.secrets.get(card_id) if card_id else None
                if not number:
                    logger.warning(f"⚠️ 凭据库中没有卡号，跳过卡片 {card_id} (**** {raw.get('last4', '')})")
                    continue
            try:
                cards.append(CardRecord.from_dict({**raw, 'number': number}))
            except (InvalidCardError, TypeError, AttributeError) as e:
                logger.warning(f"⚠️ 跳过无效卡片记录: {e}")

        if legacy:
            cards = self.set_cards(cards)
            logger.info("🔐 明文卡号已迁入系统凭据库")
        return cards

    def set_cards(self, cards: List[CardRecord]) -> List[CardRecord]:
        """
        整体保存卡片列表，被移除卡片的卡号同时从凭据库删除

        Returns:
            实际保存的卡片（缺 ID 的已分配）
        """
        stored = [_with_id(c) for c in cards]
        previous = {
            str(raw.get('card_id')) for raw in self.get_item(CARDS_KEY) or []
            if isinstance(raw, dict) and raw.get('card_id')
        }

        for card in stored:
            self.secrets.set(card.card_id, card.number)
        self.set_item(CARDS_KEY, [_file_fields(c) for c in stored])
        for card_id in previous - {c.card_id for c in stored}:
            self.secrets.delete(card_id)
        return stored

    def add_card(self, card: CardRecord) -> CardRecord:
        """保存新卡片，分配 ID"""
        card = _with_id(card)
        self.set_cards(self.get_cards() + [card])
        logger.info(f"💾 已保存卡片 {card.bank_name} {card.masked_number}")
        return card

    def remove_card(self, card_id: str) -> bool:
        cards = self.get_cards()
        remaining = [c for c in cards if c.card_id != card_id]
        if len(remaining) == len(cards):
            return False
        self.set_cards(remaining)
        return True

    # ==================== 交易历史 ====================

    def get_history(self) -> List[TransactionRecord]:
        return [TransactionRecord.from_dict(r) for r in self.get_item(HISTORY_KEY) or [] if isinstance(r, dict)]

    def set_history(self, history: List[TransactionRecord]) -> None:
        self.set_item(HISTORY_KEY, [r.to_dict() for r in history])

    def append_history(self, record: TransactionRecord) -> None:
        """新记录排在最前"""
        self.set_history([record] + self.get_history())
