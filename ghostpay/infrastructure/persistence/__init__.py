"""
持久化基础设施模块

提供卡片和交易历史的保存与加载，卡号存放在系统凭据库。
"""
from .card_vault import CardVault, CARDS_KEY, HISTORY_KEY
from .secret_store import KeyringSecretStore

__all__ = ['CardVault', 'KeyringSecretStore', 'CARDS_KEY', 'HISTORY_KEY']
