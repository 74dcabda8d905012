"""
卡号凭据库

卡号不落在 vault.json 里，按卡片 ID 存进系统凭据库
（Windows 凭据管理器 / macOS 钥匙串 / Linux Secret Service）。
"""

from typing import Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from ghostpay.errors import VaultError


SERVICE_NAME = "ghostpay"


class KeyringSecretStore:
    """
    系统凭据库

    Args:
        service: 凭据库里的服务名
    """

    def __init__(self, service: str = SERVICE_NAME):
        self.service = service

    def get(self, key: str) -> Optional[str]:
        try:
            return keyring.get_password(self.service, key)
        except KeyringError as e:
            raise VaultError(f"读取凭据库失败 [{key}]: {e}") from e

    def set(self, key: str, secret: str) -> None:
        try:
            keyring.set_password(self.service, key, secret)
        except KeyringError as e:
            raise VaultError(f"写入凭据库失败 [{key}]: {e}") from e

    def delete(self, key: str) -> None:
        try:
            keyring.delete_password(self.service, key)
        except PasswordDeleteError:
            pass  # 本来就没有
        except KeyringError as e:
            raise VaultError(f"删除凭据失败 [{key}]: {e}") from e
