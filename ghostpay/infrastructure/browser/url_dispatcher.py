"""
系统 URL 分发器

把 upi:// 等深链交给操作系统，由系统拉起对应的支付 App。
"""

import os
import subprocess
import sys

from ghostpay.errors import UrlDispatchError
from ghostpay.utils.logger import get_logger


logger = get_logger(__name__)


class SystemUrlDispatcher:
    """按平台调用系统的 URL 打开程序，失败不重试"""

    def __init__(self, timeout: float = 10.0):
        self.timeout = timeout

    def open(self, url: str) -> None:
        """
        Raises:
            UrlDispatchError: 没有注册处理程序或打开失败
        """
        if sys.platform.startswith('win'):
            try:
                os.startfile(url)
            except OSError as e:
                raise UrlDispatchError(url, str(e))
            return

        opener = 'open' if sys.platform == 'darwin' else 'xdg-open'
        try:
            result = subprocess.run([opener, url], capture_output=True, timeout=self.timeout)
        except (OSError, subprocess.TimeoutExpired) as e:
            raise UrlDispatchError(url, str(e))

        if result.returncode != 0:
            stderr = result.stderr.decode('utf-8', errors='replace').strip()
            raise UrlDispatchError(url, stderr or f"{opener} exited with {result.returncode}")
        logger.info(f"📲 已交给系统打开: {url}")
