"""
完成监视器（宿主侧）

每次页面加载完成后检查目标 URL，含成功关键字（不区分大小写）时
生成一条交易记录并通知外层离开支付视图。

同一次尝试只触发一次：首个命中后忽略后续导航，直到 begin() 开始新尝试。
"""

import threading
from typing import Callable, Optional

from ghostpay.domain.entities import FillContext, TransactionRecord
from ghostpay.utils.logger import get_logger


logger = get_logger(__name__)


class CompletionMonitor:
    """支付完成检测"""

    def __init__(
        self,
        success_keyword: str = 'success',
        on_complete: Optional[Callable[[TransactionRecord], None]] = None
    ):
        self.success_keyword = success_keyword.lower()
        self.on_complete = on_complete
        self._context: Optional[FillContext] = None
        self._done = True
        self._lock = threading.Lock()

    def begin(self, context: FillContext) -> None:
        """开始新的支付尝试"""
        with self._lock:
            self._context = context
            self._done = False

    def reset(self) -> None:
        """放弃当前尝试（用户关闭支付窗口）"""
        with self._lock:
            self._context = None
            self._done = True

    @property
    def is_active(self) -> bool:
        with self._lock:
            return not self._done

    def is_success_url(self, url: str) -> bool:
        return self.success_keyword in (url or '').lower()

    def on_navigation_state(self, url: str) -> Optional[TransactionRecord]:
        """
        处理一次导航状态变化

        Returns:
            本次触发完成时返回交易记录，否则 None
        """
        if not self.is_success_url(url):
            return None

        with self._lock:
            if self._done or self._context is None:
                return None
            self._done = True
            context = self._context

        record = TransactionRecord.now(context.card.bank_name, context.amount)
        logger.success(f"支付成功: {record.bank_name} ₹{record.amount}")
        if self.on_complete:
            self.on_complete(record)
        return record
