"""
导航策略（宿主侧）

每一次出站导航都先经过这里，包括填充器自己的点击触发的跳转。

分类是纯函数，先于任何副作用:
- 命中支付 App scheme 前缀 -> EXTERNAL_INTENT: 拦下页面跳转，交给系统打开
- 其他 -> IN_PAGE: 放行，无副作用
"""

from typing import Callable, Iterable, Optional

from ghostpay.domain.entities import NavigationClass, NavigationEvent
from ghostpay.domain.interfaces import IUrlDispatcher
from ghostpay.errors import UrlDispatchError
from ghostpay.utils.logger import get_logger


logger = get_logger(__name__)

APP_NOT_FOUND_NOTICE = "未找到可处理该支付链接的 App (app not found)"


def classify(url: str, schemes: Iterable[str]) -> NavigationEvent:
    """按 scheme 前缀分类（不区分大小写）"""
    lowered = (url or '').strip().lower()
    for prefix in schemes:
        if lowered.startswith(prefix.lower()):
            return NavigationEvent(url=url, classification=NavigationClass.EXTERNAL_INTENT)
    return NavigationEvent(url=url, classification=NavigationClass.IN_PAGE)


class NavigationPolicy:
    """
    导航拦截策略

    Args:
        schemes: 外部 scheme 前缀
        dispatcher: 系统 URL 分发器
        notice_callback: 面向用户的提示（唯一的用户可见错误）
    """

    def __init__(
        self,
        schemes: Iterable[str],
        dispatcher: IUrlDispatcher,
        notice_callback: Optional[Callable[[str], None]] = None
    ):
        self.schemes = tuple(schemes)
        self.dispatcher = dispatcher
        self.notice_callback = notice_callback

    def classify(self, url: str) -> NavigationEvent:
        return classify(url, self.schemes)

    def should_allow(self, url: str) -> bool:
        """
        是否允许页面内跳转

        Returns:
            IN_PAGE 返回 True；EXTERNAL_INTENT 返回 False（同时尝试外部分发）
        """
        event = self.classify(url)
        if not event.is_external:
            return True

        logger.info(f"📲 外部支付链接，交给系统处理: {url}")
        try:
            self.dispatcher.open(url)
        except UrlDispatchError as e:
            logger.warning(f"⚠️ 外部分发失败: {e}")
            if self.notice_callback:
                self.notice_callback(APP_NOT_FOUND_NOTICE)
        return False
