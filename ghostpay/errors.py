"""
异常定义

引擎内部没有致命异常：字段级失败只记录日志，这里的异常都在边界处被捕获。
"""


class GhostPayError(Exception):
    """GhostPay 异常基类"""


class InvalidCardError(GhostPayError, ValueError):
    """卡片数据不合法（卡号位数、有效期格式等）"""


class StaleGenerationError(GhostPayError):
    """
    代际已失效

    异步等待恢复后发现本次运行已被取消或被新的支付尝试取代。
    """

    def __init__(self, generation: int, current: int):
        super().__init__(f"generation {generation} superseded by {current}")
        self.generation = generation
        self.current = current


class UrlDispatchError(GhostPayError):
    """系统无法打开外部 URL（未安装对应 App）"""

    def __init__(self, url: str, reason: str = ''):
        super().__init__(f"cannot dispatch {url}: {reason}" if reason else f"cannot dispatch {url}")
        self.url = url
        self.reason = reason


class BrowserConnectionError(GhostPayError, ConnectionError):
    """无法连接到调试模式的浏览器"""


class VaultError(GhostPayError):
    """卡号无法写入或读出系统凭据库"""
