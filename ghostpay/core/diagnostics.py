"""
诊断通道

页面侧 → 宿主的单向消息，格式 {"type": "LOG", "msg": "..."}。
发送即忘：没有确认、没有背压，宿主拆除时丢消息也无所谓。
"""

import json
from typing import Any, Callable, Dict, Optional, Union

from ghostpay.utils.logger import get_logger


LOG_KIND = "LOG"
NAVIGATE_KIND = "NAVIGATE"

Message = Dict[str, Any]


def make_log_message(msg: str) -> Message:
    return {"type": LOG_KIND, "msg": str(msg)}


class DiagnosticsChannel:
    """
    页面侧发送端

    Args:
        sink: 接收消息字典的回调（宿主的 receiver，或注入模式下的 outbox）
        prefix: 消息前缀
    """

    def __init__(self, sink: Optional[Callable[[Message], None]] = None, prefix: str = "👻"):
        self._sink = sink
        self._prefix = prefix

    def emit(self, msg: str) -> None:
        if self._sink is None:
            return
        text = f"{self._prefix} {msg}" if self._prefix else msg
        try:
            self._sink(make_log_message(text))
        except Exception:
            pass  # 发送端观察不到丢失


class DiagnosticsReceiver:
    """
    宿主侧接收端

    接受字典或 JSON 字符串；非 LOG 类型和格式错误的消息直接忽略。
    """

    def __init__(self, ui_callback: Optional[Callable[[str, str], None]] = None):
        self.logger = get_logger(__name__, ui_callback=ui_callback)
        self.received = 0

    def receive(self, message: Union[str, Message, None]) -> Optional[str]:
        """
        处理一条诊断消息

        Returns:
            消息正文；被忽略时返回 None
        """
        payload = self._parse(message)
        if payload is None or payload.get("type") != LOG_KIND:
            return None

        text = str(payload.get("msg", ""))
        self.received += 1
        self.logger.info(text)
        return text

    @staticmethod
    def _parse(message: Union[str, Message, None]) -> Optional[Message]:
        if isinstance(message, dict):
            return message
        if isinstance(message, str):
            try:
                data = json.loads(message)
            except ValueError:
                return None
            return data if isinstance(data, dict) else None
        return None
