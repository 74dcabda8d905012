"""
GhostPay 日志

- 模块日志器: get_logger(__name__)；会话和诊断接收端额外带 UI 回调，消息同时进支付窗口
- success 级别（25）用于“字段填好了 / 支付完成”这类结果
- 卡号脱敏: 控制台、日志文件和 UI 回调看到的卡号只剩后 4 位，
  第三方库（DrissionPage 等）的日志和异常堆栈同样经过 CardNumberFilter
"""

import logging
import re
import sys
from pathlib import Path
from typing import Callable, Optional


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
TIME_FORMAT = "%H:%M:%S"

SUCCESS_LEVEL = 25

# 13-19 位数字，允许单个空格或短横分组（4598 1234 5678 9012 / 4598-1234-...）
_CARD_NUMBER = re.compile(r'(?<![\d-])\d(?:[ -]?\d){12,18}(?![\d])')


def mask_card_numbers(text: str) -> str:
    """把文本里像卡号的数字串替换为 **** 加后 4 位"""
    def _mask(match):
        digits = re.sub(r'\D', '', match.group(0))
        return f"**** {digits[-4:]}"
    return _CARD_NUMBER.sub(_mask, text)


class CardNumberFilter(logging.Filter):
    """handler 级过滤器：改写消息和异常文本中的卡号，记录本身照常输出"""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = mask_card_numbers(message)
        if masked != message:
            record.msg, record.args = masked, None

        if record.exc_info and not record.exc_text:
            record.exc_text = logging.Formatter().formatException(record.exc_info)
        if record.exc_text:
            record.exc_text = mask_card_numbers(record.exc_text)
        return True


class GhostLogger:
    """
    标准 logger 加一个可选的 UI 回调 (message, level_name)

    UI 回调在任意线程被调用，由界面层自己切回 Tk 线程。
    """

    def __init__(self, name: str, ui_callback: Optional[Callable[[str, str], None]] = None):
        self.logger = logging.getLogger(name)
        self.ui_callback = ui_callback
        if logging.getLevelName(SUCCESS_LEVEL) != 'SUCCESS':
            logging.addLevelName(SUCCESS_LEVEL, 'SUCCESS')

    def _emit(self, level: int, message: str, level_name: str):
        self.logger.log(level, message)
        if self.ui_callback:
            try:
                self.ui_callback(mask_card_numbers(message), level_name)
            except Exception as e:
                # 窗口可能已销毁
                self.logger.debug(f"UI 日志回调失败: {e}")

    def debug(self, message: str):
        self._emit(logging.DEBUG, message, "debug")

    def info(self, message: str):
        self._emit(logging.INFO, message, "info")

    def success(self, message: str):
        self._emit(SUCCESS_LEVEL, f"✅ {message}", "success")

    def warning(self, message: str):
        self._emit(logging.WARNING, message, "warning")

    def error(self, message: str):
        self._emit(logging.ERROR, message, "error")

    def critical(self, message: str):
        self._emit(logging.CRITICAL, message, "critical")


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None):
    """
    应用启动时调用一次

    Args:
        level: 根日志级别
        log_file: 额外写入的日志文件（GHOSTPAY_LOG_FILE）
    """
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    card_filter = CardNumberFilter()
    for handler in handlers:
        handler.addFilter(card_filter)

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=TIME_FORMAT, handlers=handlers, force=True)

    # CDP 通信日志太吵
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('websocket').setLevel(logging.WARNING)


def get_logger(name: str, ui_callback: Optional[Callable[[str, str], None]] = None) -> GhostLogger:
    return GhostLogger(name, ui_callback)
