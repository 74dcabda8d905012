"""
Utils 模块初始化文件
"""

from .logger import GhostLogger, CardNumberFilter, get_logger, mask_card_numbers, setup_logging
from .port_check import PortChecker

__all__ = [
    'GhostLogger',
    'CardNumberFilter',
    'get_logger',
    'mask_card_numbers',
    'setup_logging',
    'PortChecker',
]
