# Domain Entities

"""
领域实体 - 核心业务对象

提供应用程序的核心数据模型，不依赖任何外部框架。
"""

from .card import CardRecord
from .fill_context import FillContext
from .fill_models import FieldRole, FormLayout, FillState, FillReport
from .navigation import NavigationClass, NavigationEvent, TransactionRecord

__all__ = [
    'CardRecord',
    'FillContext',
    'FieldRole',
    'FormLayout',
    'FillState',
    'FillReport',
    'NavigationClass',
    'NavigationEvent',
    'TransactionRecord',
]
