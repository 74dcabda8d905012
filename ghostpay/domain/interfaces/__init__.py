# Domain Interfaces

"""
领域接口 - 抽象契约定义

使用 Python Protocol (Structural Subtyping) 定义接口，
实现依赖反转原则 (DIP)。
"""

from .element import IElementHandle, IDocument
from .dispatcher import IUrlDispatcher
from .vault import ICardVault

__all__ = [
    'IElementHandle',
    'IDocument',
    'IUrlDispatcher',
    'ICardVault',
]
