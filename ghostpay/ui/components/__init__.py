"""UI 组件模块"""
from ghostpay.ui.base_components import AnimatedButton, GradientFrame, StatusBadge, CardTile

__all__ = ['AnimatedButton', 'GradientFrame', 'StatusBadge', 'CardTile']
