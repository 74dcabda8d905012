"""
GhostPay 配置中心

集中管理所有可配置参数，避免硬编码散落在各模块中。
重试次数、按键抖动、轮询间隔等时间常数都是针对目标支付页经验调出来的，
页面改版后可能失效，所以全部做成配置，并支持从环境变量覆盖。

用法:
    from ghostpay.config import locator_config, navigation_config

    attempts = locator_config.max_attempts
    schemes = navigation_config.external_schemes
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple


# BillDesk Axis 信用卡还款页
DEFAULT_TARGET_URL = 'https://pgi.billdesk.com/pgidsk/pgmerc/axiscard/axis_card.jsp'

# 支付类 App 的自定义 scheme（命中即交给系统打开）
DEFAULT_EXTERNAL_SCHEMES: Tuple[str, ...] = (
    'upi://',
    'tez://',
    'gpay://',
    'phonepe://',
    'paytmmp://',
    'bhim://',
    'credpay://',
    'intent://',
)


@dataclass
class LocatorConfig:
    """
    元素定位配置

    控制字段查找的重试策略和分框布局判定。
    """
    max_attempts: int = 5               # 每个角色最多扫描次数
    retry_interval: float = 0.5         # 两次扫描间隔(秒)
    split_box_max_length: int = 4       # 分框输入框的 maxlength
    split_box_threshold: int = 8        # 4 格录入 + 4 格确认
    selectors_file: Optional[str] = None  # 外部选择器 JSON（可选）


@dataclass
class SimulatorConfig:
    """
    输入模拟配置

    逐字符输入时的随机间隔，固定间隔容易被反爬脚本识别。
    """
    keystroke_delay_min: float = 0.05   # 最短按键间隔(秒)
    keystroke_delay_max: float = 0.10   # 最长按键间隔(秒)


@dataclass
class FillerConfig:
    """
    填充器配置

    控制分框写入节奏和卡组织单选框的识别关键字。
    """
    group_delay: float = 0.1            # 每个分框写入后的等待(秒)
    visa_token: str = 'VISA'            # 卡号以 4 开头
    other_network_token: str = 'MASTER' # 其他卡号


@dataclass
class PollerConfig:
    """
    备用路径轮询配置

    周期性寻找备用支付方式（如 UPI 标签页）并点击。
    """
    interval_min: float = 2.0           # 最短轮询间隔(秒)
    interval_max: float = 3.0           # 最长轮询间隔(秒)
    marker: str = 'UPI'                 # 区分大小写
    clickable_tags: Tuple[str, ...] = ('a', 'button', 'li', 'label', 'span', 'div')


@dataclass
class NavigationConfig:
    """
    宿主侧导航配置

    外部 scheme 列表、成功关键字和目标页地址。
    """
    external_schemes: Tuple[str, ...] = DEFAULT_EXTERNAL_SCHEMES
    success_keyword: str = 'success'    # 不区分大小写
    target_url: str = DEFAULT_TARGET_URL
    watch_interval: float = 0.5         # 宿主轮询标签页的间隔(秒)


@dataclass
class BrowserConfig:
    """
    浏览器配置
    """
    address: str = '127.0.0.1:9222'     # 调试地址
    engine_mode: str = 'drive'          # drive: Python 驱动 / inject: 注入页面脚本
    profile_dir: str = 'browser_profile'


@dataclass
class UIConfig:
    """
    UI 配置
    """
    log_max_lines: int = 1000           # 日志最大行数
    default_amount: str = '100'         # 金额输入框默认值


@dataclass
class EngineSettings:
    """
    引擎配置组合

    把引擎需要的几组配置打包，便于注入各组件（测试时可整体替换）。
    """
    locator: LocatorConfig = field(default_factory=LocatorConfig)
    simulator: SimulatorConfig = field(default_factory=SimulatorConfig)
    filler: FillerConfig = field(default_factory=FillerConfig)
    poller: PollerConfig = field(default_factory=PollerConfig)
    navigation: NavigationConfig = field(default_factory=NavigationConfig)


def _get_env_float(key: str, default: float) -> float:
    """从环境变量获取浮点数配置"""
    value = os.environ.get(key)
    if value:
        try:
            return float(value)
        except ValueError:
            pass
    return default


def _get_env_int(key: str, default: int) -> int:
    """从环境变量获取整数配置"""
    value = os.environ.get(key)
    if value:
        try:
            return int(value)
        except ValueError:
            pass
    return default


def _get_env_str(key: str, default: str) -> str:
    """从环境变量获取字符串配置"""
    value = os.environ.get(key)
    return value.strip() if value and value.strip() else default


def _build_locator_config() -> LocatorConfig:
    return LocatorConfig(
        max_attempts=_get_env_int('GHOSTPAY_LOCATOR_ATTEMPTS', 5),
        retry_interval=_get_env_float('GHOSTPAY_LOCATOR_INTERVAL', 0.5),
        selectors_file=os.environ.get('GHOSTPAY_SELECTORS_FILE') or None,
    )


def _build_simulator_config() -> SimulatorConfig:
    return SimulatorConfig(
        keystroke_delay_min=_get_env_float('GHOSTPAY_KEY_DELAY_MIN', 0.05),
        keystroke_delay_max=_get_env_float('GHOSTPAY_KEY_DELAY_MAX', 0.10),
    )


def _build_filler_config() -> FillerConfig:
    return FillerConfig(
        group_delay=_get_env_float('GHOSTPAY_GROUP_DELAY', 0.1),
    )


def _build_poller_config() -> PollerConfig:
    return PollerConfig(
        interval_min=_get_env_float('GHOSTPAY_POLL_MIN', 2.0),
        interval_max=_get_env_float('GHOSTPAY_POLL_MAX', 3.0),
    )


def _build_navigation_config() -> NavigationConfig:
    return NavigationConfig(
        target_url=_get_env_str('GHOSTPAY_TARGET_URL', DEFAULT_TARGET_URL),
    )


def _build_browser_config() -> BrowserConfig:
    return BrowserConfig(
        address=_get_env_str('GHOSTPAY_BROWSER_ADDR', '127.0.0.1:9222'),
        engine_mode=_get_env_str('GHOSTPAY_ENGINE_MODE', 'drive'),
    )


# ============================================================
# 全局配置实例
# ============================================================

locator_config = _build_locator_config()
simulator_config = _build_simulator_config()
filler_config = _build_filler_config()
poller_config = _build_poller_config()
navigation_config = _build_navigation_config()
browser_config = _build_browser_config()
ui_config = UIConfig()


# ============================================================
# 便捷函数
# ============================================================

def get_engine_settings() -> EngineSettings:
    """按当前全局配置组装引擎配置"""
    return EngineSettings(
        locator=locator_config,
        simulator=simulator_config,
        filler=filler_config,
        poller=poller_config,
        navigation=navigation_config,
    )


def reload_config():
    """
    重新加载配置

    从环境变量重新读取配置。
    """
    global locator_config, simulator_config, filler_config
    global poller_config, navigation_config, browser_config

    locator_config = _build_locator_config()
    simulator_config = _build_simulator_config()
    filler_config = _build_filler_config()
    poller_config = _build_poller_config()
    navigation_config = _build_navigation_config()
    browser_config = _build_browser_config()
