"""
注入脚本构建器

由卡片 + 金额 + 联系方式生成可注入页面的引擎脚本文本。
纯函数：构建时不碰浏览器、不写文件，同样的输入得到同样的文本。
"""

import json
from typing import Any, Dict, Optional

from ghostpay.config import EngineSettings
from ghostpay.domain.entities import FillContext
from ghostpay.core.selectors import load_role_selectors, selectors_to_dict, split_box_selector
from ghostpay.infrastructure.js import ScriptStore, PAYLOAD_PLACEHOLDER


def _ms(seconds: float) -> int:
    return int(round(seconds * 1000))


def build_payload(
    context: FillContext,
    settings: EngineSettings,
    generation: int,
    role_selectors: Optional[Dict] = None
) -> Dict[str, Any]:
    """组装注入脚本的参数"""
    selectors = role_selectors or load_role_selectors(settings.locator.selectors_file)
    return {
        'generation': int(generation),
        'card': {'number': context.card.number},
        'amount': context.amount,
        'email': context.email,
        'phone': context.phone,
        'locator': {
            'max_attempts': settings.locator.max_attempts,
            'retry_interval_ms': _ms(settings.locator.retry_interval),
            'split_box_threshold': settings.locator.split_box_threshold,
        },
        'split_box_rule': split_box_selector(settings.locator.split_box_max_length).to_dict(),
        'simulator': {
            'delay_min_ms': _ms(settings.simulator.keystroke_delay_min),
            'delay_max_ms': _ms(settings.simulator.keystroke_delay_max),
        },
        'filler': {
            'group_delay_ms': _ms(settings.filler.group_delay),
            'visa_token': settings.filler.visa_token,
            'other_network_token': settings.filler.other_network_token,
        },
        'poller': {
            'interval_min_ms': _ms(settings.poller.interval_min),
            'interval_max_ms': _ms(settings.poller.interval_max),
            'marker': settings.poller.marker,
            'clickable_tags': list(settings.poller.clickable_tags),
        },
        'selectors': selectors_to_dict(selectors),
    }


def build_engine_script(
    context: FillContext,
    settings: EngineSettings,
    generation: int,
    role_selectors: Optional[Dict] = None
) -> str:
    """
    生成注入脚本

    Args:
        context: 填充上下文
        settings: 引擎配置
        generation: 本次尝试的代际（写入页面，旧定时器据此自停）
        role_selectors: 自定义角色选择器（可选）

    Returns:
        JavaScript 代码字符串
    """
    payload = build_payload(context, settings, generation, role_selectors)
    # 防止值里出现 </script> 之类的片段截断脚本
    payload_js = json.dumps(payload, ensure_ascii=False).replace('</', '<\\/')
    return ScriptStore.get_ghost_engine_js().replace(PAYLOAD_PLACEHOLDER, payload_js, 1)
