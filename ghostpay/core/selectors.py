"""
字段候选选择器

每个语义角色对应一组有序的候选规则，定位策略是数据而不是代码：
默认规则写在这里，也可以用 JSON 文件按角色覆盖。

JSON 格式:
    {
        "cardNumber": [
            {
                "tag": "input",
                "types": ["text", "tel"],
                "attr_contains": {"name": ["cardno"]},
                "priority": 1,
                "description": "name 含 cardno"
            }
        ]
    }
"""

import json
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ghostpay.domain.entities import FieldRole
from ghostpay.domain.interfaces import IElementHandle
from ghostpay.utils.logger import get_logger


logger = get_logger(__name__)

_TEXTUAL_TYPES = ('text', 'tel', 'number', 'email', 'search', 'password')


@dataclass(frozen=True)
class CandidateSelector:
    """
    单条候选规则

    Attributes:
        tag: 标签名
        types: 允许的 input type，空表示不限
        attr_contains: {属性名: 子串列表}，任一属性含任一子串即命中（不区分大小写），空表示不限
        attr_excludes: name/id/placeholder 含这些子串时排除（避开“持卡人”“CVV”等孪生字段）
        max_length: 要求 maxlength 恰好等于该值
        priority: 越小越先尝试
        description: 说明（日志用）
    """
    tag: str = 'input'
    types: Tuple[str, ...] = ()
    attr_contains: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    attr_excludes: Tuple[str, ...] = ()
    max_length: Optional[int] = None
    priority: int = 99
    description: str = ''

    def matches(self, element: IElementHandle) -> bool:
        """只做静态匹配，可见性/可用性由定位器另行过滤"""
        if element.tag != self.tag:
            return False

        if self.types:
            elem_type = (element.attr('type') or 'text').lower()
            if elem_type not in self.types:
                return False

        if self.max_length is not None and _max_length(element) != self.max_length:
            return False

        if self.attr_excludes:
            haystack = ' '.join((element.attr(a) or '').lower() for a in ('name', 'id', 'placeholder'))
            if any(word in haystack for word in self.attr_excludes):
                return False

        if not self.attr_contains:
            return True

        for attr_name, needles in self.attr_contains.items():
            value = (element.attr(attr_name) or '').lower()
            if value and any(needle.lower() in value for needle in needles):
                return True
        return False

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['types'] = list(self.types)
        data['attr_contains'] = {k: list(v) for k, v in self.attr_contains.items()}
        data['attr_excludes'] = list(self.attr_excludes)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CandidateSelector':
        max_length = data.get('max_length')
        return cls(
            tag=str(data.get('tag', 'input')).lower(),
            types=tuple(str(t).lower() for t in data.get('types', ())),
            attr_contains={
                str(k): tuple(v) if isinstance(v, (list, tuple)) else (str(v),)
                for k, v in (data.get('attr_contains') or {}).items()
            },
            attr_excludes=tuple(str(w).lower() for w in data.get('attr_excludes', ())),
            max_length=int(max_length) if max_length is not None else None,
            priority=int(data.get('priority', 99)),
            description=str(data.get('description', '')),
        )


def _max_length(element: IElementHandle) -> Optional[int]:
    raw = element.attr('maxlength')
    try:
        return int(raw) if raw not in (None, '') else None
    except ValueError:
        return None


_CARD_WORDS = ('cardnumber', 'card_number', 'cardno', 'card_no', 'ccnum', 'cc_number')
_CARD_TWINS = ('holder', 'cvv', 'cvc', 'expiry', 'exp_', 'month', 'year')


DEFAULT_ROLE_SELECTORS: Dict[FieldRole, List[CandidateSelector]] = {
    FieldRole.CARD_NUMBER: [
        CandidateSelector(types=_TEXTUAL_TYPES, attr_contains={'name': _CARD_WORDS},
                          priority=1, description='name 含卡号关键字'),
        CandidateSelector(types=_TEXTUAL_TYPES, attr_contains={'id': _CARD_WORDS},
                          priority=2, description='id 含卡号关键字'),
        CandidateSelector(types=_TEXTUAL_TYPES, attr_contains={'name': ('card',), 'id': ('card',)},
                          attr_excludes=_CARD_TWINS, priority=3, description='name/id 含 card'),
        CandidateSelector(types=_TEXTUAL_TYPES, attr_contains={'placeholder': ('card number',)},
                          priority=4, description='placeholder 提示卡号'),
    ],
    FieldRole.EMAIL: [
        CandidateSelector(attr_contains={'name': ('email', 'mail')}, priority=1, description='name 含 email'),
        CandidateSelector(attr_contains={'id': ('email', 'mail')}, priority=2, description='id 含 email'),
        CandidateSelector(types=('email',), priority=3, description='type=email'),
    ],
    FieldRole.PHONE: [
        CandidateSelector(attr_contains={'name': ('mobile', 'phone')}, priority=1, description='name 含 mobile/phone'),
        CandidateSelector(attr_contains={'id': ('mobile', 'phone')}, priority=2, description='id 含 mobile/phone'),
        CandidateSelector(types=('tel',), attr_excludes=('card',) + _CARD_TWINS,
                          priority=3, description='type=tel'),
    ],
    FieldRole.AMOUNT: [
        CandidateSelector(attr_contains={'name': ('amount', 'amt')}, priority=1, description='name 含 amount'),
        CandidateSelector(attr_contains={'id': ('amount', 'amt')}, priority=2, description='id 含 amount'),
    ],
    FieldRole.NETWORK_RADIO: [
        CandidateSelector(types=('radio',), priority=1, description='radio 按钮'),
    ],
}


def split_box_selector(max_length: int = 4) -> CandidateSelector:
    """分框卡号输入框：maxlength 恰好为 4 的文本输入框"""
    return CandidateSelector(
        types=_TEXTUAL_TYPES,
        max_length=max_length,
        description=f'maxlength={max_length} 分框',
    )


def load_role_selectors(path: Optional[str] = None) -> Dict[FieldRole, List[CandidateSelector]]:
    """
    加载角色选择器

    文件中出现的角色整体替换默认规则，其余角色沿用默认值；
    文件缺失或格式错误时记录警告并使用默认规则。

    Args:
        path: JSON 文件路径；None 时尝试当前目录下的 selectors.json
    """
    selectors = {role: sorted(rules, key=lambda r: r.priority)
                 for role, rules in DEFAULT_ROLE_SELECTORS.items()}

    config_path = Path(path) if path else Path.cwd() / 'selectors.json'
    if not config_path.exists():
        if path:
            logger.warning(f"⚠️ 选择器配置文件未找到: {config_path}")
        return selectors

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"⚠️ 选择器配置文件读取失败: {e}")
        return selectors

    for key, rules in raw.items():
        try:
            role = FieldRole(key)
        except ValueError:
            logger.warning(f"⚠️ 未知字段角色: {key}")
            continue
        selectors[role] = sorted(
            (CandidateSelector.from_dict(r) for r in rules),
            key=lambda r: r.priority
        )
        logger.info(f"📂 已加载 [{role.value}] 的 {len(selectors[role])} 条自定义规则")

    return selectors


def selectors_to_dict(selectors: Dict[FieldRole, List[CandidateSelector]]) -> Dict[str, List[Dict[str, Any]]]:
    """序列化为 JSON 友好的结构（注入脚本用）"""
    return {role.value: [rule.to_dict() for rule in rules] for role, rules in selectors.items()}
