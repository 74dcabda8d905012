"""
Pytest 配置文件

提供测试所需的 fixtures 和共享配置。
"""

import sys
from pathlib import Path
from typing import Dict, List, Optional

import pytest

# 确保项目根目录在 Python 路径中
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


# ============================================================
# Fake DOM
# ============================================================

class FakeElement:
    """模拟页面元素，记录写入和派发的事件"""

    def __init__(
        self,
        tag: str = 'input',
        attrs: Optional[Dict[str, str]] = None,
        text: str = '',
        label: str = '',
        visible: bool = True,
        enabled: bool = True,
        value: str = ''
    ):
        self._tag = tag
        self.attrs = dict(attrs or {})
        self._text = text
        self.label = label
        self.visible = visible
        self.enabled = enabled
        self.value = value
        self.attached = True
        self.events: List[tuple] = []
        self.clicks = 0
        self.writes: List[str] = []
        self.reject_writes = False   # 模拟页面把值改掉
        self.raise_on_click = False

    @property
    def tag(self) -> str:
        return self._tag

    def attr(self, name: str) -> Optional[str]:
        return self.attrs.get(name)

    def text(self) -> str:
        return self._text

    def label_text(self) -> str:
        return self.label

    def read_value(self) -> str:
        return self.value

    def write_value(self, value: str) -> None:
        self.writes.append(value)
        if self.attached and not self.reject_writes:
            self.value = value

    def dispatch_event(self, kind: str, key: str = '') -> None:
        if self.attached:
            self.events.append((kind, key))

    def click(self) -> None:
        if self.raise_on_click:
            raise RuntimeError("element not interactable")
        self.clicks += 1

    def is_visible(self) -> bool:
        return self.visible

    def is_enabled(self) -> bool:
        return self.enabled

    def is_attached(self) -> bool:
        return self.attached

    def event_kinds(self) -> List[str]:
        return [kind for kind, _ in self.events]

    def __repr__(self):
        return f"FakeElement({self._tag}, {self.attrs})"


class FakeDocument:
    """模拟页面文档，按文档顺序返回元素"""

    def __init__(self, elements: Optional[List[FakeElement]] = None):
        self.elements: List[FakeElement] = list(elements or [])
        self.queries = 0
        self.pending: Dict[int, List[FakeElement]] = {}   # 第 N 次查询时才出现的元素

    def add(self, *elements: FakeElement) -> 'FakeDocument':
        self.elements.extend(elements)
        return self

    def appear_on_query(self, n: int, *elements: FakeElement) -> None:
        """模拟异步渲染：第 n 次 query 开始时插入元素"""
        self.pending.setdefault(n, []).extend(elements)

    def query(self, tag: str) -> List[FakeElement]:
        self.queries += 1
        if self.queries in self.pending:
            self.elements.extend(self.pending.pop(self.queries))
        return [el for el in self.elements if el.tag == tag and el.attached]

    def find_text_matches(self, marker: str, tags) -> List[FakeElement]:
        return [
            el for el in list(self.elements)
            if el.tag in tags and el.attached and el.visible and marker in el.text()
        ]


def split_box_elements(count: int = 8, max_length: str = '4') -> List[FakeElement]:
    return [
        FakeElement(attrs={'type': 'text', 'name': f'cc{i}', 'maxlength': max_length})
        for i in range(count)
    ]


def contact_elements() -> Dict[str, FakeElement]:
    return {
        'email': FakeElement(attrs={'type': 'text', 'name': 'emailId'}),
        'phone': FakeElement(attrs={'type': 'text', 'name': 'mobileNo'}),
        'amount': FakeElement(attrs={'type': 'text', 'name': 'txtAmount'}),
        'visa': FakeElement(attrs={'type': 'radio', 'name': 'cardType'}, label='Visa'),
        'master': FakeElement(attrs={'type': 'radio', 'name': 'cardType'}, label='MasterCard'),
    }


@pytest.fixture
def fake_document():
    return FakeDocument()


# ============================================================
# Settings / Guard / Channel
# ============================================================

@pytest.fixture
def fast_settings():
    """所有等待为 0 的引擎配置"""
    from ghostpay.config import (
        EngineSettings, LocatorConfig, SimulatorConfig, FillerConfig,
        PollerConfig, NavigationConfig
    )
    return EngineSettings(
        locator=LocatorConfig(max_attempts=5, retry_interval=0.0),
        simulator=SimulatorConfig(keystroke_delay_min=0.0, keystroke_delay_max=0.0),
        filler=FillerConfig(group_delay=0.0),
        poller=PollerConfig(interval_min=0.0, interval_max=0.0),
        navigation=NavigationConfig(watch_interval=0.0),
    )


@pytest.fixture
def guard():
    from ghostpay.core.generation import GenerationGuard
    return GenerationGuard()


class RecordingSink:
    """收集诊断消息"""

    def __init__(self):
        self.messages: List[dict] = []

    def __call__(self, message: dict) -> None:
        self.messages.append(message)

    @property
    def texts(self) -> List[str]:
        return [m['msg'] for m in self.messages]

    def contains(self, fragment: str) -> bool:
        return any(fragment in text for text in self.texts)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def channel(sink):
    from ghostpay.core.diagnostics import DiagnosticsChannel
    return DiagnosticsChannel(sink, prefix='')


# ============================================================
# Domain Fixtures
# ============================================================

@pytest.fixture
def visa_card():
    from ghostpay.domain.entities import CardRecord
    return CardRecord(
        number='4598123456789012',
        holder_name='A Kumar',
        expiry='08/29',
        email='a@b.com',
        phone='9876543210',
        bank_name='Axis',
        card_id='c1',
    )


@pytest.fixture
def master_card():
    from ghostpay.domain.entities import CardRecord
    return CardRecord(number='5412 7512 3412 3456', holder_name='B Rao', expiry='11/27', bank_name='HDFC')


@pytest.fixture
def fill_context(visa_card):
    from ghostpay.domain.entities import FillContext
    return FillContext.create(visa_card, '250')


# ============================================================
# Host Doubles
# ============================================================

class RecordingDispatcher:
    """记录系统 URL 分发调用"""

    def __init__(self, fail: bool = False):
        self.opened: List[str] = []
        self.fail = fail

    def open(self, url: str) -> None:
        from ghostpay.errors import UrlDispatchError
        self.opened.append(url)
        if self.fail:
            raise UrlDispatchError(url, 'no handler')


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


class FakeBrowserManager:
    """模拟 BrowserManager，不连接真实浏览器"""

    def __init__(self):
        self.opened = 0
        self.navigated: List[str] = []
        self.closed: List[object] = []
        self.scripts: List[str] = []
        self.generations: List[int] = []
        self.decide = None
        self.url = ''
        self.outbox: List[object] = []
        self.tab = object()

    def open_payment_tab(self):
        self.opened += 1
        return self.tab

    def install_navigation_guard(self, tab, decide):
        self.decide = decide
        return True

    def navigate(self, tab, url):
        self.navigated.append(url)
        self.url = url

    def close_tab(self, tab):
        self.closed.append(tab)

    def current_url(self, tab):
        return self.url

    def run_js(self, script, tab=None):
        self.scripts.append(script)

    def drain_outbox(self, tab):
        messages, self.outbox = self.outbox, []
        return messages

    def set_page_generation(self, tab, generation):
        self.generations.append(generation)


@pytest.fixture
def browser_mgr():
    return FakeBrowserManager()


class MemorySecretStore:
    """内存版凭据库"""

    def __init__(self):
        self.secrets: Dict[str, str] = {}

    def get(self, key):
        return self.secrets.get(key)

    def set(self, key, secret):
        self.secrets[key] = secret

    def delete(self, key):
        self.secrets.pop(key, None)


@pytest.fixture
def secrets():
    return MemorySecretStore()


@pytest.fixture
def vault(tmp_path, secrets):
    from ghostpay.infrastructure.persistence import CardVault
    return CardVault(str(tmp_path / 'vault.json'), secrets=secrets)


# ============================================================
# Test Utilities
# ============================================================

@pytest.fixture
def capture_logs(capsys):
    """捕获日志输出"""
    def _capture():
        captured = capsys.readouterr()
        return captured.out
    return _capture
