"""
支付会话单元测试

线程入口（_spawn）被替换为记录调用：打开线程同步执行，
引擎和监视循环在测试线程里手动驱动。
"""

import asyncio

import pytest

from ghostpay.application import payment_session as session_module
from ghostpay.application.payment_session import PaymentSession
from ghostpay.config import BrowserConfig
from ghostpay.core.navigation_policy import APP_NOT_FOUND_NOTICE
from ghostpay.core.ghost_engine import GhostEngine
from conftest import FakeDocument, RecordingDispatcher, split_box_elements


class OneShotEngine(GhostEngine):
    """填充结束即返回，不继续轮询"""

    def run_blocking(self, context, generation):
        return asyncio.run(self.run(context, generation, keep_polling=False))


@pytest.fixture
def make_session(browser_mgr, vault, fast_settings, dispatcher, monkeypatch):
    def _make(engine_mode='drive', open_inline=True, **kwargs):
        logs, notices, completed = [], [], []
        session = PaymentSession(
            browser_mgr,
            vault,
            settings=fast_settings,
            browser_cfg=BrowserConfig(engine_mode=engine_mode),
            dispatcher=kwargs.pop('dispatcher', dispatcher),
            log_callback=lambda m, l: logs.append((m, l)),
            notice_callback=notices.append,
            complete_callback=completed.append,
        )
        spawned = []

        def fake_spawn(target, *args):
            spawned.append((target, args))
            if open_inline and target.__name__ == '_open_attempt':
                target(*args)

        monkeypatch.setattr(session, '_spawn', fake_spawn)
        session.logs, session.notices, session.completed, session.spawned = logs, notices, completed, spawned
        return session
    return _make


def spawned_names(session):
    return [target.__name__ for target, _ in session.spawned]


class TestStart:

    def test_start_opens_tab_and_spawns_workers(self, make_session, browser_mgr, visa_card):
        session = make_session()

        gen = session.start(visa_card, '250')

        assert browser_mgr.opened == 1
        assert browser_mgr.navigated == [session.settings.navigation.target_url]
        assert browser_mgr.decide == session.decide_navigation
        assert spawned_names(session) == ['_open_attempt', '_run_engine', '_watch']
        assert all(args == (gen,) for _, args in session.spawned)
        assert session.tab is browser_mgr.tab
        assert session.is_active
        assert session.monitor.is_active

    def test_start_returns_before_tab_is_opened(self, make_session, browser_mgr, visa_card):
        session = make_session(open_inline=False)

        gen = session.start(visa_card, '250')

        assert browser_mgr.opened == 0
        assert session.tab is None
        assert session.is_active
        assert session.spawned == [(session._open_attempt, (gen,))]

    def test_invalid_amount_does_not_open_tab(self, make_session, browser_mgr, visa_card):
        session = make_session()

        with pytest.raises(ValueError):
            session.start(visa_card, '0')

        assert browser_mgr.opened == 0
        assert session.spawned == []
        assert not session.is_active

    def test_restart_supersedes_previous_attempt(self, make_session, browser_mgr, visa_card):
        session = make_session()
        first = session.start(visa_card, '100')

        second = session.start(visa_card, '200')

        assert second > first
        assert not session.guard.is_current(first)
        assert len(browser_mgr.closed) == 1

    def test_tab_opened_for_superseded_attempt_is_closed(self, make_session, browser_mgr, visa_card):
        session = make_session(open_inline=False)
        first = session.start(visa_card, '100')
        session.start(visa_card, '200')

        session._open_attempt(first)

        assert browser_mgr.closed == [browser_mgr.tab]
        assert browser_mgr.navigated == []
        assert session.tab is None

    def test_open_failure_is_reported(self, make_session, browser_mgr, visa_card, monkeypatch):
        def broken():
            raise RuntimeError('browser gone')
        monkeypatch.setattr(browser_mgr, 'open_payment_tab', broken)
        session = make_session()

        session.start(visa_card, '250')

        assert session.tab is None
        assert any('browser gone' in n for n in session.notices)
        assert spawned_names(session) == ['_open_attempt']


class TestEngine:

    def test_inject_mode_runs_built_script(self, make_session, browser_mgr, visa_card):
        session = make_session(engine_mode='inject')
        gen = session.start(visa_card, '250')

        session._run_engine(gen)

        assert len(browser_mgr.scripts) == 1
        assert '4598123456789012' in browser_mgr.scripts[0]
        assert '"generation": %d' % gen in browser_mgr.scripts[0]

    def test_drive_mode_runs_engine_on_document(self, make_session, visa_card, monkeypatch):
        boxes = split_box_elements(8)
        document = FakeDocument(boxes)
        monkeypatch.setattr(session_module, 'DrissionDocument', lambda tab: document)
        monkeypatch.setattr(session_module, 'GhostEngine', OneShotEngine)
        session = make_session()
        gen = session.start(visa_card, '250')

        session._run_engine(gen)

        assert [b.value for b in boxes] == ['4598', '1234', '5678', '9012'] * 2
        assert any('layout SPLIT_BOXES' in m for m, _ in session.logs)
        assert session.last_report is not None

    def test_stale_generation_skips_engine(self, make_session, browser_mgr, visa_card):
        session = make_session(engine_mode='inject')
        gen = session.start(visa_card, '250')
        session.cancel()

        session._run_engine(gen)

        assert browser_mgr.scripts == []


class TestNavigationGuard:

    def test_external_scheme_blocked_and_dispatched(self, make_session, browser_mgr, dispatcher, visa_card):
        session = make_session()
        session.start(visa_card, '250')

        allowed = browser_mgr.decide('upi://pay?pa=axis@upi&am=250')

        assert not allowed
        assert dispatcher.opened == ['upi://pay?pa=axis@upi&am=250']

    def test_web_navigation_allowed_without_reload(self, make_session, browser_mgr, dispatcher, visa_card):
        session = make_session()
        session.start(visa_card, '250')

        assert session.decide_navigation('https://bank.example/otp')
        assert browser_mgr.navigated == [session.settings.navigation.target_url]
        assert dispatcher.opened == []

    def test_guard_is_passive_after_cancel(self, make_session, dispatcher, visa_card):
        session = make_session()
        session.start(visa_card, '250')
        session.cancel()

        assert session.decide_navigation('upi://pay?pa=axis@upi')
        assert dispatcher.opened == []


class TestHostCallbacks:

    def test_external_navigation_dispatched_not_loaded(self, make_session, browser_mgr, dispatcher, visa_card):
        session = make_session()
        session.start(visa_card, '250')
        browser_mgr.navigated.clear()

        allowed = session.handle_navigation_request('upi://pay?pa=axis@upi&am=250')

        assert not allowed
        assert dispatcher.opened == ['upi://pay?pa=axis@upi&am=250']
        assert browser_mgr.navigated == []

    def test_in_page_navigation_loaded_by_host(self, make_session, browser_mgr, dispatcher, visa_card):
        session = make_session()
        session.start(visa_card, '250')
        browser_mgr.navigated.clear()

        assert session.handle_navigation_request('https://bank.example/otp')
        assert browser_mgr.navigated == ['https://bank.example/otp']
        assert dispatcher.opened == []

    def test_missing_app_notice(self, make_session, visa_card):
        session = make_session(dispatcher=RecordingDispatcher(fail=True))
        session.start(visa_card, '250')

        session.handle_navigation_request('phonepe://pay')

        assert session.notices == [APP_NOT_FOUND_NOTICE]

    def test_messages_routed_by_type(self, make_session, dispatcher, visa_card):
        session = make_session()
        session.start(visa_card, '250')

        session.handle_message({'type': 'LOG', 'msg': '👻 typed email'})
        session.handle_message({'type': 'NAVIGATE', 'url': 'gpay://upi/pay'})
        session.handle_message('garbage')

        assert ('👻 typed email', 'info') in session.logs
        assert dispatcher.opened == ['gpay://upi/pay']
        assert session.receiver.received == 1


class TestCompletion:

    def test_success_url_completes_once(self, make_session, browser_mgr, vault, visa_card):
        session = make_session()
        gen = session.start(visa_card, '250')

        record = session.handle_navigation_state('https://pgi.billdesk.com/pay/Success')
        again = session.handle_navigation_state('https://pgi.billdesk.com/pay/success')

        assert record is not None and again is None
        assert session.completed == [record]
        assert vault.get_history() == [record]
        assert (record.bank_name, record.amount) == ('Axis', '250')
        assert browser_mgr.closed == [browser_mgr.tab]
        assert not session.guard.is_current(gen)
        assert not session.is_active

    def test_poll_once_detects_url_change_and_drains(self, make_session, browser_mgr, vault, visa_card):
        session = make_session()
        gen = session.start(visa_card, '250')
        browser_mgr.outbox = [{'type': 'LOG', 'msg': 'state -> DONE'}]
        browser_mgr.url = 'https://pgi.billdesk.com/otp'

        session.poll_once(gen)

        assert ('state -> DONE', 'info') in session.logs
        assert session.is_active

        browser_mgr.url = 'https://merchant.example/payment/success'
        session.poll_once(gen)

        assert len(vault.get_history()) == 1

    def test_watch_exits_when_cancelled(self, make_session, visa_card):
        session = make_session()
        gen = session.start(visa_card, '250')
        session.cancel()

        session._watch(gen)


class TestCancel:

    def test_cancel_invalidates_and_closes(self, make_session, browser_mgr, visa_card):
        session = make_session()
        gen = session.start(visa_card, '250')

        session.cancel()

        assert not session.guard.is_current(gen)
        assert browser_mgr.generations == [session.guard.current]
        assert browser_mgr.closed == [browser_mgr.tab]
        assert session.handle_navigation_state('https://x/success') is None
        assert session.completed == []

    def test_cancel_without_attempt_is_noop(self, make_session, browser_mgr):
        make_session().cancel()

        assert browser_mgr.closed == []

    def test_navigation_after_cancel_not_loaded(self, make_session, browser_mgr, visa_card):
        session = make_session()
        session.start(visa_card, '250')
        session.cancel()
        browser_mgr.navigated.clear()

        session.handle_navigation_request('https://bank.example/otp')

        assert browser_mgr.navigated == []
