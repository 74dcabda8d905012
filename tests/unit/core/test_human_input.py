"""
人工输入模拟器单元测试
"""

import asyncio
import random
import pytest

from ghostpay.config import SimulatorConfig
from ghostpay.core.human_input import HumanInputSimulator, KEY_EVENTS
from ghostpay.errors import StaleGenerationError
from conftest import FakeElement


@pytest.fixture
def simulator(guard, channel):
    config = SimulatorConfig(keystroke_delay_min=0.0, keystroke_delay_max=0.0)
    return HumanInputSimulator(config, guard, channel)


class TestTypeText:

    def test_event_sequence(self, simulator, guard):
        element = FakeElement(attrs={'name': 'email'}, value='stale')
        gen = guard.advance()

        ok = asyncio.run(simulator.type_text(element, 'ab', gen))

        assert ok
        assert element.value == 'ab'
        expected = ['focus', 'input'] + list(KEY_EVENTS) * 2 + ['blur']
        assert element.event_kinds() == expected
        assert element.events[2] == ('keydown', 'a')
        assert element.writes == ['', 'a', 'ab']

    def test_typing_twice_is_idempotent(self, simulator, guard):
        element = FakeElement(attrs={'name': 'phone'})
        gen = guard.advance()

        asyncio.run(simulator.type_text(element, '98765', gen))
        asyncio.run(simulator.type_text(element, '98765', gen))

        assert element.value == '98765'

    def test_mismatch_is_reported(self, simulator, guard, sink):
        element = FakeElement(attrs={'name': 'amount'})
        element.reject_writes = True
        gen = guard.advance()

        ok = asyncio.run(simulator.type_text(element, '250', gen, label='amount'))

        assert not ok
        assert sink.contains('value mismatch on amount')

    def test_detached_element_is_reported(self, simulator, guard, sink):
        element = FakeElement(attrs={'name': 'email'})
        element.attached = False
        gen = guard.advance()

        ok = asyncio.run(simulator.type_text(element, 'x', gen))

        assert not ok
        assert sink.contains('element detached')

    def test_delays_fall_in_configured_range(self, guard):
        config = SimulatorConfig(keystroke_delay_min=0.05, keystroke_delay_max=0.10)
        simulator = HumanInputSimulator(config, guard, rng=random.Random(7))

        delays = [simulator._keystroke_delay() for _ in range(50)]

        assert all(0.05 <= d <= 0.10 for d in delays)

    def test_no_pause_after_last_keystroke(self, guard):
        pauses = []

        async def fake_pause(generation, seconds):
            pauses.append(seconds)

        simulator = HumanInputSimulator(SimulatorConfig(), guard)
        guard.pause = fake_pause
        gen = guard.advance()

        asyncio.run(simulator.type_text(FakeElement(), '1234', gen))

        assert len(pauses) == 3

    def test_stale_generation_aborts(self, simulator, guard):
        gen = guard.advance()
        guard.invalidate()
        element = FakeElement()

        with pytest.raises(StaleGenerationError):
            asyncio.run(simulator.type_text(element, 'abc', gen))
        assert element.events == []


class TestPasteValue:

    def test_single_write_event_chain(self, simulator, guard):
        element = FakeElement(attrs={'maxlength': '4'})
        gen = guard.advance()

        ok = asyncio.run(simulator.paste_value(element, '4598', gen, label='box1'))

        assert ok
        assert element.writes == ['4598']
        assert element.event_kinds() == ['focus', 'input', 'change', 'blur']
