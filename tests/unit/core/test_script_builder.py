"""
注入脚本构建器单元测试
"""

import json

from ghostpay.core.script_builder import build_engine_script, build_payload
from ghostpay.domain.entities import CardRecord, FillContext
from ghostpay.infrastructure.js import ScriptStore, PAYLOAD_PLACEHOLDER


def extract_payload(script: str) -> dict:
    start = script.index('const P = ') + len('const P = ')
    end = script.index(';\n', start)
    return json.loads(script[start:end].replace('<\\/', '</'))


class TestBuildPayload:

    def test_values_and_timings(self, fill_context, fast_settings):
        fast_settings.locator.retry_interval = 0.5
        fast_settings.simulator.keystroke_delay_max = 0.1

        payload = build_payload(fill_context, fast_settings, 7)

        assert payload['generation'] == 7
        assert payload['card'] == {'number': '4598123456789012'}
        assert payload['amount'] == '250'
        assert payload['locator']['retry_interval_ms'] == 500
        assert payload['simulator']['delay_max_ms'] == 100
        assert payload['split_box_rule']['max_length'] == 4
        assert payload['poller']['marker'] == 'UPI'
        assert 'cardNumber' in payload['selectors']

    def test_card_metadata_not_exposed(self, fill_context, fast_settings):
        payload = build_payload(fill_context, fast_settings, 1)

        assert 'holder_name' not in json.dumps(payload)
        assert '08/29' not in json.dumps(payload)


class TestBuildEngineScript:

    def test_placeholder_replaced(self, fill_context, fast_settings):
        script = build_engine_script(fill_context, fast_settings, 3)

        assert PAYLOAD_PLACEHOLDER not in script
        assert extract_payload(script)['generation'] == 3

    def test_pure_and_deterministic(self, fill_context, fast_settings):
        template = ScriptStore.get_ghost_engine_js()

        first = build_engine_script(fill_context, fast_settings, 3)
        second = build_engine_script(fill_context, fast_settings, 3)

        assert first == second
        assert ScriptStore.get_ghost_engine_js() == template

    def test_script_breaking_values_are_escaped(self, visa_card, fast_settings):
        context = FillContext.create(visa_card, '1', email='</script><b>@x.in')

        script = build_engine_script(context, fast_settings, 1)

        assert '</script><b>' not in script
        assert extract_payload(script)['email'] == '</script><b>@x.in'
