"""
诊断通道单元测试
"""

import json

from ghostpay.core.diagnostics import (
    DiagnosticsChannel, DiagnosticsReceiver, make_log_message, LOG_KIND
)


class TestDiagnosticsChannel:

    def test_emit_wraps_message(self, sink):
        DiagnosticsChannel(sink).emit('layout SPLIT_BOXES')

        assert sink.messages == [{'type': LOG_KIND, 'msg': '👻 layout SPLIT_BOXES'}]

    def test_emit_without_sink_is_noop(self):
        DiagnosticsChannel().emit('nothing listens')

    def test_sink_failure_is_invisible_to_sender(self):
        def broken(message):
            raise RuntimeError('host torn down')

        DiagnosticsChannel(broken).emit('lost')


class TestDiagnosticsReceiver:

    def test_receive_dict_forwards_to_ui(self):
        seen = []
        receiver = DiagnosticsReceiver(ui_callback=lambda m, l: seen.append((m, l)))

        text = receiver.receive(make_log_message('typed email'))

        assert text == 'typed email'
        assert seen == [('typed email', 'info')]
        assert receiver.received == 1

    def test_receive_json_string(self):
        receiver = DiagnosticsReceiver()

        assert receiver.receive(json.dumps({'type': 'LOG', 'msg': 'hi'})) == 'hi'

    def test_ignores_other_types_and_garbage(self):
        receiver = DiagnosticsReceiver()

        assert receiver.receive({'type': 'NAVIGATE', 'url': 'upi://pay'}) is None
        assert receiver.receive('not json') is None
        assert receiver.receive('[1, 2]') is None
        assert receiver.receive(None) is None
        assert receiver.received == 0
