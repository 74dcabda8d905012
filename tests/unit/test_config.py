"""
配置模块单元测试
"""

import os
import pytest
from ghostpay.config import (
    LocatorConfig, SimulatorConfig, FillerConfig, PollerConfig, NavigationConfig,
    BrowserConfig, UIConfig, EngineSettings, DEFAULT_EXTERNAL_SCHEMES,
    locator_config, navigation_config,
    _get_env_float, _get_env_int, _get_env_str, get_engine_settings, reload_config
)


class TestConfigDataclasses:
    """配置数据类测试"""

    def test_locator_config_defaults(self):
        config = LocatorConfig()

        assert config.max_attempts == 5
        assert config.retry_interval == 0.5
        assert config.split_box_max_length == 4
        assert config.split_box_threshold == 8

    def test_simulator_config_defaults(self):
        config = SimulatorConfig()

        assert config.keystroke_delay_min == 0.05
        assert config.keystroke_delay_max == 0.10

    def test_filler_config_defaults(self):
        config = FillerConfig()

        assert config.group_delay == 0.1
        assert config.visa_token == 'VISA'
        assert config.other_network_token == 'MASTER'

    def test_poller_config_defaults(self):
        config = PollerConfig()

        assert (config.interval_min, config.interval_max) == (2.0, 3.0)
        assert config.marker == 'UPI'

    def test_navigation_config_defaults(self):
        config = NavigationConfig()

        assert config.success_keyword == 'success'
        assert 'upi://' in config.external_schemes
        assert 'intent://' in config.external_schemes
        assert config.target_url.startswith('https://')

    def test_browser_and_ui_defaults(self):
        assert BrowserConfig().engine_mode == 'drive'
        assert UIConfig().default_amount == '100'

    def test_configs_are_mutable(self):
        """配置应可修改"""
        config = LocatorConfig()
        config.max_attempts = 10

        assert config.max_attempts == 10

    def test_engine_settings_bundles_sections(self):
        settings = EngineSettings()

        assert isinstance(settings.locator, LocatorConfig)
        assert isinstance(settings.navigation, NavigationConfig)
        assert settings.navigation.external_schemes == DEFAULT_EXTERNAL_SCHEMES


class TestEnvironmentVariables:
    """环境变量测试"""

    def test_get_env_float_with_valid_value(self, monkeypatch):
        monkeypatch.setenv('TEST_FLOAT', '25.5')

        assert _get_env_float('TEST_FLOAT', 10.0) == 25.5

    def test_get_env_float_with_invalid_value(self, monkeypatch):
        """无效浮点数环境变量返回默认值"""
        monkeypatch.setenv('TEST_FLOAT', 'not_a_number')

        assert _get_env_float('TEST_FLOAT', 10.0) == 10.0

    def test_get_env_float_with_missing_key(self):
        assert _get_env_float('NONEXISTENT_KEY_12345', 42.0) == 42.0

    def test_get_env_int_with_invalid_value(self, monkeypatch):
        monkeypatch.setenv('TEST_INT', 'abc')

        assert _get_env_int('TEST_INT', 50) == 50

    def test_get_env_str_blank_falls_back(self, monkeypatch):
        monkeypatch.setenv('TEST_STR', '   ')

        assert _get_env_str('TEST_STR', 'default') == 'default'


class TestGlobalConfigs:
    """全局配置实例测试"""

    def test_global_instances_are_accessible(self):
        assert hasattr(locator_config, 'max_attempts')
        assert hasattr(navigation_config, 'external_schemes')

    def test_get_engine_settings(self):
        settings = get_engine_settings()

        assert isinstance(settings, EngineSettings)
        assert settings.poller.marker == 'UPI'


class TestReloadConfig:
    """配置重载测试"""

    def test_reload_config_reads_environment(self, monkeypatch):
        monkeypatch.setenv('GHOSTPAY_LOCATOR_ATTEMPTS', '9')
        monkeypatch.setenv('GHOSTPAY_POLL_MIN', '1.5')
        monkeypatch.setenv('GHOSTPAY_ENGINE_MODE', 'inject')

        reload_config()

        from ghostpay import config
        assert config.locator_config.max_attempts == 9
        assert config.poller_config.interval_min == 1.5
        assert config.browser_config.engine_mode == 'inject'

        monkeypatch.delenv('GHOSTPAY_LOCATOR_ATTEMPTS')
        monkeypatch.delenv('GHOSTPAY_POLL_MIN')
        monkeypatch.delenv('GHOSTPAY_ENGINE_MODE')
        reload_config()
        assert config.locator_config.max_attempts == 5
