"""Tests for ads_connect.config.config_loader."""

from __future__ import annotations

import textwrap

from ads_connect.config.config_loader import AppConfig, ConfigLoader


def _write(tmp_path, content):
    path = tmp_path / "ads_connect.yml"
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


class TestConfigLoader:
    def test_bundled_config_matches_defaults(self, quiet_logger):
        assert ConfigLoader(logger=quiet_logger).load() == AppConfig()

    def test_missing_file_uses_defaults(self, tmp_path, quiet_logger):
        config = ConfigLoader(str(tmp_path / "nope.yml"), logger=quiet_logger).load()
        assert config == AppConfig()
        assert "not found" in quiet_logger.stream.getvalue()

    def test_invalid_yaml_uses_defaults(self, tmp_path, quiet_logger):
        path = _write(tmp_path, "console: [unclosed\n")
        assert ConfigLoader(str(path), logger=quiet_logger).load() == AppConfig()

    def test_non_mapping_uses_defaults(self, tmp_path, quiet_logger):
        path = _write(tmp_path, "- just\n- a list\n")
        assert ConfigLoader(str(path), logger=quiet_logger).load() == AppConfig()

    def test_values_are_loaded(self, tmp_path, quiet_logger):
        path = _write(tmp_path, """
            console:
              timeout_seconds: 5
              message_pause_seconds: 0
            credentials:
              user: operator
              password: secret
            tools:
              winscp_path: /opt/winscp/WinSCP.exe
            remote_display:
              port: 9870
            provider:
              type: file
              routes_file: routes.yml
        """)
        config = ConfigLoader(str(path), logger=quiet_logger).load()
        assert config.console.timeout_seconds == 5
        assert config.console.message_pause_seconds == 0
        assert config.console.poll_interval_ms == 50
        assert config.credentials.user == "operator"
        assert config.credentials.password == "secret"
        assert config.tools.winscp_path == "/opt/winscp/WinSCP.exe"
        assert config.tools.rdp_client == "mstsc"
        assert config.remote_display.port == 9870
        assert config.provider.type == "file"
        assert config.provider.routes_file == "routes.yml"

    def test_invalid_values_fall_back_per_field(self, tmp_path, quiet_logger):
        path = _write(tmp_path, """
            console:
              timeout_seconds: -3
              poll_interval_ms: fast
              message_pause_seconds: -1
            remote_display:
              port: 70000
            provider:
              type: snmp
        """)
        config = ConfigLoader(str(path), logger=quiet_logger).load()
        assert config.console.timeout_seconds == 10
        assert config.console.poll_interval_ms == 50
        assert config.console.message_pause_seconds == 2.0
        assert config.remote_display.port == 987
        assert config.provider.type == "powershell"
        assert "Invalid provider type" in quiet_logger.stream.getvalue()

    def test_invalid_section_type(self, tmp_path, quiet_logger):
        path = _write(tmp_path, "console: 12\n")
        config = ConfigLoader(str(path), logger=quiet_logger).load()
        assert config.console.timeout_seconds == 10
