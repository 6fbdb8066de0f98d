"""Tests for the command line entry point."""

from __future__ import annotations

import signal
from unittest.mock import patch

import pytest

from ads_connect.main import EXIT_INTERRUPTED, ADSConnectApp, create_argument_parser, main
from ads_connect.providers import PowerShellRouteProvider, StaticRouteProvider


@pytest.fixture
def app():
    return ADSConnectApp(install_signal_handlers=False)


@pytest.fixture
def routes_file(tmp_path):
    path = tmp_path / "routes.yml"
    path.write_text("routes: []\n", encoding="utf-8")
    return str(path)


def _args(*argv):
    return create_argument_parser().parse_args(list(argv))


class TestArgumentParser:
    def test_defaults(self):
        args = _args()
        assert args.timeout is None
        assert args.routes_file is None
        assert args.skip_checks is False

    def test_non_positive_timeout_is_rejected(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["--timeout", "0"])
        assert exc_info.value.code == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            main(["--version"])
        assert "ADS Connect" in capsys.readouterr().out


class TestLoadConfig:
    def test_cli_overrides_config(self, app, tmp_path, routes_file):
        args = _args(
            "--config", str(tmp_path / "missing.yml"),
            "--timeout", "3",
            "--user", "operator",
            "--password", "pw",
            "--winscp-path", "/opt/WinSCP.exe",
            "--cerhost-path", "/opt/CERHOST.exe",
            "--routes-file", routes_file,
        )
        config = app.load_config(args)
        assert config.console.timeout_seconds == 3
        assert config.credentials.user == "operator"
        assert config.credentials.password == "pw"
        assert config.tools.winscp_path == "/opt/WinSCP.exe"
        assert config.tools.cerhost_path == "/opt/CERHOST.exe"
        assert config.provider.type == "file"
        assert config.provider.routes_file == routes_file

    def test_without_overrides_uses_bundled_defaults(self, app):
        config = app.load_config(_args())
        assert config.console.timeout_seconds == 10
        assert config.provider.type == "powershell"


class TestPreflight:
    def test_routes_file_present(self, app, routes_file):
        config = app.load_config(_args("--routes-file", routes_file))
        assert app._perform_preflight_checks(config) is True

    def test_routes_file_missing(self, app, tmp_path):
        config = app.load_config(_args("--routes-file", str(tmp_path / "none.yml")))
        assert app._perform_preflight_checks(config) is False

    def test_powershell_missing(self, app):
        config = app.load_config(_args())
        with patch("ads_connect.main.find_powershell", return_value=None):
            assert app._perform_preflight_checks(config) is False

    def test_failed_checks_stop_the_run(self, app, tmp_path):
        assert app.run(_args("--routes-file", str(tmp_path / "none.yml"))) == 1


class TestWiring:
    def test_file_provider(self, app, routes_file):
        config = app.load_config(_args("--routes-file", routes_file))
        assert isinstance(app.build_provider(config), StaticRouteProvider)

    def test_powershell_provider(self, app):
        provider = app.build_provider(app.load_config(_args()))
        assert isinstance(provider, PowerShellRouteProvider)
        assert provider.timeout == 30

    def test_build_loop(self, app, routes_file):
        config = app.load_config(_args("--routes-file", routes_file, "--timeout", "4"))
        loop = app.build_loop(config)
        assert loop.timeout_seconds == 4
        assert loop.dispatcher.confirm == loop.confirm
        assert loop.reader.poll_interval == pytest.approx(0.05)

    def test_run_exits_cleanly(self, app, routes_file):
        args = _args("--routes-file", routes_file)
        with patch("ads_connect.core.discovery_loop.DiscoveryLoop.run", return_value=0) as run:
            assert app.run(args) == 0
        run.assert_called_once()

    def test_file_provider_without_routes_file(self, app, tmp_path):
        config_path = tmp_path / "ads_connect.yml"
        config_path.write_text("provider:\n  type: file\n", encoding="utf-8")
        assert app.run(_args("--config", str(config_path), "--skip-checks")) == 1


class TestInterrupts:
    def test_sigint_exits_with_interrupt_status(self, app):
        with pytest.raises(SystemExit) as exc_info:
            app._signal_handler(signal.SIGINT, None)
        assert exc_info.value.code == EXIT_INTERRUPTED == 130

    def test_sigterm_exits_cleanly(self, app):
        with pytest.raises(SystemExit) as exc_info:
            app._signal_handler(signal.SIGTERM, None)
        assert exc_info.value.code == 0

    def test_second_signal_forces_exit(self, app):
        with pytest.raises(SystemExit):
            app._signal_handler(signal.SIGINT, None)
        with pytest.raises(SystemExit) as exc_info:
            app._signal_handler(signal.SIGINT, None)
        assert exc_info.value.code == 1

    def test_keyboard_interrupt_during_loop(self, app, routes_file):
        args = _args("--routes-file", routes_file)
        with patch("ads_connect.core.discovery_loop.DiscoveryLoop.run", side_effect=KeyboardInterrupt):
            assert app.run(args) == 130
