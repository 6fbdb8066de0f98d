"""Tests for the route discovery providers."""

from __future__ import annotations

import json
import subprocess
import textwrap
from unittest.mock import MagicMock, patch

import pytest

from ads_connect.providers import PowerShellRouteProvider, StaticRouteProvider
from ads_connect.utils.error_handler import ProviderError, ToolMissingError

ROUTE = {
    "Name": "CX-51C3A2",
    "Address": "192.168.1.20",
    "NetId": "5.81.195.162.1.1",
    "RTSystem": "TcBSD (13.2)",
    "IsLocal": False,
}


def _completed(stdout="", returncode=0, stderr=""):
    return MagicMock(stdout=stdout, stderr=stderr, returncode=returncode)


class TestParseRoute:
    def test_powershell_property_names(self):
        record = PowerShellRouteProvider().parse_route(ROUTE)
        assert record.name == "CX-51C3A2"
        assert record.address == "192.168.1.20"
        assert record.network_id == "5.81.195.162.1.1"
        assert record.os_tag == "TcBSD (13.2)"
        assert record.is_local is False

    def test_snake_case_keys(self):
        record = PowerShellRouteProvider().parse_route(
            {"name": "x", "address": "10.0.0.1", "net_id": "1.1.1.1.1.1", "os": "Win10", "is_local": "true"}
        )
        assert record.os_tag == "Win10"
        assert record.is_local is True

    def test_missing_net_id(self):
        with pytest.raises(ProviderError):
            PowerShellRouteProvider().parse_route({"Name": "x"})

    def test_non_mapping(self):
        with pytest.raises(ProviderError):
            PowerShellRouteProvider().parse_route(["not", "a", "route"])


class TestPowerShellProvider:
    def test_parse_list(self):
        records = PowerShellRouteProvider().parse_results(json.dumps([ROUTE, dict(ROUTE, NetId="2.2.2.2.1.1")]))
        assert len(records) == 2

    def test_single_route_is_an_object(self):
        assert len(PowerShellRouteProvider().parse_results(json.dumps(ROUTE))) == 1

    @pytest.mark.parametrize("raw", ["", "   \n", None])
    def test_empty_output(self, raw):
        assert PowerShellRouteProvider().parse_results(raw) == []

    @pytest.mark.parametrize("raw", ["not json", "42"])
    def test_bad_output(self, raw):
        with pytest.raises(ProviderError):
            PowerShellRouteProvider().parse_results(raw)

    def test_list_routes_runs_get_ads_route(self):
        provider = PowerShellRouteProvider(executable="pwsh", timeout=5)
        with patch("subprocess.run", return_value=_completed(json.dumps([ROUTE]))) as run:
            records = provider.list_routes()
        assert records[0].name == "CX-51C3A2"
        command = run.call_args[0][0]
        assert command[0] == "pwsh"
        assert "Get-AdsRoute" in command[-1]
        assert run.call_args[1]["timeout"] == 5

    def test_non_zero_exit(self):
        provider = PowerShellRouteProvider(executable="pwsh")
        with patch("subprocess.run", return_value=_completed(returncode=1, stderr="module not found")):
            with pytest.raises(ProviderError, match="module not found"):
                provider.list_routes()

    def test_timeout(self):
        provider = PowerShellRouteProvider(executable="pwsh")
        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired("pwsh", 30)):
            with pytest.raises(ProviderError, match="timed out"):
                provider.list_routes()

    def test_missing_powershell(self):
        provider = PowerShellRouteProvider()
        with patch("shutil.which", return_value=None):
            with pytest.raises(ToolMissingError):
                provider.list_routes()

    def test_missing_module(self):
        provider = PowerShellRouteProvider(executable="pwsh")
        stderr = "Import-Module : The specified module 'TcXaeMgmt' was not loaded"
        with patch("subprocess.run", return_value=_completed(returncode=1, stderr=stderr)):
            with pytest.raises(ToolMissingError) as exc_info:
                provider.list_routes()
        assert exc_info.value.tool_name == "TcXaeMgmt"

    def test_local_net_id_is_cached(self):
        provider = PowerShellRouteProvider(executable="pwsh")
        with patch("subprocess.run", return_value=_completed("5.80.201.232.1.1\r\n")) as run:
            assert provider.local_network_id() == "5.80.201.232.1.1"
            assert provider.local_network_id() == "5.80.201.232.1.1"
        assert run.call_count == 1

    def test_local_net_id_failure_returns_none(self):
        provider = PowerShellRouteProvider(executable="pwsh")
        with patch("subprocess.run", return_value=_completed(returncode=1)):
            assert provider.local_network_id() is None


class TestStaticProvider:
    def test_reads_routes_and_local_id(self, tmp_path):
        path = tmp_path / "routes.yml"
        path.write_text(textwrap.dedent("""
            local_net_id: 5.80.201.232.1.1
            routes:
              - name: CX-51C3A2
                address: 192.168.1.20
                net_id: 5.81.195.162.1.1
                os: TcBSD (13.2)
        """), encoding="utf-8")
        provider = StaticRouteProvider(str(path))
        records = provider.list_routes()
        assert [r.network_id for r in records] == ["5.81.195.162.1.1"]
        assert provider.local_network_id() == "5.80.201.232.1.1"

    def test_file_is_reread_on_every_poll(self, tmp_path):
        path = tmp_path / "routes.yml"
        path.write_text("routes: []\n", encoding="utf-8")
        provider = StaticRouteProvider(str(path))
        assert provider.list_routes() == []
        path.write_text("routes:\n  - {name: a, address: 10.0.0.1, net_id: 1.1.1.1.1.1}\n", encoding="utf-8")
        assert len(provider.list_routes()) == 1

    def test_empty_file(self, tmp_path):
        path = tmp_path / "routes.yml"
        path.write_text("", encoding="utf-8")
        provider = StaticRouteProvider(str(path))
        assert provider.list_routes() == []
        assert provider.local_network_id() is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(ProviderError):
            StaticRouteProvider(str(tmp_path / "missing.yml")).list_routes()

    def test_routes_must_be_a_list(self, tmp_path):
        path = tmp_path / "routes.yml"
        path.write_text("routes: 3\n", encoding="utf-8")
        with pytest.raises(ProviderError):
            StaticRouteProvider(str(path)).list_routes()
