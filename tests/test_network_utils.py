"""Tests for ads_connect.utils.network_utils."""

from __future__ import annotations

import socket

import pytest

from ads_connect.utils.network_utils import format_url_host, is_valid_ip, probe_port


@pytest.fixture
def listening_port():
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen(1)
    yield server.getsockname()[1]
    server.close()


@pytest.fixture
def closed_port():
    # Bound but not listening: connections are refused
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    yield sock.getsockname()[1]
    sock.close()


class TestProbePort:
    def test_open_port(self, listening_port):
        assert probe_port("127.0.0.1", listening_port, 1000) is True

    def test_closed_port(self, closed_port):
        assert probe_port("127.0.0.1", closed_port, 500) is False

    @pytest.mark.parametrize("address,port", [("", 987), ("127.0.0.1", 70000), ("127.0.0.1", "abc")])
    def test_invalid_arguments(self, address, port):
        assert probe_port(address, port, 100) is False


class TestAddresses:
    def test_is_valid_ip(self):
        assert is_valid_ip("192.168.0.1")
        assert not is_valid_ip("256.1.1.1")
        assert not is_valid_ip("plc.local")

    @pytest.mark.parametrize("address,expected", [
        ("10.0.0.1", "10.0.0.1"),
        ("plc.local", "plc.local"),
        ("fe80::1", "[fe80::1]"),
        (" 10.0.0.1 ", "10.0.0.1"),
    ])
    def test_format_url_host(self, address, expected):
        assert format_url_host(address) == expected
