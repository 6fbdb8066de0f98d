"""Shared test fixtures and fakes."""

from __future__ import annotations

import io

import pytest

from ads_connect.core.data_models import DeviceRecord
from ads_connect.providers.base_provider import BaseRouteProvider
from ads_connect.utils.error_handler import LaunchError
from ads_connect.utils.input_reader import KeySource
from ads_connect.utils.logger import Logger, LogLevel


class FakeClock:
    """Monotonic clock advanced only by sleep()."""

    def __init__(self, start: float = 100.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class ScriptedKeySource(KeySource):
    """Key source delivering (at_time, key) events against a FakeClock."""

    def __init__(self, clock: FakeClock, events=()):
        self.clock = clock
        self.events = list(events)
        self.entered = 0
        self.exited = 0

    def __enter__(self):
        self.entered += 1
        return self

    def __exit__(self, *exc_info):
        self.exited += 1
        return None

    def key_available(self) -> bool:
        return bool(self.events) and self.events[0][0] <= self.clock()

    def read_key(self):
        return self.events.pop(0)[1]


class ScriptedReader:
    """Stands in for TimeoutInputReader, replaying queued answers."""

    def __init__(self, answers=()):
        self.answers = list(answers)
        self.calls: list[tuple[float, bool]] = []

    def read_line(self, timeout_seconds, allow_empty_as_refresh=False):
        self.calls.append((timeout_seconds, allow_empty_as_refresh))
        if not self.answers:
            return "exit"
        return self.answers.pop(0)


class FakeProvider(BaseRouteProvider):
    """Provider returning queued poll results; exceptions are raised."""

    def __init__(self, polls=(), local_id=None):
        super().__init__()
        self.polls = list(polls)
        self.local_id = local_id
        self.calls = 0

    def list_routes(self):
        self.calls += 1
        result = self.polls.pop(0) if self.polls else []
        if isinstance(result, Exception):
            raise result
        return list(result)

    def local_network_id(self):
        return self.local_id


class RecordingLauncher:
    """ProcessLauncher replacement recording every call."""

    def __init__(self, fail: set[str] | None = None):
        self.fail = fail or set()
        self.calls: list[tuple[str, object]] = []

    def _record(self, kind, payload):
        self.calls.append((kind, payload))
        if kind in self.fail:
            raise LaunchError(f"{kind} failed")

    def open_url(self, url):
        self._record("open_url", url)

    def spawn(self, command):
        self._record("spawn", list(command))

    def spawn_detached_terminal(self, command):
        self._record("terminal", list(command))

    def run(self, command, timeout=15.0):
        self._record("run", list(command))

    def kinds(self):
        return [kind for kind, _ in self.calls]


@pytest.fixture
def quiet_logger() -> Logger:
    """Logger writing to in-memory streams."""
    return Logger("test", min_level=LogLevel.DEBUG, stream=io.StringIO(), error_stream=io.StringIO())


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def win_device() -> DeviceRecord:
    return DeviceRecord(name="A", address="192.168.1.10", network_id="5.1.1.1.1.1", os_tag="Win10")


@pytest.fixture
def bsd_device() -> DeviceRecord:
    return DeviceRecord(name="B", address="192.168.1.20", network_id="5.2.2.2.1.1", os_tag="TcBSD22")


@pytest.fixture
def ce_device() -> DeviceRecord:
    return DeviceRecord(name="C", address="192.168.1.30", network_id="5.3.3.3.1.1", os_tag="CE (7.0)")


@pytest.fixture
def linux_device() -> DeviceRecord:
    return DeviceRecord(
        name="L", address="192.168.1.40", network_id="5.4.4.4.1.1", os_tag="Beckhoff RT Linux"
    )
