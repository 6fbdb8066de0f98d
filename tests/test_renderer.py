"""Tests for ads_connect.utils.renderer."""

from __future__ import annotations

import io

from ads_connect.core.data_models import Action, DeviceRecord, DiscoverySnapshot
from ads_connect.core.device_classifier import DeviceClassifier
from ads_connect.utils.renderer import (
    COLUMN_WIDTHS,
    UNSUPPORTED_FLAG,
    ConsoleRenderer,
    device_row,
    format_row,
)


def _renderer(**kwargs):
    stream = io.StringIO()
    return ConsoleRenderer(stream=stream, clear=False, **kwargs), stream


class TestFormatRow:
    def test_fixed_width_columns(self):
        row = format_row(["1", "A", "10.0.0.1", "5.1.1.1.1.1", "Win10"])
        cells = row.split(" | ")
        assert [len(cell) for cell in cells[:-1]] == list(COLUMN_WIDTHS[:-1])
        assert cells[-1] == "Win10"

    def test_long_values_are_truncated(self):
        row = format_row(["1", "x" * 40])
        name_cell = row.split(" | ")[1]
        assert len(name_cell) == COLUMN_WIDTHS[1]
        assert name_cell.endswith("~")

    def test_device_row(self):
        device = DeviceRecord(name="PLC", address="10.0.0.1", network_id="5.1.1.1.1.1", os_tag="TcBSD")
        row = device_row(3, device)
        assert row.startswith("3   ")
        assert "PLC" in row and "5.1.1.1.1.1" in row and row.endswith("TcBSD")


class TestConsoleRenderer:
    def test_table_lists_rows_in_snapshot_order(self, win_device, bsd_device):
        renderer, stream = _renderer()
        renderer.render_table(DiscoverySnapshot(devices=(win_device, bsd_device)), 10)
        output = stream.getvalue()
        assert "2 target(s)" in output
        assert output.index(device_row(1, win_device)) < output.index(device_row(2, bsd_device))
        assert output.rstrip().endswith("type 'exit' to quit:")

    def test_unsupported_rows_are_flagged(self, win_device):
        odd = DeviceRecord(name="X", address="10.0.0.9", network_id="7.7.7.7.1.1", os_tag="Mystery")
        classifier = DeviceClassifier(prober=lambda *a: False)
        renderer, stream = _renderer(is_recognized=classifier.is_recognized)
        renderer.render_table(DiscoverySnapshot(devices=(win_device, odd)), 10)
        lines = stream.getvalue().splitlines()
        flagged = [line for line in lines if UNSUPPORTED_FLAG in line]
        assert len(flagged) == 1
        assert "Mystery" in flagged[0]

    def test_no_targets_screen(self):
        renderer, stream = _renderer()
        renderer.render_no_targets(5)
        output = stream.getvalue()
        assert "No remote ADS routes found." in output
        assert "Searching again in 5s." in output
        assert "Press Enter to refresh now" in output

    def test_menu_numbers_actions_and_shows_annotations(self, ce_device):
        profile = DeviceClassifier(prober=lambda *a: False).classify(ce_device)
        renderer, stream = _renderer()
        renderer.render_menu(ce_device, profile)
        output = stream.getvalue()
        assert f"  1. {Action.OPEN_MANAGEMENT_PAGE.label}" in output
        assert f"  2. {Action.START_REMOTE_DESKTOP.label}" in output
        assert profile.annotations[Action.START_REMOTE_DESKTOP] in output
        assert "https://192.168.1.30/config" in output

    def test_clear_screen_is_optional(self, win_device):
        stream = io.StringIO()
        ConsoleRenderer(stream=stream, clear=True).render_table(DiscoverySnapshot(devices=(win_device,)), 10)
        assert stream.getvalue().startswith("\x1b[2J")
