"""
Console presentation of the route table, menus and operator messages.

The renderer never mutates snapshot data. It writes to an injectable stream
so the fixed-width output can be asserted on in tests.
"""

import sys
from typing import Callable, List, Optional, TextIO

from colorama import Cursor, Fore, Style
from colorama.ansi import clear_screen

from ..core.data_models import CapabilityProfile, DeviceRecord, DiscoverySnapshot

COLUMNS = ("No", "Name", "Address", "AMS Net ID", "OS")
COLUMN_WIDTHS = (4, 24, 16, 24, 20)
UNSUPPORTED_FLAG = "[unsupported]"


def _fit(value: str, width: int) -> str:
    value = str(value)
    if len(value) > width:
        value = value[: width - 1] + "~"
    return f"{value:<{width}}"


def format_row(values: List[str], widths=COLUMN_WIDTHS) -> str:
    """
    Format one table row with fixed-width columns.

    Args:
        values: Cell values, one per column
        widths: Column widths

    Returns:
        The row without colour codes
    """
    return " | ".join(_fit(value, width) for value, width in zip(values, widths)).rstrip()


def device_row(index: int, device: DeviceRecord) -> str:
    return format_row([str(index), device.name, device.address, device.network_id, device.os_tag])


class ConsoleRenderer:
    """Draws the console screens."""

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        is_recognized: Callable[[str], bool] = lambda os_tag: True,
        clear: bool = True,
    ):
        """
        Args:
            stream: Output stream (default: stdout)
            is_recognized: Predicate used to flag unsupported OS tags
            clear: Clear the screen before drawing full screens
        """
        self._stream = stream
        self.is_recognized = is_recognized
        self.clear = clear

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def _write(self, text: str = "") -> None:
        self.stream.write(text + "\n")

    def _clear_screen(self) -> None:
        if self.clear:
            self.stream.write(clear_screen() + Cursor.POS(1, 1))

    def _header(self, subtitle: str) -> None:
        self._write(f"{Fore.BLUE}{Style.BRIGHT}ADS Connect{Style.RESET_ALL} {Style.DIM}{subtitle}{Style.RESET_ALL}")
        self._write()

    def render_table(self, snapshot: DiscoverySnapshot, timeout_seconds: float) -> None:
        """Draw the full route table followed by the selection prompt."""
        self._clear_screen()
        self._header(f"{len(snapshot)} target(s), refreshing every {timeout_seconds:g}s")

        self._write(f"{Style.BRIGHT}{format_row(list(COLUMNS))}{Style.RESET_ALL}")
        self._write(f"{Style.DIM}{'-+-'.join('-' * width for width in COLUMN_WIDTHS)}{Style.RESET_ALL}")
        for index, device in enumerate(snapshot, start=1):
            row = device_row(index, device)
            if self.is_recognized(device.os_tag):
                self._write(row)
            else:
                self._write(f"{Fore.YELLOW}{row} {UNSUPPORTED_FLAG}{Style.RESET_ALL}")

        self._write()
        self.stream.write("Select a target by number, or type 'exit' to quit: ")
        self.stream.flush()

    def render_no_targets(self, timeout_seconds: float) -> None:
        """Explain that no remote routes were found."""
        self._clear_screen()
        self._header("no targets")
        self._write(f"{Fore.YELLOW}No remote ADS routes found.{Style.RESET_ALL}")
        self._write("Add a route to the target system or check that it is powered and reachable.")
        self._write(f"Searching again in {timeout_seconds:g}s.")
        self._write()
        self.stream.write("Press Enter to refresh now, or type 'exit' to quit: ")
        self.stream.flush()

    def render_menu(self, device: DeviceRecord, profile: CapabilityProfile) -> None:
        """Draw the connection menu for one classified device."""
        self._clear_screen()
        self._header(f"{device.name} ({device.address})")
        self._write(f"Platform:        {profile.family.value}")
        self._write(f"Management page: {profile.management_url}")
        self._write()
        for index, action in enumerate(profile.actions, start=1):
            note = profile.annotations.get(action)
            line = f"  {index}. {action.label}"
            if note and "unavailable" in note:
                self._write(f"{Style.DIM}{line} ({note}){Style.RESET_ALL}")
            elif note:
                self._write(f"{line} ({note})")
            else:
                self._write(line)
        self._write()
        self.stream.write("Choose an action: ")
        self.stream.flush()

    def render_warning(self, message: str) -> None:
        self._write(f"{Fore.YELLOW}{message}{Style.RESET_ALL}")
        self.stream.flush()

    def render_info(self, message: str) -> None:
        self._write(message)
        self.stream.flush()

    def render_prompt(self, message: str) -> None:
        self.stream.write(message)
        self.stream.flush()
