"""
Timeout-driven line input for the interactive console.

The reader collects keystrokes one at a time in a cooperative poll loop so
that the console can keep refreshing the route table while waiting for the
operator. Every read has a mandatory deadline that is checked on each tick.
"""

import codecs
import os
import sys
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, TextIO

REFRESH = "refresh"
EXIT = "exit"

ENTER_KEYS = ("\r", "\n")
BACKSPACE_KEYS = ("\b", "\x7f")
ESCAPE_KEY = "\x1b"


class KeySource(ABC):
    """
    Non-blocking source of single keystrokes.

    Implementations are context managers; the reader enters the source for
    the duration of one read so terminal modes are always restored.
    """

    def __enter__(self) -> "KeySource":
        return self

    def __exit__(self, *exc_info) -> None:
        return None

    @abstractmethod
    def key_available(self) -> bool:
        """Return True if a keystroke can be read without blocking."""

    @abstractmethod
    def read_key(self) -> Optional[str]:
        """Read one keystroke. None means a key that should be ignored."""


class WindowsKeySource(KeySource):
    """Console key source backed by msvcrt."""

    def __init__(self):
        import msvcrt

        self._msvcrt = msvcrt

    def key_available(self) -> bool:
        return bool(self._msvcrt.kbhit())

    def read_key(self) -> Optional[str]:
        ch = self._msvcrt.getwch()
        if ch in ("\x00", "\xe0"):
            # Function and arrow keys arrive as a two-character sequence
            self._msvcrt.getwch()
            return None
        return ch


class PosixKeySource(KeySource):
    """
    Key source switching a POSIX terminal to cbreak mode while active.

    Bytes are read unbuffered from the file descriptor so select() always
    reflects what is still pending. Once the stream reports end of input no
    further keys are offered.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream or sys.stdin
        self._tty_fd: Optional[int] = None
        self._old_attributes = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="ignore")
        self.at_eof = False

    def __enter__(self) -> "PosixKeySource":
        if not self._stream.isatty():
            return self
        import termios
        import tty

        fd = self._stream.fileno()
        self._old_attributes = termios.tcgetattr(fd)
        tty.setcbreak(fd)
        self._tty_fd = fd
        return self

    def __exit__(self, *exc_info) -> None:
        if self._tty_fd is None:
            return None
        import termios

        termios.tcsetattr(self._tty_fd, termios.TCSADRAIN, self._old_attributes)
        self._tty_fd = None
        self._old_attributes = None
        return None

    def _fileno(self) -> Optional[int]:
        try:
            return self._stream.fileno()
        except (AttributeError, OSError, ValueError):
            return None

    def _ready(self) -> bool:
        import select

        try:
            ready, _, _ = select.select([self._stream], [], [], 0.0)
        except (OSError, ValueError):
            return False
        return bool(ready)

    def key_available(self) -> bool:
        if self.at_eof:
            return False
        return self._ready()

    def _read_char(self) -> str:
        fd = self._fileno()
        if fd is None:
            ch = self._stream.read(1)
            if not ch:
                self.at_eof = True
            return ch

        # A multi-byte character arrives as consecutive bytes
        while True:
            data = os.read(fd, 1)
            if not data:
                self.at_eof = True
                return ""
            ch = self._decoder.decode(data)
            if ch or not self._ready():
                return ch

    def read_key(self) -> Optional[str]:
        ch = self._read_char()
        if not ch:
            return None
        if ch == ESCAPE_KEY and self._ready():
            # ANSI escape sequence (arrow keys etc.), drain and ignore
            while self._ready() and self._read_char():
                pass
            return None
        return ch


def default_key_source() -> KeySource:
    """Pick the key source for the current platform."""
    if sys.platform == "win32":
        return WindowsKeySource()
    return PosixKeySource()


class TimeoutInputReader:
    """
    Line reader with an inactivity deadline and basic line editing.

    Printable characters are appended and echoed, Backspace erases the last
    character, Escape clears the whole line and Enter completes it. The read
    ends on Enter or when the deadline elapses, whichever comes first.
    """

    def __init__(
        self,
        key_source: Optional[KeySource] = None,
        output: Optional[TextIO] = None,
        poll_interval: float = 0.05,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            key_source: Keystroke source, defaults to the platform console
            output: Stream used to echo input (default: stdout)
            poll_interval: Seconds to sleep between keystroke checks
            clock: Monotonic clock returning seconds
            sleep: Sleep function taking seconds
        """
        self.key_source = key_source or default_key_source()
        self._output = output
        self.poll_interval = poll_interval
        self.clock = clock
        self.sleep = sleep

    @property
    def output(self) -> TextIO:
        return self._output or sys.stdout

    def _echo(self, text: str) -> None:
        self.output.write(text)
        self.output.flush()

    def read_line(self, timeout_seconds: float, allow_empty_as_refresh: bool = False) -> str:
        """
        Collect one line of input within a deadline.

        Args:
            timeout_seconds: Inactivity deadline in seconds
            allow_empty_as_refresh: Return REFRESH when Enter is pressed on
                                    an empty line

        Returns:
            The trimmed line, REFRESH, or whatever was typed before the
            deadline (usually "")
        """
        buffer: List[str] = []
        deadline = self.clock() + max(timeout_seconds, 0)

        with self.key_source as keys:
            while True:
                while self.clock() < deadline and keys.key_available():
                    ch = keys.read_key()
                    if ch is None:
                        # Ignored key, yield to the deadline check
                        break
                    if ch in ENTER_KEYS:
                        self._echo("\n")
                        line = "".join(buffer).strip()
                        if not line and allow_empty_as_refresh:
                            return REFRESH
                        return line
                    if ch in BACKSPACE_KEYS:
                        if buffer:
                            buffer.pop()
                            self._echo("\b \b")
                    elif ch == ESCAPE_KEY:
                        if buffer:
                            self._echo("\b \b" * len(buffer))
                            buffer.clear()
                    elif ch.isprintable():
                        buffer.append(ch)
                        self._echo(ch)

                if self.clock() >= deadline:
                    if buffer:
                        self._echo("\n")
                    return "".join(buffer).strip()
                self.sleep(self.poll_interval)
