"""
Launching of external programs (browser, SSH, RDP, WinSCP, CERHost).

Launches are fire-and-forget: the console waits for a program to start, not
to exit. Any failure to start is raised as LaunchError.
"""

import shutil
import subprocess
import sys
import webbrowser
from typing import List, Optional, Sequence

from .error_handler import LaunchError
from .logger import Logger, get_logger

# Terminal emulators tried on POSIX, with the flag introducing the command
_TERMINALS = (
    ("x-terminal-emulator", "-e"),
    ("gnome-terminal", "--"),
    ("konsole", "-e"),
    ("xterm", "-e"),
)


class ProcessLauncher:
    """Starts external programs without waiting for them."""

    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger or get_logger(__name__)

    def open_url(self, url: str) -> None:
        """
        Open a URL with the operating system's default handler.

        Raises:
            LaunchError: If no browser could be started
        """
        self.logger.debug(f"Opening {url}")
        try:
            opened = webbrowser.open(url)
        except webbrowser.Error as e:
            raise LaunchError(f"Could not open {url}: {e}") from e
        if not opened:
            raise LaunchError(f"No browser available to open {url}")

    def spawn(self, command: Sequence[str]) -> None:
        """
        Start a program and return immediately.

        Raises:
            LaunchError: If the program could not be started
        """
        self.logger.debug(f"Starting: {' '.join(command)}")
        try:
            subprocess.Popen(list(command))
        except (OSError, ValueError) as e:
            raise LaunchError(f"Could not start {command[0]}: {e}") from e

    def spawn_detached_terminal(self, command: Sequence[str]) -> None:
        """
        Start a console program in its own terminal window.

        Raises:
            LaunchError: If no terminal is available or the start failed
        """
        self.logger.debug(f"Starting in new console: {' '.join(command)}")
        try:
            if sys.platform == "win32":
                subprocess.Popen(
                    list(command),
                    creationflags=getattr(subprocess, "CREATE_NEW_CONSOLE", 0),
                )
            else:
                subprocess.Popen(self._terminal_command(command), start_new_session=True)
        except (OSError, ValueError) as e:
            raise LaunchError(f"Could not start {command[0]}: {e}") from e

    def run(self, command: Sequence[str], timeout: float = 15.0) -> None:
        """
        Run a short helper command to completion.

        Raises:
            LaunchError: If the command could not run or exited non-zero
        """
        self.logger.debug(f"Running: {command[0]}")
        try:
            result = subprocess.run(
                list(command),
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise LaunchError(f"{command[0]} timed out after {timeout}s") from e
        except (OSError, ValueError) as e:
            raise LaunchError(f"Could not run {command[0]}: {e}") from e
        if result.returncode != 0:
            detail = (result.stderr or result.stdout or "").strip()
            raise LaunchError(f"{command[0]} failed with code {result.returncode}: {detail}")

    def _terminal_command(self, command: Sequence[str]) -> List[str]:
        for terminal, flag in _TERMINALS:
            path = shutil.which(terminal)
            if path:
                return [path, flag, *command]
        raise LaunchError("No terminal emulator found to start the session")
