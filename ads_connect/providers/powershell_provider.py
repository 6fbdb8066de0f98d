"""
Route discovery through the TcXaeMgmt PowerShell module.

Runs Get-AdsRoute in a PowerShell child process and parses its JSON output.
"""

import json
import shutil
import subprocess
from typing import List, Optional

from .base_provider import BaseRouteProvider
from ..core.data_models import DeviceRecord
from ..utils.error_handler import ProviderError, ToolMissingError

MODULE_NAME = "TcXaeMgmt"

ROUTES_SCRIPT = (
    "Import-Module TcXaeMgmt -ErrorAction Stop; "
    "Get-AdsRoute -All | Select-Object "
    "@{n='Name';e={$_.Name}}, "
    "@{n='Address';e={\"$($_.Address)\"}}, "
    "@{n='NetId';e={\"$($_.NetId)\"}}, "
    "@{n='RTSystem';e={\"$($_.RTSystem)\"}}, "
    "@{n='IsLocal';e={[bool]$_.IsLocal}} "
    "| ConvertTo-Json -Compress"
)
LOCAL_NETID_SCRIPT = (
    "Import-Module TcXaeMgmt -ErrorAction Stop; "
    "[TwinCAT.Ads.AmsNetId]::Local.ToString()"
)


def find_powershell() -> Optional[str]:
    """Locate Windows PowerShell or PowerShell 7."""
    return shutil.which("powershell") or shutil.which("pwsh")


class PowerShellRouteProvider(BaseRouteProvider):
    """Polls the local ADS router with Get-AdsRoute."""

    def __init__(self, executable: Optional[str] = None, timeout: int = 30, logger=None):
        """
        Args:
            executable: PowerShell executable, located on PATH when omitted
            timeout: Seconds a single PowerShell call may take
            logger: Logger instance
        """
        super().__init__(logger)
        self.executable = executable
        self.timeout = timeout
        self._local_net_id: Optional[str] = None

    def _run_script(self, script: str) -> str:
        executable = self.executable or find_powershell()
        if not executable:
            raise ToolMissingError("PowerShell not found in PATH", tool_name="powershell")

        command = [executable, "-NoProfile", "-NonInteractive", "-Command", script]
        self._log_debug(f"Executing PowerShell: {script[:60]}...")
        try:
            process = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ProviderError(f"Get-AdsRoute timed out after {self.timeout} seconds") from e
        except OSError as e:
            raise ProviderError(f"Could not start PowerShell: {e}") from e

        if process.returncode != 0:
            detail = (process.stderr or "").strip().splitlines()
            if MODULE_NAME in (process.stderr or ""):
                raise ToolMissingError(
                    f"PowerShell module {MODULE_NAME} is not available", tool_name=MODULE_NAME
                )
            raise ProviderError(
                f"PowerShell exited with code {process.returncode}: "
                f"{detail[0] if detail else 'no error output'}"
            )
        return process.stdout

    def parse_results(self, raw_output: str) -> List[DeviceRecord]:
        """
        Parse ConvertTo-Json output into route records.

        ConvertTo-Json emits a bare object for a single route and nothing at
        all for an empty pipeline.

        Raises:
            ProviderError: If the output is not valid JSON
        """
        raw_output = (raw_output or "").strip()
        if not raw_output:
            return []
        try:
            data = json.loads(raw_output)
        except json.JSONDecodeError as e:
            raise ProviderError(f"Unexpected Get-AdsRoute output: {e}") from e

        if isinstance(data, dict):
            data = [data]
        if not isinstance(data, list):
            raise ProviderError("Unexpected Get-AdsRoute output: not a list of routes")
        return [self.parse_route(entry) for entry in data]

    def list_routes(self) -> List[DeviceRecord]:
        return self.parse_results(self._run_script(ROUTES_SCRIPT))

    def local_network_id(self) -> Optional[str]:
        if self._local_net_id is None:
            try:
                self._local_net_id = self._run_script(LOCAL_NETID_SCRIPT).strip() or None
            except (ProviderError, ToolMissingError) as e:
                self._log_warning(f"Could not determine local AMS Net ID: {e}")
                return None
        return self._local_net_id
