"""
Connection dispatcher for ADS Connect.

Executes the connection action an operator picked from a device menu. Every
external failure is downgraded to a warning (plus a fallback where one is
defined); dispatch() never raises.
"""

import os
import re
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional
from urllib.parse import quote

from .data_models import Action, CapabilityProfile, DeviceRecord, DispatchResult, OsFamily
from ..utils.error_handler import (
    ErrorContext,
    ErrorHandler,
    ErrorSeverity,
    ErrorType,
    LaunchError,
    ProvisioningError,
    ToolMissingError,
)
from ..utils.helper_provisioner import HelperProvisioner
from ..utils.logger import Logger, get_logger
from ..utils.network_utils import probe_port
from ..utils.process_launcher import ProcessLauncher

HARDENED_KEX = "curve25519-sha256,curve25519-sha256@libssh.org,diffie-hellman-group16-sha512"
HARDENED_MACS = "hmac-sha2-512-etm@openssh.com,hmac-sha2-256-etm@openssh.com"
BSD_SFTP_SERVER = "doas /usr/libexec/sftp-server"

RDP_TEMPLATE = """screen mode id:i:1
use multimon:i:0
desktopwidth:i:1920
desktopheight:i:1080
session bpp:i:32
smart sizing:i:1
full address:s:{address}
username:s:{user}
prompt for credentials:i:0
authentication level:i:2
"""

CE_REMOTEDISPLAY_HINT = (
    "Enable the remote display on the device: open the management page, go to "
    "Device > Remote Display (or set HKLM\\Software\\Beckhoff\\CERHost Enabled=1) "
    "and reboot the device."
)


@dataclass
class DispatcherSettings:
    """Credentials and client locations used to build commands."""
    user: str = "Administrator"
    password: str = "1"
    ssh_client: str = "ssh"
    rdp_client: str = "mstsc"
    winscp_path: str = r"C:\Program Files (x86)\WinSCP\WinSCP.exe"
    winscp_download_url: str = "https://winscp.net/eng/download.php"
    remote_display_port: int = 987
    probe_timeout_ms: int = 1000
    descriptor_dir: Optional[str] = None


class ConnectionDispatcher:
    """
    Turns a menu choice into an external program launch.

    Collaborators are injected so the launch decisions can be tested
    without starting anything.
    """

    def __init__(
        self,
        settings: DispatcherSettings,
        launcher: Optional[ProcessLauncher] = None,
        provisioner: Optional[HelperProvisioner] = None,
        prober: Callable[[str, int, int], bool] = probe_port,
        confirm: Callable[[str], bool] = lambda prompt: False,
        logger: Optional[Logger] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        """
        Args:
            settings: Credentials and client locations
            launcher: Starts external programs
            provisioner: Supplies the CERHost executable on first use
            prober: Port probe for the remote-display service
            confirm: Asks the operator a yes/no question
            logger: Logger instance
            error_handler: Reports launch failures with suggestions
        """
        self.settings = settings
        self.logger = logger or get_logger(__name__)
        self.launcher = launcher or ProcessLauncher(self.logger)
        self.provisioner = provisioner
        self.prober = prober
        self.confirm = confirm
        self.error_handler = error_handler or ErrorHandler(self.logger)

    def dispatch(self, device: DeviceRecord, profile: CapabilityProfile, choice: str) -> DispatchResult:
        """
        Execute the action behind a menu choice.

        Args:
            device: The selected device
            profile: Its freshly computed capability profile
            choice: 1-based menu choice as typed by the operator

        Returns:
            DispatchResult describing what was started
        """
        action = profile.action_for_choice(choice)
        if action is None:
            return DispatchResult(started=False, warning=f"Invalid choice '{choice}'.")

        handlers = {
            Action.OPEN_MANAGEMENT_PAGE: self.open_management_page,
            Action.START_REMOTE_DESKTOP: self.start_remote_desktop,
            Action.START_SHELL: self.start_shell,
            Action.START_FILE_TRANSFER: self.start_file_transfer,
            Action.START_SHELL_AND_FILE_TRANSFER: self.start_shell_and_file_transfer,
        }
        try:
            return handlers[action](device, profile)
        except Exception as e:
            # Last line of defence; handlers already convert expected failures
            self.logger.error(f"Unexpected failure while running {action.label}", exception=e)
            return DispatchResult(started=False, warning=f"{action.label} failed: {e}", action=action)

    def open_management_page(self, device: DeviceRecord, profile: CapabilityProfile) -> DispatchResult:
        self.logger.info(f"Opening {profile.management_url}")
        try:
            self.launcher.open_url(profile.management_url)
        except LaunchError as e:
            return self._launch_failed(Action.OPEN_MANAGEMENT_PAGE, e, "browser")
        return DispatchResult(started=True, action=Action.OPEN_MANAGEMENT_PAGE)

    def start_remote_desktop(self, device: DeviceRecord, profile: CapabilityProfile) -> DispatchResult:
        if profile.family == OsFamily.WINDOWS_CE:
            return self._start_remote_display(device, profile)
        return self._start_rdp(device)

    def _start_rdp(self, device: DeviceRecord) -> DispatchResult:
        user, password = self.settings.user, self.settings.password
        try:
            self.launcher.run([
                "cmdkey",
                f"/generic:TERMSRV/{device.address}",
                f"/user:{user}",
                f"/pass:{password}",
            ])
        except LaunchError as e:
            # mstsc will prompt for the password instead
            self.logger.warning(f"Could not store RDP credential: {e}")

        try:
            descriptor = self.write_rdp_descriptor(device)
        except OSError as e:
            return DispatchResult(
                started=False,
                warning=f"Could not write RDP session file: {e}",
                action=Action.START_REMOTE_DESKTOP,
            )

        try:
            self.launcher.spawn([self.settings.rdp_client, str(descriptor)])
        except LaunchError as e:
            return self._launch_failed(Action.START_REMOTE_DESKTOP, e, self.settings.rdp_client)
        return DispatchResult(started=True, action=Action.START_REMOTE_DESKTOP)

    def write_rdp_descriptor(self, device: DeviceRecord) -> Path:
        """
        Write a minimal .rdp session file for the device.

        Returns:
            Path of the written file
        """
        directory = Path(self.settings.descriptor_dir or tempfile.gettempdir())
        directory.mkdir(parents=True, exist_ok=True)
        safe_name = re.sub(r"[^A-Za-z0-9_.-]", "_", device.name or device.address) or "device"
        descriptor = directory / f"{safe_name}.rdp"
        descriptor.write_text(
            RDP_TEMPLATE.format(address=device.address, user=self.settings.user),
            encoding="utf-8",
        )
        return descriptor

    def _start_remote_display(self, device: DeviceRecord, profile: CapabilityProfile) -> DispatchResult:
        available = self.prober(
            device.address, self.settings.remote_display_port, self.settings.probe_timeout_ms
        )
        if not available:
            self.logger.warning(
                f"CERHost is not reachable on {device.address}:{self.settings.remote_display_port}"
            )
            self.logger.info(CE_REMOTEDISPLAY_HINT)
            if not self.confirm("Continue without CERHost and open the management page instead? [y/N] "):
                return DispatchResult(
                    started=False,
                    warning="Remote display unavailable, nothing started.",
                    action=Action.START_REMOTE_DESKTOP,
                )
            self.logger.info(
                f"Falling back from '{Action.START_REMOTE_DESKTOP.label}' "
                f"to '{Action.OPEN_MANAGEMENT_PAGE.label}' for {device.name}"
            )
            fallback = self.open_management_page(device, profile)
            fallback.fallback_from = Action.START_REMOTE_DESKTOP
            return fallback

        if self.provisioner is None:
            return DispatchResult(
                started=False,
                warning="CERHost is not configured.",
                action=Action.START_REMOTE_DESKTOP,
            )
        try:
            cerhost = self.provisioner.ensure()
        except ProvisioningError as e:
            self.error_handler.handle_error(e, ErrorContext(
                error_type=ErrorType.PROVISIONING_ERROR,
                severity=ErrorSeverity.MEDIUM,
                operation="ensure",
                component="HelperProvisioner",
                additional_info={"url": self.provisioner.download_url},
            ))
            return DispatchResult(
                started=False,
                warning=f"CERHost could not be installed: {e}",
                action=Action.START_REMOTE_DESKTOP,
            )

        try:
            self.launcher.spawn([str(cerhost), device.address])
        except LaunchError as e:
            return self._launch_failed(Action.START_REMOTE_DESKTOP, e, "CERHost")
        return DispatchResult(started=True, action=Action.START_REMOTE_DESKTOP)

    def build_ssh_command(self, device: DeviceRecord, profile: CapabilityProfile) -> List[str]:
        command = [self.settings.ssh_client]
        if profile.hardened_shell:
            command += ["-o", f"KexAlgorithms={HARDENED_KEX}", "-o", f"MACs={HARDENED_MACS}"]
        command.append(f"{self.settings.user}@{device.address}")
        return command

    def start_shell(self, device: DeviceRecord, profile: CapabilityProfile) -> DispatchResult:
        command = self.build_ssh_command(device, profile)
        try:
            self.launcher.spawn_detached_terminal(command)
        except LaunchError as e:
            return self._launch_failed(Action.START_SHELL, e, "ssh")
        return DispatchResult(started=True, action=Action.START_SHELL)

    def resolve_winscp(self) -> Optional[str]:
        """Return the WinSCP executable path, None if it is not installed."""
        configured = self.settings.winscp_path
        if configured and os.path.isfile(configured):
            return configured
        return shutil.which(configured) if configured else shutil.which("WinSCP")

    def build_sftp_command(self, winscp: str, device: DeviceRecord, profile: CapabilityProfile) -> List[str]:
        user = quote(self.settings.user, safe="")
        password = quote(self.settings.password, safe="")
        credentials = f"{user}:{password}" if self.settings.password else user
        command = [winscp, f"sftp://{credentials}@{device.address}/"]
        if profile.family == OsFamily.TCBSD:
            command += ["/rawsettings", f"SftpServer={BSD_SFTP_SERVER}"]
        return command

    def start_file_transfer(self, device: DeviceRecord, profile: CapabilityProfile) -> DispatchResult:
        winscp = self.resolve_winscp()
        if not winscp:
            warning = (
                f"WinSCP not found at {self.settings.winscp_path}. "
                f"Opening the download page {self.settings.winscp_download_url}"
            )
            self.error_handler.handle_error(
                ToolMissingError(f"WinSCP not found at {self.settings.winscp_path}", tool_name="WinSCP"),
                ErrorContext(
                    error_type=ErrorType.TOOL_MISSING_ERROR,
                    severity=ErrorSeverity.MEDIUM,
                    operation="start_file_transfer",
                    component="ConnectionDispatcher",
                    additional_info={"tool_name": "WinSCP"},
                ),
            )
            try:
                self.launcher.open_url(self.settings.winscp_download_url)
            except LaunchError as e:
                warning += f" failed: {e}"
            return DispatchResult(started=False, warning=warning, action=Action.START_FILE_TRANSFER)

        try:
            self.launcher.spawn(self.build_sftp_command(winscp, device, profile))
        except LaunchError as e:
            return self._launch_failed(Action.START_FILE_TRANSFER, e, "WinSCP")
        return DispatchResult(started=True, action=Action.START_FILE_TRANSFER)

    def start_shell_and_file_transfer(self, device: DeviceRecord, profile: CapabilityProfile) -> DispatchResult:
        steps = [
            self.start_shell(device, profile),
            self.start_file_transfer(device, profile),
        ]
        return DispatchResult(
            started=any(step.started for step in steps),
            action=Action.START_SHELL_AND_FILE_TRANSFER,
            steps=steps,
        )

    def _launch_failed(self, action: Action, error: LaunchError, tool_name: str) -> DispatchResult:
        missing = isinstance(error.__cause__, FileNotFoundError)
        self.error_handler.handle_error(error, ErrorContext(
            error_type=ErrorType.TOOL_MISSING_ERROR if missing else ErrorType.DISPATCH_ERROR,
            severity=ErrorSeverity.MEDIUM,
            operation=action.name.lower(),
            component="ConnectionDispatcher",
            additional_info={"tool_name": tool_name},
        ))
        return DispatchResult(started=False, warning=f"{action.label} failed: {error}", action=action)
