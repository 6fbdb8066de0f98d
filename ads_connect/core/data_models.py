"""
Core data models and enums for ADS Connect.

This module defines the data structures used throughout the console: the
route records returned by discovery providers, the capability profile
derived for a selected device, the ordered discovery snapshot and the
outcome of a dispatched connection action.
"""

import json
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class Action(Enum):
    """Connection actions an operator can launch against a device."""
    OPEN_MANAGEMENT_PAGE = "Open device management page"
    START_REMOTE_DESKTOP = "Start remote desktop"
    START_SHELL = "Start SSH session"
    START_FILE_TRANSFER = "Start SFTP file transfer"
    START_SHELL_AND_FILE_TRANSFER = "Start SSH session and SFTP file transfer"

    @property
    def label(self) -> str:
        return self.value


class OsFamily(Enum):
    """Platform families recognized from a route's OS tag."""
    WINDOWS = "Windows"
    TCBSD = "TwinCAT/BSD"
    TCRTOS = "TwinCAT/RTOS"
    LINUX = "Linux"
    WINDOWS_CE = "Windows CE"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class DeviceRecord:
    """
    One route reported by a discovery provider.

    Attributes:
        name: Route name as reported by the ADS router
        address: IP address or hostname of the device
        network_id: AMS Net ID, unique per device
        os_tag: Free-text platform identifier (e.g. "Win10", "TcBSD (13.2)")
        is_local: True for the route describing this machine
    """
    name: str
    address: str
    network_id: str
    os_tag: str = ""
    is_local: bool = False


@dataclass(frozen=True)
class CapabilityProfile:
    """
    Connection capabilities computed for a selected device.

    Attributes:
        family: Platform family the OS tag was classified as
        management_url: URL of the device's web management page
        actions: Ordered actions, matching the printed menu 1:1
        recognized: False when no classification rule matched
        hardened_shell: Use the restricted key-exchange/MAC suite for SSH
        annotations: Availability notes shown next to menu entries
    """
    family: OsFamily
    management_url: str
    actions: Tuple[Action, ...] = ()
    recognized: bool = True
    hardened_shell: bool = False
    annotations: Dict[Action, str] = field(default_factory=dict)

    def action_for_choice(self, choice: str) -> Optional[Action]:
        """Map a 1-based menu choice string to an action, None if invalid."""
        choice = (choice or "").strip()
        if not choice.isdecimal():
            return None
        index = int(choice)
        if 1 <= index <= len(self.actions):
            return self.actions[index - 1]
        return None


@dataclass(frozen=True)
class DiscoverySnapshot:
    """
    Ordered, de-duplicated view of the remote routes from one poll.

    Row numbers shown to the operator are 1-based positions in `devices`.
    """
    devices: Tuple[DeviceRecord, ...] = ()

    def __len__(self) -> int:
        return len(self.devices)

    def __iter__(self):
        return iter(self.devices)

    def fingerprint(self) -> str:
        """Stable serialization of the ordered records, used for change detection."""
        return json.dumps(
            [asdict(device) for device in self.devices],
            sort_keys=True,
            separators=(",", ":"),
        )

    def resolve(self, index: int) -> Optional[DeviceRecord]:
        """
        Return the device shown at a 1-based row number.

        Args:
            index: Row number as displayed

        Returns:
            The DeviceRecord, or None if the index is out of range
        """
        if 1 <= index <= len(self.devices):
            return self.devices[index - 1]
        return None


@dataclass
class DispatchResult:
    """
    Outcome of one dispatched action.

    Attributes:
        started: True if the external program (or at least one sub-action) started
        warning: Message to show the operator, if any
        action: The action that was actually executed
        fallback_from: Originally requested action when a fallback was taken
        steps: Per-sub-action results of a composite action
    """
    started: bool
    warning: Optional[str] = None
    action: Optional[Action] = None
    fallback_from: Optional[Action] = None
    steps: List["DispatchResult"] = field(default_factory=list)

    @property
    def warnings(self) -> List[str]:
        """All warnings of this result and its steps, in order."""
        collected = [self.warning] if self.warning else []
        for step in self.steps:
            collected.extend(step.warnings)
        return collected
