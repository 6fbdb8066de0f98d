"""
Device Classification System for ADS Connect.

This module maps the free-text OS tag of a discovered route to a capability
profile: the management page URL and the ordered list of connection actions
offered to the operator. Classification is driven by an ordered table of
rules evaluated first-match-wins.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from .data_models import Action, CapabilityProfile, DeviceRecord, OsFamily
from ..utils.network_utils import format_url_host, probe_port

DEFAULT_REMOTE_DISPLAY_PORT = 987
DEFAULT_PROBE_TIMEOUT_MS = 1000

_SHELL_ACTIONS = (
    Action.OPEN_MANAGEMENT_PAGE,
    Action.START_SHELL,
    Action.START_FILE_TRANSFER,
    Action.START_SHELL_AND_FILE_TRANSFER,
)
_DESKTOP_ACTIONS = (Action.OPEN_MANAGEMENT_PAGE, Action.START_REMOTE_DESKTOP)


def prefix(text: str) -> Callable[[str], bool]:
    """Build a case-insensitive prefix matcher."""
    needle = text.lower()
    return lambda os_tag: os_tag.lower().startswith(needle)


def contains(text: str) -> Callable[[str], bool]:
    """Build a case-insensitive substring matcher."""
    needle = text.lower()
    return lambda os_tag: needle in os_tag.lower()


@dataclass
class ClassificationRule:
    """
    A rule for classifying a route based on its OS tag.

    Attributes:
        name: Human-readable name for the rule
        family: The platform family this rule classifies to
        matcher: Predicate applied to the OS tag
        scheme: URL scheme of the management page
        path: URL path of the management page ("" for the root)
        actions: Ordered connection actions offered for the family
        hardened_shell: SSH needs the restricted key-exchange/MAC suite
        probe_remote_display: Annotate remote desktop with a port probe
    """
    name: str
    family: OsFamily
    matcher: Callable[[str], bool]
    scheme: str = "https"
    path: str = ""
    actions: Tuple[Action, ...] = field(default_factory=tuple)
    hardened_shell: bool = False
    probe_remote_display: bool = False

    def matches(self, os_tag: str) -> bool:
        return self.matcher(os_tag)

    def management_url(self, address: str) -> str:
        return f"{self.scheme}://{format_url_host(address)}{self.path}"


def default_rules() -> List[ClassificationRule]:
    """
    Build the classification table in evaluation order.

    Returns:
        List of ClassificationRule objects, highest priority first
    """
    return [
        ClassificationRule(
            name="Windows",
            family=OsFamily.WINDOWS,
            matcher=prefix("Win"),
            scheme="https",
            path="/config",
            actions=_DESKTOP_ACTIONS,
        ),
        ClassificationRule(
            name="TwinCAT/BSD",
            family=OsFamily.TCBSD,
            matcher=prefix("TcBSD"),
            scheme="https",
            actions=_SHELL_ACTIONS,
        ),
        ClassificationRule(
            name="TwinCAT/RTOS",
            family=OsFamily.TCRTOS,
            matcher=prefix("TcRTOS"),
            scheme="http",
            path="/config",
            actions=(Action.OPEN_MANAGEMENT_PAGE,),
        ),
        ClassificationRule(
            name="Linux",
            family=OsFamily.LINUX,
            matcher=contains("Linux"),
            scheme="https",
            actions=_SHELL_ACTIONS,
            hardened_shell=True,
        ),
        ClassificationRule(
            name="Windows CE",
            family=OsFamily.WINDOWS_CE,
            matcher=contains("CE"),
            scheme="https",
            path="/config",
            actions=_DESKTOP_ACTIONS,
            probe_remote_display=True,
        ),
    ]


class DeviceClassifier:
    """
    Ordered, data-driven device classifier.

    The first rule whose matcher accepts the OS tag wins. Rules are not
    assumed to be mutually exclusive. Unmatched tags produce an
    unrecognized profile with no actions; classification never raises.
    """

    def __init__(
        self,
        rules: Optional[List[ClassificationRule]] = None,
        prober: Callable[[str, int, int], bool] = probe_port,
        remote_display_port: int = DEFAULT_REMOTE_DISPLAY_PORT,
        probe_timeout_ms: int = DEFAULT_PROBE_TIMEOUT_MS,
    ):
        """
        Initialize the device classifier.

        Args:
            rules: Classification table, defaults to default_rules()
            prober: Port probe used for remote-display annotations
            remote_display_port: TCP port of the vendor remote-display service
            probe_timeout_ms: Timeout for the remote-display probe
        """
        self.rules = rules if rules is not None else default_rules()
        self.prober = prober
        self.remote_display_port = remote_display_port
        self.probe_timeout_ms = probe_timeout_ms

    def match_rule(self, os_tag: Optional[str]) -> Optional[ClassificationRule]:
        """Return the first rule matching the OS tag, without probing."""
        tag = os_tag if isinstance(os_tag, str) else ""
        for rule in self.rules:
            if rule.matches(tag):
                return rule
        return None

    def is_recognized(self, os_tag: Optional[str]) -> bool:
        return self.match_rule(os_tag) is not None

    def classify(self, record: DeviceRecord) -> CapabilityProfile:
        """
        Compute a fresh capability profile for a device.

        Args:
            record: The selected route

        Returns:
            CapabilityProfile for the device (recognized=False if unmatched)
        """
        rule = self.match_rule(record.os_tag)
        if rule is None:
            return CapabilityProfile(
                family=OsFamily.UNKNOWN,
                management_url=f"https://{format_url_host(record.address)}",
                actions=(),
                recognized=False,
            )

        annotations = {}
        if rule.probe_remote_display and Action.START_REMOTE_DESKTOP in rule.actions:
            if self.remote_display_available(record.address):
                annotations[Action.START_REMOTE_DESKTOP] = "CERHost available"
            else:
                annotations[Action.START_REMOTE_DESKTOP] = (
                    f"unavailable, port {self.remote_display_port} closed"
                )

        return CapabilityProfile(
            family=rule.family,
            management_url=rule.management_url(record.address),
            actions=tuple(rule.actions),
            recognized=True,
            hardened_shell=rule.hardened_shell,
            annotations=annotations,
        )

    def remote_display_available(self, address: str) -> bool:
        """Probe the vendor remote-display port on a device."""
        return self.prober(address, self.remote_display_port, self.probe_timeout_ms)
