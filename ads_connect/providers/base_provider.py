"""
Base route provider interface for ADS Connect.

This module defines the abstract base class that every discovery backend
implements, so the discovery loop can poll any of them the same way.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..core.data_models import DeviceRecord
from ..utils.error_handler import ProviderError


class BaseRouteProvider(ABC):
    """
    Abstract base class for route discovery backends.

    Providers return fresh DeviceRecord lists on every call and may raise
    ProviderError; the caller treats a failure as an empty poll.
    """

    def __init__(self, logger=None):
        """
        Initialize the base provider.

        Args:
            logger: Logger instance for outputting progress and errors
        """
        self.logger = logger

    @abstractmethod
    def list_routes(self) -> List[DeviceRecord]:
        """
        Return all routes currently known to the ADS router.

        Raises:
            ProviderError: If discovery failed
        """

    @abstractmethod
    def local_network_id(self) -> Optional[str]:
        """Return the AMS Net ID of this machine, None if unknown."""

    def parse_route(self, entry: Dict[str, Any]) -> DeviceRecord:
        """
        Convert one raw route mapping into a DeviceRecord.

        Accepts both the PowerShell property names (Name, Address, NetId,
        RTSystem, IsLocal) and the snake_case keys of route files.

        Raises:
            ProviderError: If the entry has no AMS Net ID
        """
        if not isinstance(entry, dict):
            raise ProviderError(f"Invalid route entry: {entry!r}")

        def pick(*keys, default=None):
            for key in keys:
                if entry.get(key) is not None:
                    return entry[key]
            return default

        network_id = pick("NetId", "net_id", "network_id")
        if not network_id:
            raise ProviderError(f"Route entry without AMS Net ID: {entry!r}")

        return DeviceRecord(
            name=str(pick("Name", "name", default="")),
            address=str(pick("Address", "address", default="")),
            network_id=str(network_id),
            os_tag=str(pick("RTSystem", "os", "os_tag", default="")),
            is_local=self._to_bool(pick("IsLocal", "is_local", default=False)),
        )

    @staticmethod
    def _to_bool(value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "yes")
        return bool(value)

    def _log_debug(self, message: str) -> None:
        """Log a debug message if logger is available."""
        if self.logger:
            self.logger.debug(message)

    def _log_warning(self, message: str) -> None:
        """Log a warning message if logger is available."""
        if self.logger:
            self.logger.warning(message)
