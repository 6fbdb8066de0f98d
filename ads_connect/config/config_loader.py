"""
Configuration loader for ADS Connect.
Handles loading and validation of the YAML configuration file with fallback to defaults.
"""

import yaml
from typing import Any, Dict, Optional
from dataclasses import dataclass, field
from pathlib import Path

from ..utils.logger import Logger, get_logger

DEFAULT_CONFIG_FILE = "ads_connect.yml"
PROVIDER_TYPES = ("powershell", "file")


@dataclass
class ConsoleConfig:
    """Interactive loop timing."""
    timeout_seconds: int = 10
    poll_interval_ms: int = 50
    message_pause_seconds: float = 2.0


@dataclass
class CredentialConfig:
    """Remote account used for RDP, SSH and SFTP (factory defaults)."""
    user: str = "Administrator"
    password: str = "1"


@dataclass
class ToolConfig:
    """Locations of the external clients."""
    ssh_client: str = "ssh"
    rdp_client: str = "mstsc"
    winscp_path: str = r"C:\Program Files (x86)\WinSCP\WinSCP.exe"
    winscp_download_url: str = "https://winscp.net/eng/download.php"
    cerhost_path: str = "CERHOST.exe"
    cerhost_url: str = "https://infosys.beckhoff.com/content/1033/cx9020_hw/Resources/5047075211.zip"
    cerhost_executable: str = "CERHOST.exe"


@dataclass
class RemoteDisplayConfig:
    """CERHost availability probe."""
    port: int = 987
    probe_timeout_ms: int = 1000


@dataclass
class ProviderConfig:
    """Route discovery backend."""
    type: str = "powershell"
    routes_file: Optional[str] = None
    command_timeout: int = 30


@dataclass
class AppConfig:
    """Top-level configuration."""
    console: ConsoleConfig = field(default_factory=ConsoleConfig)
    credentials: CredentialConfig = field(default_factory=CredentialConfig)
    tools: ToolConfig = field(default_factory=ToolConfig)
    remote_display: RemoteDisplayConfig = field(default_factory=RemoteDisplayConfig)
    provider: ProviderConfig = field(default_factory=ProviderConfig)


class ConfigLoader:
    """
    Loads and validates the YAML configuration file.
    Provides fallback to default configuration when the file or a section is missing.
    """

    def __init__(self, config_path: Optional[str] = None, logger: Optional[Logger] = None):
        """
        Initialize ConfigLoader.

        Args:
            config_path: Path to the configuration file.
                         Defaults to ads_connect.yml next to this module.
        """
        if config_path is None:
            self.config_path = Path(__file__).parent / DEFAULT_CONFIG_FILE
        else:
            self.config_path = Path(config_path)

        self.logger = logger or get_logger(__name__)

    def load(self) -> AppConfig:
        """
        Load the configuration file.

        Returns:
            AppConfig with loaded values, defaults where missing or invalid
        """
        if not self.config_path.exists():
            self.logger.warning(f"Config file not found at {self.config_path}. Using default configuration.")
            return AppConfig()

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            self.logger.error(f"Error parsing config file {self.config_path}: {e}")
            self.logger.warning("Using default configuration.")
            return AppConfig()
        except OSError as e:
            self.logger.error(f"Cannot read config file {self.config_path}: {e}")
            self.logger.warning("Using default configuration.")
            return AppConfig()

        if not isinstance(config_data, dict):
            self.logger.warning(f"Invalid config structure in {self.config_path}. Using default configuration.")
            return AppConfig()

        return AppConfig(
            console=self._load_console(self._section(config_data, 'console')),
            credentials=self._load_credentials(self._section(config_data, 'credentials')),
            tools=self._load_tools(self._section(config_data, 'tools')),
            remote_display=self._load_remote_display(self._section(config_data, 'remote_display')),
            provider=self._load_provider(self._section(config_data, 'provider')),
        )

    def _section(self, config_data: Dict[str, Any], name: str) -> Dict[str, Any]:
        section = config_data.get(name) or {}
        if not isinstance(section, dict):
            self.logger.warning(f"Invalid '{name}' section in {self.config_path}. Using defaults.")
            return {}
        return section

    def _load_console(self, data: Dict[str, Any]) -> ConsoleConfig:
        defaults = ConsoleConfig()
        return ConsoleConfig(
            timeout_seconds=self._validate_positive_int(
                data.get('timeout_seconds', defaults.timeout_seconds), 'timeout_seconds', defaults.timeout_seconds),
            poll_interval_ms=self._validate_positive_int(
                data.get('poll_interval_ms', defaults.poll_interval_ms), 'poll_interval_ms', defaults.poll_interval_ms),
            message_pause_seconds=self._validate_non_negative_float(
                data.get('message_pause_seconds', defaults.message_pause_seconds),
                'message_pause_seconds', defaults.message_pause_seconds),
        )

    def _load_credentials(self, data: Dict[str, Any]) -> CredentialConfig:
        defaults = CredentialConfig()
        return CredentialConfig(
            user=str(data.get('user', defaults.user)),
            password=str(data.get('password', defaults.password)),
        )

    def _load_tools(self, data: Dict[str, Any]) -> ToolConfig:
        defaults = ToolConfig()
        values = {}
        for name in ToolConfig.__dataclass_fields__:
            value = data.get(name, getattr(defaults, name))
            values[name] = str(value) if value else getattr(defaults, name)
        return ToolConfig(**values)

    def _load_remote_display(self, data: Dict[str, Any]) -> RemoteDisplayConfig:
        defaults = RemoteDisplayConfig()
        port = self._validate_positive_int(data.get('port', defaults.port), 'port', defaults.port)
        if port > 65535:
            self.logger.warning(f"Invalid port: {port}. Using default: {defaults.port}")
            port = defaults.port
        return RemoteDisplayConfig(
            port=port,
            probe_timeout_ms=self._validate_positive_int(
                data.get('probe_timeout_ms', defaults.probe_timeout_ms), 'probe_timeout_ms',
                defaults.probe_timeout_ms),
        )

    def _load_provider(self, data: Dict[str, Any]) -> ProviderConfig:
        defaults = ProviderConfig()
        provider_type = data.get('type', defaults.type)
        if provider_type not in PROVIDER_TYPES:
            self.logger.warning(
                f"Invalid provider type: {provider_type}. Must be one of {list(PROVIDER_TYPES)}. "
                f"Using default: {defaults.type}"
            )
            provider_type = defaults.type
        routes_file = data.get('routes_file')
        return ProviderConfig(
            type=provider_type,
            routes_file=str(routes_file) if routes_file else None,
            command_timeout=self._validate_positive_int(
                data.get('command_timeout', defaults.command_timeout), 'command_timeout',
                defaults.command_timeout),
        )

    def _validate_positive_int(self, value: Any, field_name: str, default: int) -> int:
        """
        Validate that a value is a positive integer.

        Args:
            value: Value to validate
            field_name: Name of the field for error messages
            default: Default value to use if validation fails

        Returns:
            Validated integer value or default
        """
        try:
            int_value = int(value)
            if int_value <= 0:
                self.logger.warning(f"Invalid {field_name}: {value}. Must be positive. Using default: {default}")
                return default
            return int_value
        except (ValueError, TypeError):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be an integer. Using default: {default}")
            return default

    def _validate_non_negative_float(self, value: Any, field_name: str, default: float) -> float:
        try:
            float_value = float(value)
        except (ValueError, TypeError):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be a number. Using default: {default}")
            return default
        if float_value < 0:
            self.logger.warning(f"Invalid {field_name}: {value}. Must not be negative. Using default: {default}")
            return default
        return float_value
