"""
Error taxonomy and centralized error reporting for ADS Connect.

Every failure in the console degrades to a visible message plus continuation.
This module defines the exception hierarchy raised by the collaborators
(route providers, process launcher, helper provisioner, configuration) and an
ErrorHandler that logs those failures with troubleshooting suggestions and
tells the caller whether it may carry on.
"""

from typing import Optional, Any, Dict
from enum import Enum
from dataclasses import dataclass, field

from .logger import Logger, get_logger


class ErrorType(Enum):
    """Enumeration for different types of errors."""
    PROVIDER_ERROR = "provider_error"
    INPUT_ERROR = "input_error"
    CLASSIFICATION_ERROR = "classification_error"
    DISPATCH_ERROR = "dispatch_error"
    PROVISIONING_ERROR = "provisioning_error"
    TOOL_MISSING_ERROR = "tool_missing_error"
    CONFIGURATION_ERROR = "configuration_error"


class ErrorSeverity(Enum):
    """Enumeration for error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class ErrorContext:
    """
    Context information for error handling.

    Attributes:
        error_type: Type of error that occurred
        severity: Severity level of the error
        operation: Operation that was being performed when error occurred
        component: Component/module where error occurred
        additional_info: Additional context information
    """
    error_type: ErrorType
    severity: ErrorSeverity
    operation: str
    component: str
    additional_info: Dict[str, Any] = field(default_factory=dict)


class ADSConnectError(Exception):
    """Base exception class for ADS Connect."""

    def __init__(self, message: str, error_context: Optional[ErrorContext] = None):
        super().__init__(message)
        self.error_context = error_context


class ProviderError(ADSConnectError):
    """Route discovery failed or returned unusable data."""
    pass


class LaunchError(ADSConnectError):
    """An external program could not be started."""
    pass


class ProvisioningError(ADSConnectError):
    """The helper binary could not be downloaded or installed."""
    pass


class ConfigurationError(ADSConnectError):
    """Exception for configuration-related errors."""
    pass


class ToolMissingError(ADSConnectError):
    """Exception for missing external tools."""

    def __init__(self, message: str, tool_name: str = "unknown",
                 error_context: Optional[ErrorContext] = None):
        super().__init__(message, error_context)
        self.tool_name = tool_name


class ErrorHandler:
    """
    Centralized error reporting.

    Logs failures at a level matching their severity, keeps per-type
    counters and prints troubleshooting suggestions. handle_error() returns
    True when the interactive loop may continue.
    """

    def __init__(self, logger: Optional[Logger] = None):
        """
        Initialize the ErrorHandler.

        Args:
            logger: Logger instance for error reporting
        """
        self.logger = logger or get_logger(__name__)
        self.error_statistics: Dict[ErrorType, int] = {
            error_type: 0 for error_type in ErrorType
        }

    def handle_error(self, error: Exception, context: ErrorContext) -> bool:
        """
        Handle an error based on its type and context.

        Args:
            error: The exception that occurred
            context: Error context information

        Returns:
            bool: True if the caller may continue, False otherwise
        """
        self.error_statistics[context.error_type] += 1
        self._log_error(error, context)

        if context.error_type == ErrorType.PROVIDER_ERROR:
            self._suggest_provider_solutions(error, context)
            return True
        elif context.error_type == ErrorType.DISPATCH_ERROR:
            self._suggest_dispatch_solutions(error, context)
            return True
        elif context.error_type == ErrorType.PROVISIONING_ERROR:
            self._suggest_provisioning_solutions(error, context)
            return True
        elif context.error_type == ErrorType.TOOL_MISSING_ERROR:
            self._suggest_tool_installation(context.additional_info.get("tool_name", "unknown"))
            return True
        elif context.error_type == ErrorType.CONFIGURATION_ERROR:
            self._suggest_configuration_fixes(error, context)
            return False
        # Input and classification errors are self-explanatory
        return True

    def _log_error(self, error: Exception, context: ErrorContext) -> None:
        """
        Log error information with appropriate detail level.

        Args:
            error: The exception that occurred
            context: Error context information
        """
        error_msg = f"Error in {context.component}.{context.operation}: {str(error)}"

        if context.severity == ErrorSeverity.CRITICAL:
            self.logger.error(error_msg, exception=error)
        elif context.severity == ErrorSeverity.HIGH:
            self.logger.error(error_msg)
        elif context.severity == ErrorSeverity.MEDIUM:
            self.logger.warning(error_msg)
        else:
            self.logger.debug(error_msg)

    def _suggest_provider_solutions(self, error: Exception, context: ErrorContext) -> None:
        """Provide route discovery troubleshooting suggestions."""
        self.logger.info("Route discovery troubleshooting suggestions:")
        self.logger.info("  • Check that the TwinCAT ADS router is running")
        self.logger.info("  • Verify the TcXaeMgmt PowerShell module is installed")
        self.logger.info("  • Ensure UDP port 48899 is not blocked by the firewall")
        self.logger.info("  • Retrying automatically on the next poll")

    def _suggest_dispatch_solutions(self, error: Exception, context: ErrorContext) -> None:
        """Provide solutions for programs that failed to start."""
        tool_name = context.additional_info.get("tool_name")
        self.logger.info("Launch error solutions:")
        if tool_name:
            self.logger.info(f"  • Verify {tool_name} is installed and on PATH")
        self.logger.info("  • Check the tool paths in the configuration file")
        self.logger.info("  • Pass an explicit path on the command line")

    def _suggest_provisioning_solutions(self, error: Exception, context: ErrorContext) -> None:
        """Provide helper download error solutions."""
        url = context.additional_info.get("url", "the vendor download page")
        self.logger.info("Helper download error solutions:")
        self.logger.info("  • Check internet connectivity and proxy settings")
        self.logger.info(f"  • Download the archive manually from {url}")
        self.logger.info("  • Point --cerhost-path at an existing CERHOST.exe")

    def _suggest_tool_installation(self, tool_name: str) -> None:
        """Provide tool installation suggestions."""
        suggestions = {
            "powershell": [
                "Windows: PowerShell ships with the OS, check PATH",
                "Linux/macOS: install PowerShell 7 (pwsh)",
                "Or use --routes-file with a static route list",
            ],
            "TcXaeMgmt": [
                "Install-Module -Name TcXaeMgmt -Scope CurrentUser",
            ],
            "ssh": [
                "Windows: Settings > Apps > Optional features > OpenSSH Client",
                "Ubuntu/Debian: sudo apt-get install openssh-client",
            ],
            "WinSCP": [
                "Download from https://winscp.net/eng/download.php",
            ],
        }

        if tool_name in suggestions:
            self.logger.info(f"Installation suggestions for {tool_name}:")
            for suggestion in suggestions[tool_name]:
                self.logger.info(f"  • {suggestion}")
        else:
            self.logger.info(f"Please install {tool_name} using your system's package manager")

    def _suggest_configuration_fixes(self, error: Exception, context: ErrorContext) -> None:
        """Provide configuration error solutions."""
        self.logger.info("Configuration error solutions:")
        self.logger.info("  • Check YAML syntax and indentation")
        self.logger.info("  • Ensure configuration values are valid")
        self.logger.info("  • Use the bundled ads_connect.yml as reference")
