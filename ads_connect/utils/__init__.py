"""
Utility functions and helper classes.
"""

from .logger import Logger, LogLevel, logger, set_log_level, get_logger
from .error_handler import (
    ErrorHandler, ErrorContext, ErrorType, ErrorSeverity,
    ADSConnectError, ProviderError, LaunchError, ProvisioningError,
    ConfigurationError, ToolMissingError
)
from .network_utils import probe_port
from . import network_utils

__all__ = [
    'Logger',
    'LogLevel',
    'logger',
    'set_log_level',
    'get_logger',
    'ErrorHandler',
    'ErrorContext',
    'ErrorType',
    'ErrorSeverity',
    'ADSConnectError',
    'ProviderError',
    'LaunchError',
    'ProvisioningError',
    'ConfigurationError',
    'ToolMissingError',
    'probe_port',
    'network_utils'
]
