"""
Configuration module for ADS Connect.
Provides configuration loading and validation for the console and its collaborators.
"""

from .config_loader import (
    AppConfig,
    ConfigLoader,
    ConsoleConfig,
    CredentialConfig,
    ProviderConfig,
    RemoteDisplayConfig,
    ToolConfig,
)

__all__ = [
    'AppConfig',
    'ConfigLoader',
    'ConsoleConfig',
    'CredentialConfig',
    'ProviderConfig',
    'RemoteDisplayConfig',
    'ToolConfig',
]
