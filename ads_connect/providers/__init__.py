"""
Route discovery providers for ADS Connect.

This package contains the provider interface and the concrete backends
(PowerShell Get-AdsRoute and a YAML route file).
"""

from .base_provider import BaseRouteProvider
from .powershell_provider import PowerShellRouteProvider, find_powershell
from .static_provider import StaticRouteProvider

__all__ = [
    'BaseRouteProvider',
    'PowerShellRouteProvider',
    'StaticRouteProvider',
    'find_powershell',
]
