"""
Network utility functions for address handling and reachability checks.

This module provides helper functions for IP address validation, building
URL host parts and the short-timeout TCP port probe used to annotate
connection menus.
"""

import ipaddress
import socket


def is_valid_ip(ip_address: str) -> bool:
    """
    Check if a string represents a valid IPv4 address.

    Args:
        ip_address: String to validate as IPv4 address

    Returns:
        bool: True if valid IPv4 address, False otherwise
    """
    try:
        ipaddress.IPv4Address(ip_address)
        return True
    except ipaddress.AddressValueError:
        return False


def format_url_host(address: str) -> str:
    """
    Return the address in a form usable as the host part of a URL.

    IPv6 literals are wrapped in brackets; IPv4 addresses and hostnames are
    returned unchanged.
    """
    address = (address or "").strip()
    if is_valid_ip(address):
        return address
    try:
        ipaddress.IPv6Address(address)
    except ValueError:
        return address
    return f"[{address}]"


def probe_port(address: str, port: int, timeout_ms: int = 1000) -> bool:
    """
    Check whether a TCP connection to address:port completes in time.

    The socket is always closed before returning. Refusals, timeouts,
    resolution failures and invalid arguments all yield False.

    Args:
        address: IP address or hostname of the target
        port: TCP port to connect to
        timeout_ms: Connection timeout in milliseconds

    Returns:
        bool: True if the connection was established, False otherwise
    """
    if not address:
        return False
    try:
        with socket.create_connection((address, int(port)), timeout=max(timeout_ms, 1) / 1000.0):
            return True
    except (OSError, ValueError, OverflowError, TypeError):
        return False
