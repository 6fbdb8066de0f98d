"""
ADS Connect

Interactive console that discovers TwinCAT ADS routes, shows them in a
live-refreshing table and launches remote-management sessions (web page,
SSH, RDP, SFTP, CERHost) against the selected device.
"""

__version__ = "1.0.0"
__author__ = "ADS Connect Team"
