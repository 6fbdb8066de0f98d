"""
Core components of the route console.
"""

from .data_models import (
    Action,
    OsFamily,
    DeviceRecord,
    CapabilityProfile,
    DiscoverySnapshot,
    DispatchResult,
)
from .device_classifier import DeviceClassifier, ClassificationRule
from .snapshot import build_snapshot, should_redraw

__all__ = [
    'Action',
    'OsFamily',
    'DeviceRecord',
    'CapabilityProfile',
    'DiscoverySnapshot',
    'DispatchResult',
    'DeviceClassifier',
    'ClassificationRule',
    'build_snapshot',
    'should_redraw',
]
