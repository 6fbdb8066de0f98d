"""
Snapshot building and change detection for the route table.

A snapshot is the sorted list of remote routes from one poll. Its
fingerprint is only used to decide whether the table must be redrawn.
"""

from typing import Iterable, Optional, Tuple

from .data_models import DeviceRecord, DiscoverySnapshot


def build_snapshot(
    records: Iterable[DeviceRecord], local_network_id: Optional[str] = None
) -> DiscoverySnapshot:
    """
    Build the ordered snapshot shown to the operator.

    Local routes (flagged by the provider or matching the local AMS Net ID)
    are dropped, duplicate Net IDs keep their first occurrence, and the
    result is sorted by name (case-insensitive, Net ID as tie breaker).

    Args:
        records: Routes returned by the discovery provider
        local_network_id: AMS Net ID of this machine, if known

    Returns:
        DiscoverySnapshot with the remote routes
    """
    seen = set()
    remote = []
    for record in records:
        if record.is_local:
            continue
        if local_network_id and record.network_id == local_network_id:
            continue
        if record.network_id in seen:
            continue
        seen.add(record.network_id)
        remote.append(record)

    remote.sort(key=lambda r: (r.name.casefold(), r.network_id))
    return DiscoverySnapshot(devices=tuple(remote))


def should_redraw(
    previous_fingerprint: Optional[str], snapshot: DiscoverySnapshot
) -> Tuple[bool, str]:
    """
    Decide whether the table must be redrawn.

    Args:
        previous_fingerprint: Fingerprint of the table on screen, None if invalidated
        snapshot: Snapshot from the current poll

    Returns:
        Tuple of (redraw needed, fingerprint of the current snapshot)
    """
    fingerprint = snapshot.fingerprint()
    return fingerprint != previous_fingerprint, fingerprint
