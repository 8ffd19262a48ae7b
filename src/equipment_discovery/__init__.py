"""
Equipment Discovery - network asset discovery for the helpdesk inventory.

Sweeps configured subnets, interrogates reachable hosts over SNMP v2c,
classifies them and keeps the equipment inventory up to date.

Pipeline:
    subnet -> reachability probe -> SNMP signature + hostname/MAC
           -> classification -> reconcile by IP into the equipment store
"""

__version__ = "0.1.0"

from ._types import (
    Classification,
    DeviceSignature,
    DiscoveryStatus,
    Equipment,
    EquipmentStatus,
    EquipmentType,
    HostProbeResult,
    ScanReport,
)
from .exceptions import DiscoveryError, DuplicateEquipmentError, InvalidRangeError

__all__ = [
    "__version__",
    "Classification",
    "DeviceSignature",
    "DiscoveryStatus",
    "Equipment",
    "EquipmentStatus",
    "EquipmentType",
    "HostProbeResult",
    "ScanReport",
    "DiscoveryError",
    "DuplicateEquipmentError",
    "InvalidRangeError",
]
