"""
Type definitions for equipment discovery.

These dataclasses define the domain model passed between the discovery
stages (probe, SNMP, classification, reconciliation) and the equipment
record owned by the inventory store.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


def now_utc() -> datetime:
    """Get current UTC timestamp (replaces deprecated datetime.utcnow())."""
    return datetime.now(timezone.utc)


class EquipmentType(str, Enum):
    """Equipment classification types."""
    DESKTOP = "DESKTOP"
    LAPTOP = "LAPTOP"
    SERVER = "SERVER"
    PRINTER = "PRINTER"
    SWITCH = "SWITCH"
    ROUTER = "ROUTER"
    ACCESS_POINT = "ACCESS_POINT"
    FIREWALL = "FIREWALL"
    UPS = "UPS"
    SCANNER = "SCANNER"
    PROJECTOR = "PROJECTOR"
    PHONE = "PHONE"
    MONITOR = "MONITOR"
    STORAGE = "STORAGE"
    UNKNOWN = "UNKNOWN"


class EquipmentStatus(str, Enum):
    """Equipment lifecycle status."""
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"
    MAINTENANCE = "MAINTENANCE"  # Set manually, never by discovery
    RETIRED = "RETIRED"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class HostProbeResult:
    """Reachability of one candidate address."""
    address: str
    reachable: bool


@dataclass(frozen=True)
class DeviceSignature:
    """
    SNMP values gathered from one host.

    Any field may be None when the corresponding GET failed.
    """
    system_description: Optional[str] = None
    system_name: Optional[str] = None
    system_location: Optional[str] = None
    system_contact: Optional[str] = None
    system_uptime: Optional[str] = None
    interface_count: Optional[int] = None
    process_count: Optional[str] = None

    def to_json(self) -> str:
        """Serialize for the equipment record's specifications column."""
        return json.dumps({
            "systemDescription": self.system_description,
            "systemName": self.system_name,
            "systemLocation": self.system_location,
            "systemContact": self.system_contact,
            "systemUptime": self.system_uptime,
            "interfaceCount": self.interface_count,
            "processCount": self.process_count,
        }, sort_keys=True)


@dataclass(frozen=True)
class Classification:
    """Best-guess identity of a discovered device."""
    equipment_type: EquipmentType = EquipmentType.UNKNOWN
    manufacturer: Optional[str] = None
    model: Optional[str] = None
    os_name: Optional[str] = None
    os_version: Optional[str] = None


@dataclass
class Equipment:
    """
    An equipment record in the inventory store.

    The id is assigned by the store on insert and never changes. Discovery
    only writes the discovery fields; asset tag, warranty, location and the
    management flag belong to manual entry.
    """
    ip_address: str
    id: Optional[int] = None
    hostname: Optional[str] = None
    mac_address: Optional[str] = None

    # Discovery fields
    equipment_type: EquipmentType = EquipmentType.UNKNOWN
    manufacturer: Optional[str] = None
    model: Optional[str] = None
    os_name: Optional[str] = None
    os_version: Optional[str] = None
    status: EquipmentStatus = EquipmentStatus.UNKNOWN
    last_seen: Optional[datetime] = None
    specifications: Optional[str] = None  # JSON text

    # Manual-entry fields
    serial_number: Optional[str] = None
    location: Optional[str] = None
    asset_tag: Optional[str] = None
    is_managed: bool = False
    purchase_date: Optional[datetime] = None
    warranty_expiry: Optional[datetime] = None

    created_at: datetime = field(default_factory=now_utc)
    updated_at: datetime = field(default_factory=now_utc)

    def to_dict(self) -> dict:
        """JSON-friendly representation used by the API."""
        def _iso(dt: Optional[datetime]) -> Optional[str]:
            return dt.isoformat() if dt else None

        return {
            "id": self.id,
            "ipAddress": self.ip_address,
            "hostname": self.hostname,
            "macAddress": self.mac_address,
            "equipmentType": self.equipment_type.value,
            "manufacturer": self.manufacturer,
            "model": self.model,
            "osName": self.os_name,
            "osVersion": self.os_version,
            "status": self.status.value,
            "lastSeen": _iso(self.last_seen),
            "specifications": self.specifications,
            "serialNumber": self.serial_number,
            "location": self.location,
            "assetTag": self.asset_tag,
            "isManaged": self.is_managed,
            "purchaseDate": _iso(self.purchase_date),
            "warrantyExpiry": _iso(self.warranty_expiry),
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


@dataclass(frozen=True)
class DiscoveryStatus:
    """Scheduler/orchestrator status."""
    enabled: bool
    subnet_ranges: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "enabled": self.enabled,
            "subnetRanges": list(self.subnet_ranges),
        }


@dataclass
class ScanReport:
    """Summary of one scan_all run."""
    scan_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    triggered_by: str = "manual"  # schedule, manual, api
    started_at: datetime = field(default_factory=now_utc)
    completed_at: Optional[datetime] = None

    subnets_scanned: list[str] = field(default_factory=list)
    subnets_failed: list[str] = field(default_factory=list)
    hosts_reachable: int = 0
    equipment: list[Equipment] = field(default_factory=list)

    @property
    def devices_found(self) -> int:
        return len(self.equipment)

    @property
    def no_subnets_scanned(self) -> bool:
        return not self.subnets_scanned
