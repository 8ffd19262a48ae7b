"""
Equipment inventory store.

``EquipmentStore`` is the interface discovery writes through;
``SqliteEquipmentStore`` implements it on a local SQLite database
(default /var/lib/helpdesk/equipment.db).

Uses WAL mode for crash safety and concurrent reads.
"""

from __future__ import annotations

import logging
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from ._types import Equipment, EquipmentStatus, EquipmentType, now_utc
from .exceptions import DuplicateEquipmentError

logger = logging.getLogger(__name__)


# Database schema
SCHEMA = """
CREATE TABLE IF NOT EXISTS equipment (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    ip_address TEXT NOT NULL UNIQUE,
    hostname TEXT,
    mac_address TEXT,

    -- Discovery fields
    equipment_type TEXT NOT NULL DEFAULT 'UNKNOWN',
    manufacturer TEXT,
    model TEXT,
    os_name TEXT,
    os_version TEXT,
    status TEXT NOT NULL DEFAULT 'UNKNOWN',
    last_seen TEXT,
    specifications TEXT,  -- JSON

    -- Manual-entry fields
    serial_number TEXT,
    location TEXT,
    asset_tag TEXT,
    is_managed BOOLEAN DEFAULT FALSE,
    purchase_date TEXT,
    warranty_expiry TEXT,

    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_equipment_mac ON equipment(mac_address);
CREATE INDEX IF NOT EXISTS idx_equipment_hostname ON equipment(hostname);
CREATE INDEX IF NOT EXISTS idx_equipment_type ON equipment(equipment_type);
CREATE INDEX IF NOT EXISTS idx_equipment_status ON equipment(status);
"""

_COLUMNS = (
    "ip_address", "hostname", "mac_address",
    "equipment_type", "manufacturer", "model", "os_name", "os_version",
    "status", "last_seen", "specifications",
    "serial_number", "location", "asset_tag", "is_managed",
    "purchase_date", "warranty_expiry",
    "created_at", "updated_at",
)


def _iso_format(dt: Optional[datetime]) -> Optional[str]:
    """Format datetime as ISO string."""
    return dt.isoformat() if dt else None


def _parse_datetime(s: Optional[str]) -> Optional[datetime]:
    """Parse ISO datetime string."""
    if not s:
        return None
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        return None


class EquipmentStore(ABC):
    """Persistence interface used by discovery."""

    @abstractmethod
    def find_by_ip_address(self, ip_address: str) -> Optional[Equipment]:
        pass

    @abstractmethod
    def find_by_mac_address(self, mac_address: str) -> Optional[Equipment]:
        pass

    @abstractmethod
    def find_by_hostname(self, hostname: str) -> Optional[Equipment]:
        pass

    def exists_by_ip_address(self, ip_address: str) -> bool:
        return self.find_by_ip_address(ip_address) is not None

    def exists_by_mac_address(self, mac_address: str) -> bool:
        return self.find_by_mac_address(mac_address) is not None

    def exists_by_hostname(self, hostname: str) -> bool:
        return self.find_by_hostname(hostname) is not None

    @abstractmethod
    def insert(self, equipment: Equipment) -> Equipment:
        """Persist a new record. Returns it with its assigned id."""
        pass

    @abstractmethod
    def update(self, equipment: Equipment) -> Equipment:
        """Overwrite an existing record (matched by id)."""
        pass

    @abstractmethod
    def get(self, equipment_id: int) -> Optional[Equipment]:
        pass

    @abstractmethod
    def list_equipment(self) -> list[Equipment]:
        pass


class SqliteEquipmentStore(EquipmentStore):
    """
    SQLite equipment inventory.

    Only ip_address is unique at the schema level. MAC and hostname
    uniqueness is enforced by register_equipment() for manual entry;
    discovery is allowed to move them between records.
    """

    def __init__(self, db_path: Path | str = "/var/lib/helpdesk/equipment.db"):
        self.db_path = Path(db_path)
        self._ensure_directory()
        self._init_db()

    def _ensure_directory(self) -> None:
        """Ensure database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _init_db(self) -> None:
        """Initialize database with schema."""
        with self._get_connection() as conn:
            conn.executescript(SCHEMA)
            # Enable WAL mode for crash safety
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA synchronous=NORMAL")
            conn.commit()

    @contextmanager
    def _get_connection(self) -> Iterator[sqlite3.Connection]:
        """Get database connection with row factory."""
        conn = sqlite3.connect(str(self.db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def _find_one(self, column: str, value: object) -> Optional[Equipment]:
        with self._get_connection() as conn:
            row = conn.execute(
                f"SELECT * FROM equipment WHERE {column} = ? ORDER BY id LIMIT 1",
                (value,)
            ).fetchone()
            if row:
                return self._row_to_equipment(row)
            return None

    def find_by_ip_address(self, ip_address: str) -> Optional[Equipment]:
        return self._find_one("ip_address", ip_address)

    def find_by_mac_address(self, mac_address: str) -> Optional[Equipment]:
        return self._find_one("mac_address", mac_address)

    def find_by_hostname(self, hostname: str) -> Optional[Equipment]:
        return self._find_one("hostname", hostname)

    def get(self, equipment_id: int) -> Optional[Equipment]:
        """Get equipment by ID."""
        return self._find_one("id", equipment_id)

    def list_equipment(
        self,
        equipment_type: Optional[EquipmentType] = None,
        status: Optional[EquipmentStatus] = None,
    ) -> list[Equipment]:
        """List equipment with optional filters, ordered by id."""
        query = "SELECT * FROM equipment WHERE 1=1"
        params: list = []

        if equipment_type:
            query += " AND equipment_type = ?"
            params.append(equipment_type.value)

        if status:
            query += " AND status = ?"
            params.append(status.value)

        query += " ORDER BY id"

        with self._get_connection() as conn:
            rows = conn.execute(query, params).fetchall()
            return [self._row_to_equipment(row) for row in rows]

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def insert(self, equipment: Equipment) -> Equipment:
        """
        Insert a new record.

        Raises:
            sqlite3.IntegrityError: If the IP address is already stored
        """
        placeholders = ", ".join("?" for _ in _COLUMNS)
        with self._get_connection() as conn:
            cursor = conn.execute(
                f"INSERT INTO equipment ({', '.join(_COLUMNS)}) VALUES ({placeholders})",
                self._to_params(equipment),
            )
            conn.commit()
            equipment_id = cursor.lastrowid

        logger.debug(f"Inserted equipment {equipment_id} ({equipment.ip_address})")
        return replace(equipment, id=equipment_id)

    def update(self, equipment: Equipment) -> Equipment:
        """
        Overwrite every column of an existing record.

        Raises:
            KeyError: If no record has the equipment's id
        """
        if equipment.id is None:
            raise KeyError("Cannot update equipment without an id")

        assignments = ", ".join(f"{column} = ?" for column in _COLUMNS)
        with self._get_connection() as conn:
            cursor = conn.execute(
                f"UPDATE equipment SET {assignments} WHERE id = ?",
                (*self._to_params(equipment), equipment.id),
            )
            conn.commit()
            if cursor.rowcount == 0:
                raise KeyError(f"Equipment {equipment.id} not found")

        return equipment

    def register_equipment(self, equipment: Equipment) -> Equipment:
        """
        Manual-entry path: insert after uniqueness checks.

        Raises:
            DuplicateEquipmentError: If the IP, MAC or hostname is taken
        """
        if self.exists_by_ip_address(equipment.ip_address):
            raise DuplicateEquipmentError("IP address", equipment.ip_address)
        if equipment.mac_address and self.exists_by_mac_address(equipment.mac_address):
            raise DuplicateEquipmentError("MAC address", equipment.mac_address)
        if equipment.hostname and self.exists_by_hostname(equipment.hostname):
            raise DuplicateEquipmentError("hostname", equipment.hostname)

        now = now_utc()
        return self.insert(replace(equipment, created_at=now, updated_at=now))

    # -------------------------------------------------------------------------
    # Row mapping
    # -------------------------------------------------------------------------

    def _to_params(self, equipment: Equipment) -> tuple:
        return (
            equipment.ip_address,
            equipment.hostname,
            equipment.mac_address,
            equipment.equipment_type.value,
            equipment.manufacturer,
            equipment.model,
            equipment.os_name,
            equipment.os_version,
            equipment.status.value,
            _iso_format(equipment.last_seen),
            equipment.specifications,
            equipment.serial_number,
            equipment.location,
            equipment.asset_tag,
            equipment.is_managed,
            _iso_format(equipment.purchase_date),
            _iso_format(equipment.warranty_expiry),
            _iso_format(equipment.created_at),
            _iso_format(equipment.updated_at),
        )

    def _row_to_equipment(self, row: sqlite3.Row) -> Equipment:
        """Convert database row to Equipment."""
        return Equipment(
            id=row["id"],
            ip_address=row["ip_address"],
            hostname=row["hostname"],
            mac_address=row["mac_address"],
            equipment_type=EquipmentType(row["equipment_type"]),
            manufacturer=row["manufacturer"],
            model=row["model"],
            os_name=row["os_name"],
            os_version=row["os_version"],
            status=EquipmentStatus(row["status"]),
            last_seen=_parse_datetime(row["last_seen"]),
            specifications=row["specifications"],
            serial_number=row["serial_number"],
            location=row["location"],
            asset_tag=row["asset_tag"],
            is_managed=bool(row["is_managed"]),
            purchase_date=_parse_datetime(row["purchase_date"]),
            warranty_expiry=_parse_datetime(row["warranty_expiry"]),
            created_at=_parse_datetime(row["created_at"]) or now_utc(),
            updated_at=_parse_datetime(row["updated_at"]) or now_utc(),
        )
