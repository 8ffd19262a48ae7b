"""
Reconcile discovered hosts into the equipment inventory.

The IP address is the identity key: a host seen again at the same address
updates its existing record, a new address creates one.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, Optional

from ._types import Equipment, EquipmentStatus, EquipmentType, now_utc
from .equipment_store import EquipmentStore

logger = logging.getLogger(__name__)

_MIN_STEP = timedelta(microseconds=1)


class EquipmentReconciler:
    """Create-or-update equipment records from discovery results."""

    def __init__(
        self,
        store: EquipmentStore,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.store = store
        self.clock = clock

    def create_or_update_from_discovery(
        self,
        ip_address: str,
        mac_address: Optional[str],
        hostname: Optional[str],
        equipment_type: EquipmentType,
        manufacturer: Optional[str],
        model: Optional[str],
        os_name: Optional[str] = None,
        os_version: Optional[str] = None,
        specifications: Optional[str] = None,
    ) -> Equipment:
        """
        Upsert by IP address and mark the record ONLINE.

        Existing records keep their id and every manual-entry field.
        os_name, os_version and specifications are only overwritten when
        supplied. MAC and hostname are written without uniqueness checks.
        """
        existing = self.store.find_by_ip_address(ip_address)
        now = self.clock()

        if existing is None:
            equipment = Equipment(
                ip_address=ip_address,
                mac_address=mac_address,
                hostname=hostname,
                equipment_type=equipment_type,
                manufacturer=manufacturer,
                model=model,
                os_name=os_name,
                os_version=os_version,
                specifications=specifications,
                status=EquipmentStatus.ONLINE,
                last_seen=now,
                created_at=now,
                updated_at=now,
            )
            created = self.store.insert(equipment)
            logger.info(f"New equipment {created.id} discovered at {ip_address}")
            return created

        # last_seen must move forward even if the clock did not
        if existing.last_seen is not None and now <= existing.last_seen:
            now = existing.last_seen + _MIN_STEP

        updated = replace(
            existing,
            mac_address=mac_address,
            hostname=hostname,
            equipment_type=equipment_type,
            manufacturer=manufacturer,
            model=model,
            os_name=os_name if os_name is not None else existing.os_name,
            os_version=os_version if os_version is not None else existing.os_version,
            specifications=(
                specifications if specifications is not None else existing.specifications
            ),
            status=EquipmentStatus.ONLINE,
            last_seen=now,
            updated_at=now,
        )
        self.store.update(updated)
        logger.debug(f"Updated equipment {existing.id} at {ip_address}")
        return updated
