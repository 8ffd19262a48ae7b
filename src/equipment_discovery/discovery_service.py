"""
Discovery orchestration.

Sweeps every configured subnet, interrogates reachable hosts over SNMP,
classifies them and reconciles the results into the equipment store.

Failures are contained at the smallest unit: a bad subnet is skipped, a
failing host is skipped, a failing OID leaves one field empty.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from ._types import DiscoveryStatus, Equipment, ScanReport, now_utc
from .classifier import classify
from .config import DiscoveryConfig
from .equipment_store import EquipmentStore, SqliteEquipmentStore
from .exceptions import InvalidRangeError
from .host_identity import HostIdentityResolver
from .reachability import NmapPingSweep, PingProbe, ReachabilityProber
from .reconciler import EquipmentReconciler
from .snmp_client import SnmpClient
from .subnet import check_scannable, parse_subnet, validate_address

logger = logging.getLogger(__name__)


class DiscoveryService:
    """
    Network discovery service.

    Collaborators default to the production implementations built from
    the config; tests pass their own.
    """

    def __init__(
        self,
        config: DiscoveryConfig,
        store: Optional[EquipmentStore] = None,
        snmp_client: Optional[SnmpClient] = None,
        prober: Optional[ReachabilityProber] = None,
        identity: Optional[HostIdentityResolver] = None,
        reconciler: Optional[EquipmentReconciler] = None,
    ):
        self.config = config

        if store is None:
            store = SqliteEquipmentStore(config.db_path)
        self.store = store

        if snmp_client is None:
            snmp_client = SnmpClient(
                community=config.snmp_community,
                timeout=config.snmp_timeout_seconds,
                retries=config.snmp_retries,
            )
        self.snmp_client = snmp_client

        if prober is None:
            prober = ReachabilityProber(
                primary=NmapPingSweep(host_timeout=config.probe_timeout),
                fallback=PingProbe(
                    timeout=config.probe_timeout,
                    max_concurrent=config.max_concurrent_probes,
                ),
            )
        self.prober = prober

        self.identity = identity if identity is not None else HostIdentityResolver()
        self.reconciler = reconciler if reconciler is not None else EquipmentReconciler(store)

        self._host_semaphore = asyncio.Semaphore(config.max_concurrent_hosts)
        self._tasks: set[asyncio.Task] = set()
        self.last_report: Optional[ScanReport] = None
        # Scheduled scans only; toggled by ScanScheduler.enable/disable
        self.enabled = config.enabled

    # -------------------------------------------------------------------------
    # Full scan
    # -------------------------------------------------------------------------

    def start_scan(self, triggered_by: str = "manual") -> asyncio.Task:
        """Start scan_all in the background and return its task."""
        task = asyncio.get_running_loop().create_task(self.scan_all(triggered_by))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def scan_all(self, triggered_by: str = "manual") -> list[Equipment]:
        """
        Scan every configured subnet.

        Returns the equipment records created or updated by this run.
        """
        report = ScanReport(triggered_by=triggered_by)
        logger.info(
            f"Starting network discovery scan (id={report.scan_id}, "
            f"triggered_by={triggered_by})"
        )

        for cidr in self.config.subnet_ranges:
            try:
                equipment = await self.scan_subnet(cidr, report)
            except InvalidRangeError as e:
                logger.warning(f"Skipping subnet {cidr}: {e}")
                report.subnets_failed.append(cidr)
                continue
            except Exception as e:
                logger.error(f"Error scanning subnet {cidr}: {e}")
                report.subnets_failed.append(cidr)
                continue

            report.subnets_scanned.append(cidr)
            report.equipment.extend(equipment)

        report.completed_at = now_utc()
        self.last_report = report

        if report.no_subnets_scanned:
            logger.warning("Network discovery finished: no subnets scanned")
        logger.info(
            f"Network discovery completed: {report.devices_found} devices from "
            f"{len(report.subnets_scanned)} subnets "
            f"({report.hosts_reachable} reachable, "
            f"{len(report.subnets_failed)} subnets failed)"
        )
        return list(report.equipment)

    async def scan_subnet(
        self,
        cidr: str,
        report: Optional[ScanReport] = None,
    ) -> list[Equipment]:
        """
        Sweep one subnet and reconcile every reachable host.

        Raises:
            InvalidRangeError: If the CIDR cannot be parsed, is IPv6, or
                exceeds max_hosts_per_subnet
        """
        subnet = check_scannable(parse_subnet(cidr), self.config.max_hosts_per_subnet)
        logger.info(f"Scanning subnet: {subnet.cidr} ({subnet.num_hosts} hosts)")

        reachable = await self.prober.reachable_hosts(subnet)
        if report is not None:
            report.hosts_reachable += len(reachable)
        logger.info(f"{len(reachable)} reachable hosts in {subnet.cidr}")

        results = await asyncio.gather(
            *(self._discover_isolated(address) for address in reachable)
        )
        return [equipment for equipment in results if equipment is not None]

    async def _discover_isolated(self, ip_address: str) -> Optional[Equipment]:
        async with self._host_semaphore:
            try:
                return await self._discover_host(ip_address, require_signature=False)
            except Exception as e:
                logger.error(f"Error discovering device {ip_address}: {e}")
                return None

    async def _discover_host(
        self,
        ip_address: str,
        require_signature: bool,
    ) -> Optional[Equipment]:
        """
        Per-host pipeline: SNMP, identity lookup, classify, reconcile.

        With require_signature, a host without SNMP is not written.
        """
        signature = await self.snmp_client.get_signature(ip_address)
        if signature is None and require_signature:
            logger.info(f"No SNMP response from {ip_address}")
            return None

        hostname, mac_address = await self.identity.resolve(ip_address)
        classification = classify(signature, hostname)

        return self.reconciler.create_or_update_from_discovery(
            ip_address=ip_address,
            mac_address=mac_address,
            hostname=hostname,
            equipment_type=classification.equipment_type,
            manufacturer=classification.manufacturer,
            model=classification.model,
            os_name=classification.os_name,
            os_version=classification.os_version,
            specifications=signature.to_json() if signature else None,
        )

    # -------------------------------------------------------------------------
    # Single host
    # -------------------------------------------------------------------------

    async def scan_one(self, ip_address: str) -> Optional[Equipment]:
        """
        Discover a single address without a reachability sweep.

        Returns None (and writes nothing) if the host gives no SNMP
        signature.

        Raises:
            InvalidRangeError: If ip_address is not an IP literal
        """
        address = validate_address(ip_address)
        logger.info(f"Scanning single device: {address}")
        return await self._discover_host(address, require_signature=True)

    async def test_connectivity(self, ip_address: str) -> bool:
        """True if the address answers SNMP."""
        address = validate_address(ip_address)
        return await self.snmp_client.test_connectivity(address)

    def get_status(self) -> DiscoveryStatus:
        return DiscoveryStatus(
            enabled=self.enabled,
            subnet_ranges=tuple(self.config.subnet_ranges),
        )
