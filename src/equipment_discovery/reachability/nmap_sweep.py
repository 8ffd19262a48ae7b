"""
Nmap-based ping sweep.

Sweeps a whole CIDR range in one nmap pass (``nmap -sn``). This is the
primary reachability strategy; it is only selected when the nmap binary
is installed.
"""

from __future__ import annotations

import asyncio
import logging

import nmap

from .._types import HostProbeResult
from ..subnet import SubnetRange
from .base import ReachabilityStrategy

logger = logging.getLogger(__name__)


class NmapPingSweep(ReachabilityStrategy):
    """
    Quick ping sweep using nmap.

    Only hosts reported "up" are returned; nmap does not report the
    addresses that stayed silent.
    """

    def __init__(self, host_timeout: int = 1):
        """
        Initialize ping sweep.

        Args:
            host_timeout: Timeout per host in seconds
        """
        self.host_timeout = host_timeout

    @property
    def name(self) -> str:
        return "nmap-ping"

    async def is_available(self) -> bool:
        """Check if the nmap binary can be located."""
        loop = asyncio.get_running_loop()
        try:
            # PortScanner() runs `nmap -V` synchronously
            await loop.run_in_executor(None, nmap.PortScanner)
        except nmap.PortScannerError:
            logger.info("nmap binary not found")
            return False
        return True

    async def probe(self, subnet: SubnetRange) -> list[HostProbeResult]:
        """Run ping sweep over the subnet."""
        loop = asyncio.get_running_loop()
        # python-nmap blocks on the subprocess
        results = await loop.run_in_executor(None, self._ping_sweep, subnet.cidr)
        logger.info(f"Ping sweep of {subnet.cidr} found {len(results)} hosts")
        return results

    def _ping_sweep(self, network_range: str) -> list[HostProbeResult]:
        """Run ping sweep (blocking)."""
        scanner = nmap.PortScanner()
        scanner.scan(
            hosts=network_range,
            arguments=f"-sn -n --host-timeout {self.host_timeout}s",
        )

        results = []
        for host in scanner.all_hosts():
            if scanner[host].state() == "up":
                results.append(HostProbeResult(address=host, reachable=True))
        return results
