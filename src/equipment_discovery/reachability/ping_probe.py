"""
Per-host ping probe.

Fallback reachability strategy: one ``ping`` per candidate address, each
with its own timeout. Slower than an nmap sweep but needs nothing beyond
the system ping binary.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from .._types import HostProbeResult
from ..subnet import SubnetRange
from .base import ReachabilityStrategy

logger = logging.getLogger(__name__)


class PingProbe(ReachabilityStrategy):
    """
    Probe each address individually.

    A failure or timeout on one address marks only that address
    unreachable; the rest of the sweep continues.
    """

    def __init__(self, timeout: int = 1, max_concurrent: int = 64):
        """
        Args:
            timeout: Per-host reply timeout in seconds
            max_concurrent: Maximum concurrent ping processes
        """
        self.timeout = timeout
        self.max_concurrent = max_concurrent

    @property
    def name(self) -> str:
        return "ping"

    async def is_available(self) -> bool:
        """Check if the ping command is available."""
        try:
            result = await asyncio.create_subprocess_exec(
                "which", "ping",
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
            await result.wait()
            return result.returncode == 0
        except OSError:
            return False

    async def probe(self, subnet: SubnetRange) -> list[HostProbeResult]:
        results = await self.probe_addresses(subnet)
        up = sum(1 for r in results if r.reachable)
        logger.info(f"Ping probe of {subnet.cidr}: {up}/{len(results)} hosts up")
        return results

    async def probe_addresses(self, addresses: Iterable[str]) -> list[HostProbeResult]:
        """
        Probe an address sequence, one independent check per host.

        A fixed pool of max_concurrent workers pulls from the shared
        iterator, so the sequence is consumed lazily.
        """
        pending = iter(addresses)
        results: list[HostProbeResult] = []

        async def _worker() -> None:
            for address in pending:
                results.append(await self._probe_one(address))

        workers = [asyncio.create_task(_worker()) for _ in range(self.max_concurrent)]
        try:
            await asyncio.gather(*workers)
        finally:
            for worker in workers:
                worker.cancel()
        return results

    async def _probe_one(self, address: str) -> HostProbeResult:
        try:
            reachable = await asyncio.wait_for(
                self._ping(address),
                timeout=self.timeout + 1,
            )
        except asyncio.TimeoutError:
            logger.debug(f"Ping timeout for {address}")
            reachable = False
        except Exception as e:
            logger.debug(f"Ping failed for {address}: {e}")
            reachable = False
        return HostProbeResult(address=address, reachable=reachable)

    async def _ping(self, address: str) -> bool:
        """Send a single echo request. True if the host answered."""
        process = await asyncio.create_subprocess_exec(
            "ping", "-c", "1", "-W", str(self.timeout), address,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
        try:
            return await process.wait() == 0
        except asyncio.CancelledError:
            if process.returncode is None:
                process.kill()
            raise
