"""
Fixed-interval scan scheduler.

Fires once on start and then every interval. Each firing starts a
background scan and returns immediately, so a slow scan never delays the
next firing and runs may overlap.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from ._types import DiscoveryStatus
from .discovery_service import DiscoveryService

logger = logging.getLogger(__name__)


class ScanScheduler:
    """Periodic trigger for DiscoveryService.start_scan()."""

    def __init__(
        self,
        service: DiscoveryService,
        interval_seconds: float,
        enabled: Optional[bool] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Args:
            service: Discovery service to trigger
            interval_seconds: Time between firings
            enabled: Whether firings start scans; None keeps the
                service's current setting
            sleep: Awaitable delay, replaceable for tests
        """
        self.service = service
        self.interval_seconds = interval_seconds
        if enabled is not None:
            service.enabled = enabled
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None

    @property
    def enabled(self) -> bool:
        """Shared with DiscoveryService.get_status()."""
        return self.service.enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self.service.enabled = value

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the ticker loop (no-op if already running)."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info(
            f"Scan scheduler started (interval={self.interval_seconds}s, "
            f"enabled={self.enabled})"
        )

    async def stop(self) -> None:
        """Stop the ticker loop. Scans already started keep running."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Scan scheduler stopped")

    def enable(self) -> None:
        self.enabled = True
        logger.info("Scheduled discovery enabled")

    def disable(self) -> None:
        self.enabled = False
        logger.info("Scheduled discovery disabled")

    async def tick(self) -> Optional[asyncio.Task]:
        """One firing: start a scan if enabled."""
        if not self.enabled:
            logger.info("Network discovery is disabled")
            return None
        logger.info("Starting scheduled network discovery scan")
        return self.service.start_scan(triggered_by="schedule")

    def status(self) -> DiscoveryStatus:
        return DiscoveryStatus(
            enabled=self.enabled,
            subnet_ranges=self.service.get_status().subnet_ranges,
        )

    async def _run(self) -> None:
        while True:
            try:
                await self.tick()
            except Exception as e:
                logger.error(f"Error in scheduled scan: {e}")
            await self._sleep(self.interval_seconds)
