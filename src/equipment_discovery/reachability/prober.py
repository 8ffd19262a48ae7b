"""
Reachability prober: primary strategy with automatic fallback.
"""

from __future__ import annotations

import logging
from typing import Optional

from .._types import HostProbeResult
from ..subnet import SubnetRange
from .base import ReachabilityStrategy

logger = logging.getLogger(__name__)


class ReachabilityProber:
    """
    Selects a strategy once via capability check and falls back at runtime.

    The primary (tool-backed) strategy is used when available. If it is
    unavailable, or raises during a sweep, the fallback strategy runs
    instead. Fallback is logged, never surfaced as an error.
    """

    def __init__(
        self,
        primary: ReachabilityStrategy,
        fallback: ReachabilityStrategy,
    ):
        self.primary = primary
        self.fallback = fallback
        self._selected: Optional[ReachabilityStrategy] = None

    async def select_strategy(self) -> ReachabilityStrategy:
        """Pick the strategy to use (cached after the first call)."""
        if self._selected is None:
            try:
                available = await self.primary.is_available()
            except Exception as e:
                logger.warning(f"Availability check for {self.primary.name} failed: {e}")
                available = False

            if available:
                self._selected = self.primary
            else:
                logger.warning(
                    f"{self.primary.name} not available, "
                    f"falling back to {self.fallback.name}"
                )
                self._selected = self.fallback
                await self._check_fallback()
            logger.info(f"Reachability strategy: {self._selected.name}")
        return self._selected

    async def _check_fallback(self) -> None:
        try:
            available = await self.fallback.is_available()
        except Exception as e:
            logger.warning(f"Availability check for {self.fallback.name} failed: {e}")
            available = False
        if not available:
            logger.error(
                f"{self.fallback.name} is not available either; "
                f"every host will be reported unreachable"
            )

    async def probe(self, subnet: SubnetRange) -> list[HostProbeResult]:
        """Probe a subnet with the selected strategy."""
        strategy = await self.select_strategy()
        if strategy is self.fallback:
            return await self.fallback.probe(subnet)

        try:
            return await strategy.probe(subnet)
        except Exception as e:
            logger.warning(
                f"{strategy.name} sweep of {subnet.cidr} failed ({e}), "
                f"retrying with {self.fallback.name}"
            )
            return await self.fallback.probe(subnet)

    async def reachable_hosts(self, subnet: SubnetRange) -> list[str]:
        """Addresses of the subnet that currently respond."""
        results = await self.probe(subnet)
        return [r.address for r in results if r.reachable]
