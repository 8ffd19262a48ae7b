"""
Base class for reachability strategies.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from .._types import HostProbeResult
from ..subnet import SubnetRange


class ReachabilityStrategy(ABC):
    """
    Determines which addresses of a subnet currently respond.

    Implementations must isolate per-host failures: a host that errors is
    reported as unreachable (or omitted) rather than aborting the sweep.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of this strategy."""
        pass

    @abstractmethod
    async def probe(self, subnet: SubnetRange) -> list[HostProbeResult]:
        """
        Probe every candidate address of the subnet.

        No ordering guarantee on the returned results.
        """
        pass

    async def is_available(self) -> bool:
        """Check if this strategy can run on this host."""
        return True
