"""
Reachability strategies for subnet sweeps.

Each strategy implements the same interface:
- async probe(subnet) -> list[HostProbeResult]

Strategies:
- Nmap ping sweep: one nmap pass over the whole range (primary)
- Ping probe: one ping per candidate address (fallback)
"""

from .base import ReachabilityStrategy
from .nmap_sweep import NmapPingSweep
from .ping_probe import PingProbe
from .prober import ReachabilityProber

__all__ = [
    "ReachabilityStrategy",
    "NmapPingSweep",
    "PingProbe",
    "ReachabilityProber",
]
