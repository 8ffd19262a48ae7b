"""
Hostname and MAC lookup for discovered addresses.

Hostnames come from reverse DNS, MAC addresses from the local ARP cache.
Both are best effort: a lookup that fails or times out yields None.
"""

from __future__ import annotations

import asyncio
import logging
import re
import socket
from typing import Optional

logger = logging.getLogger(__name__)

# Linux: ? (192.168.1.1) at aa:bb:cc:dd:ee:ff [ether] on eth0
# macOS: ? (192.168.1.1) at 0:1b:63:aa:bb:cc on en0 ifscope [ethernet]
ARP_LINE_PATTERN = re.compile(
    r"(?:(\S+)\s+)?\((\d+\.\d+\.\d+\.\d+)\)\s+at\s+([0-9a-fA-F:]+)"
)

_IGNORED_MACS = ("ff:ff:ff:ff:ff:ff", "00:00:00:00:00:00")


def normalize_mac(mac: str) -> Optional[str]:
    """Lowercase, colon-separated, zero-padded. None if not a MAC."""
    parts = mac.strip().lower().replace("-", ":").split(":")
    if len(parts) != 6:
        return None
    try:
        octets = [int(p, 16) for p in parts]
    except ValueError:
        return None
    if any(o > 0xFF for o in octets):
        return None
    return ":".join(f"{o:02x}" for o in octets)


def parse_arp_output(output: str, ip_address: str) -> Optional[str]:
    """Find the MAC for ip_address in ``arp -an`` output."""
    for line in output.splitlines():
        match = ARP_LINE_PATTERN.search(line)
        if not match or match.group(2) != ip_address:
            continue
        mac = normalize_mac(match.group(3))
        if mac and mac not in _IGNORED_MACS:
            return mac
    return None


class HostIdentityResolver:
    """Resolve (hostname, mac) for an address."""

    def __init__(self, timeout: float = 2.0):
        self.timeout = timeout

    async def resolve(self, ip_address: str) -> tuple[Optional[str], Optional[str]]:
        hostname = await self.lookup_hostname(ip_address)
        mac = await self.lookup_mac(ip_address)
        return hostname, mac

    async def lookup_hostname(self, ip_address: str) -> Optional[str]:
        """Reverse DNS. None when unresolved."""
        loop = asyncio.get_running_loop()
        try:
            name, _, _ = await asyncio.wait_for(
                loop.run_in_executor(None, socket.gethostbyaddr, ip_address),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.debug(f"Reverse DNS timed out for {ip_address}")
            return None
        except OSError as e:
            logger.debug(f"Reverse DNS failed for {ip_address}: {e}")
            return None

        # Some resolvers echo the address back
        if not name or name == ip_address:
            return None
        return name

    async def lookup_mac(self, ip_address: str) -> Optional[str]:
        """MAC address from the ARP cache. None when not cached."""
        try:
            proc = await asyncio.create_subprocess_exec(
                "arp", "-an", ip_address,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.debug(f"ARP lookup failed for {ip_address}: {e}")
            return None

        try:
            stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.debug(f"ARP lookup timed out for {ip_address}")
            if proc.returncode is None:
                proc.kill()
            return None

        if proc.returncode != 0:
            return None
        return parse_arp_output(stdout.decode(errors="replace"), ip_address)
