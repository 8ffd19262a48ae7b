"""
Subnet enumeration.

Turns a configured CIDR string into the candidate host addresses of that
range. Network and broadcast addresses are excluded for prefixes up to /30;
a /31 yields both addresses and a /32 the single host.
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import Iterator, Union

from .exceptions import InvalidRangeError

IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]


@dataclass(frozen=True)
class SubnetRange:
    """
    A parsed CIDR range.

    Iterating yields a fresh lazy sequence of host addresses every time,
    so the same range can be walked by more than one strategy.
    """
    cidr: str
    network: IPNetwork

    def __iter__(self) -> Iterator[str]:
        return (str(host) for host in self.network.hosts())

    @property
    def num_hosts(self) -> int:
        """Number of candidate host addresses."""
        total = self.network.num_addresses
        if self.network.version == 4 and self.network.prefixlen <= 30:
            return total - 2
        if self.network.version == 6 and self.network.prefixlen <= 126:
            return total - 1  # Subnet-Router anycast
        return total

    def __str__(self) -> str:
        return self.cidr


def parse_subnet(cidr: str) -> SubnetRange:
    """
    Parse a CIDR string.

    Host bits are tolerated ("10.0.0.5/24" -> 10.0.0.0/24).

    Raises:
        InvalidRangeError: on malformed input
    """
    if not isinstance(cidr, str) or not cidr.strip():
        raise InvalidRangeError(str(cidr), "empty range")

    text = cidr.strip()
    if "/" not in text:
        raise InvalidRangeError(text, "missing prefix length")

    try:
        network = ipaddress.ip_network(text, strict=False)
    except ValueError as e:
        raise InvalidRangeError(text, str(e)) from e

    return SubnetRange(cidr=str(network), network=network)


def check_scannable(subnet: SubnetRange, max_hosts: int) -> SubnetRange:
    """
    Reject ranges that cannot be swept host by host.

    Raises:
        InvalidRangeError: for IPv6 ranges or more than max_hosts hosts
    """
    if subnet.network.version != 4:
        raise InvalidRangeError(subnet.cidr, "IPv6 ranges cannot be swept")
    if subnet.num_hosts > max_hosts:
        raise InvalidRangeError(
            subnet.cidr,
            f"{subnet.num_hosts} hosts exceeds limit of {max_hosts}",
        )
    return subnet


def enumerate_hosts(cidr: str) -> Iterator[str]:
    """Lazy sequence of host addresses in a CIDR range."""
    return iter(parse_subnet(cidr))


def parse_subnet_list(value: str) -> list[str]:
    """Split a comma-separated range list into trimmed, non-empty entries."""
    return [part.strip() for part in value.split(",") if part.strip()]


def validate_address(address: str) -> str:
    """Normalize a single IP address literal."""
    try:
        return str(ipaddress.ip_address(address.strip()))
    except (ValueError, AttributeError) as e:
        raise InvalidRangeError(str(address), "not an IP address") from e
