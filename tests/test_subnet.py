"""Tests for subnet enumeration."""

import pytest

from equipment_discovery.exceptions import InvalidRangeError
from equipment_discovery.subnet import (
    check_scannable,
    enumerate_hosts,
    parse_subnet,
    parse_subnet_list,
    validate_address,
)


class TestParseSubnet:
    """Tests for CIDR parsing."""

    @pytest.mark.parametrize("prefix", [24, 28, 29, 30])
    def test_host_count_excludes_network_and_broadcast(self, prefix):
        """Should yield 2^(32-n) - 2 addresses for /n <= 30."""
        subnet = parse_subnet(f"10.1.0.0/{prefix}")
        hosts = list(subnet)

        assert len(hosts) == 2 ** (32 - prefix) - 2
        assert subnet.num_hosts == len(hosts)
        assert "10.1.0.0" not in hosts

    def test_slash_30(self):
        """Should yield the two usable addresses of a /30."""
        assert list(enumerate_hosts("10.0.0.0/30")) == ["10.0.0.1", "10.0.0.2"]

    def test_slash_31_and_32(self):
        """Should yield both addresses of a /31 and the single /32 host."""
        assert list(enumerate_hosts("10.0.0.0/31")) == ["10.0.0.0", "10.0.0.1"]
        assert list(enumerate_hosts("10.0.0.7/32")) == ["10.0.0.7"]

    def test_host_bits_tolerated(self):
        """Should normalize host bits to the network address."""
        subnet = parse_subnet("192.168.1.77/24")
        assert subnet.cidr == "192.168.1.0/24"
        assert str(subnet) == "192.168.1.0/24"

    def test_iteration_is_restartable(self):
        """Should produce a fresh sequence on every iteration."""
        subnet = parse_subnet("10.0.0.0/29")
        assert list(subnet) == list(subnet)

    def test_enumeration_is_lazy(self):
        """Should not materialize a /8."""
        hosts = enumerate_hosts("10.0.0.0/8")
        assert next(hosts) == "10.0.0.1"
        assert next(hosts) == "10.0.0.2"

    def test_ipv6_cidr_parses(self):
        """Should accept IPv6 CIDR notation."""
        subnet = parse_subnet("2001:db8::/126")
        assert subnet.network.version == 6
        assert subnet.num_hosts == len(list(subnet))

    @pytest.mark.parametrize("value", [
        "",
        "   ",
        "10.0.0.0",
        "10.0.0.0/33",
        "300.0.0.0/24",
        "not-a-subnet/24",
    ])
    def test_invalid_ranges(self, value):
        """Should raise InvalidRangeError on malformed input."""
        with pytest.raises(InvalidRangeError):
            parse_subnet(value)

    def test_invalid_range_is_value_error(self):
        """Should be catchable as ValueError."""
        with pytest.raises(ValueError):
            parse_subnet("bogus")


class TestCheckScannable:
    """Tests for the sweepable-range check."""

    def test_accepts_small_ipv4_range(self):
        """Should pass an IPv4 range under the limit through unchanged."""
        subnet = parse_subnet("10.0.0.0/24")
        assert check_scannable(subnet, 65_534) is subnet

    def test_rejects_ipv6(self):
        """Should reject an IPv6 range regardless of size."""
        with pytest.raises(InvalidRangeError, match="IPv6"):
            check_scannable(parse_subnet("fd00::/64"), 65_534)
        with pytest.raises(InvalidRangeError):
            check_scannable(parse_subnet("2001:db8::/126"), 65_534)

    def test_rejects_range_over_limit(self):
        """Should reject a range with more hosts than the limit."""
        with pytest.raises(InvalidRangeError, match="exceeds limit"):
            check_scannable(parse_subnet("10.0.0.0/12"), 65_534)

    def test_limit_is_inclusive(self):
        """Should accept a range exactly at the limit."""
        subnet = parse_subnet("10.0.0.0/16")
        assert check_scannable(subnet, 65_534) is subnet
        with pytest.raises(InvalidRangeError):
            check_scannable(subnet, 65_533)


class TestSubnetList:
    """Tests for the comma-separated range list."""

    def test_split_and_trim(self):
        """Should trim entries and drop empty ones."""
        assert parse_subnet_list("10.0.0.0/24, 10.0.1.0/24,,  ") == [
            "10.0.0.0/24",
            "10.0.1.0/24",
        ]

    def test_entries_not_validated(self):
        """Should keep invalid entries for per-subnet handling at scan time."""
        assert parse_subnet_list("bogus,10.0.0.0/30") == ["bogus", "10.0.0.0/30"]


class TestValidateAddress:
    """Tests for single-address validation."""

    def test_valid_address(self):
        """Should return the normalized literal."""
        assert validate_address(" 203.0.113.5 ") == "203.0.113.5"

    def test_invalid_address(self):
        """Should raise InvalidRangeError."""
        with pytest.raises(InvalidRangeError):
            validate_address("10.0.0.0/24")
