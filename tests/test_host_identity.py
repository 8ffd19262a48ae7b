"""Tests for hostname and MAC lookup."""

import socket

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from equipment_discovery.host_identity import (
    HostIdentityResolver,
    normalize_mac,
    parse_arp_output,
)


class TestParseArpOutput:
    """Tests for ARP output parsing."""

    def test_linux_format(self):
        """Should parse Linux arp -an output."""
        output = "? (192.168.1.10) at aa:bb:cc:dd:ee:ff [ether] on eth0\n"
        assert parse_arp_output(output, "192.168.1.10") == "aa:bb:cc:dd:ee:ff"

    def test_macos_format(self):
        """Should zero-pad macOS short octets."""
        output = "? (192.168.1.10) at 0:1b:63:a:bb:cc on en0 ifscope [ethernet]\n"
        assert parse_arp_output(output, "192.168.1.10") == "00:1b:63:0a:bb:cc"

    def test_other_address_ignored(self):
        """Should only match the requested address."""
        output = "? (192.168.1.11) at aa:bb:cc:dd:ee:ff [ether] on eth0\n"
        assert parse_arp_output(output, "192.168.1.10") is None

    def test_incomplete_entry(self):
        """Should skip incomplete entries."""
        output = "? (192.168.1.10) at <incomplete> on eth0\n"
        assert parse_arp_output(output, "192.168.1.10") is None

    def test_broadcast_mac_ignored(self):
        """Should ignore the broadcast MAC."""
        output = "? (192.168.1.255) at ff:ff:ff:ff:ff:ff [ether] on eth0\n"
        assert parse_arp_output(output, "192.168.1.255") is None


class TestNormalizeMac:
    """Tests for MAC normalization."""

    def test_dash_separated(self):
        """Should accept dash-separated MACs."""
        assert normalize_mac("AA-BB-CC-DD-EE-FF") == "aa:bb:cc:dd:ee:ff"

    @pytest.mark.parametrize("value", ["aa:bb:cc", "zz:bb:cc:dd:ee:ff", "aaa:bb:cc:dd:ee:ff"])
    def test_invalid(self, value):
        """Should reject malformed MACs."""
        assert normalize_mac(value) is None


class TestResolver:
    """Tests for the resolver."""

    @pytest.mark.asyncio
    async def test_reverse_dns(self):
        """Should return the resolved hostname."""
        with patch("equipment_discovery.host_identity.socket.gethostbyaddr",
                   return_value=("core-sw1.example.com", [], ["10.0.0.2"])):
            assert await HostIdentityResolver().lookup_hostname("10.0.0.2") == "core-sw1.example.com"

    @pytest.mark.asyncio
    async def test_reverse_dns_failure(self):
        """Should return None when the address does not resolve."""
        with patch("equipment_discovery.host_identity.socket.gethostbyaddr",
                   side_effect=socket.herror("Unknown host")):
            assert await HostIdentityResolver().lookup_hostname("10.0.0.2") is None

    @pytest.mark.asyncio
    async def test_reverse_dns_echo(self):
        """Should treat an echoed address as unresolved."""
        with patch("equipment_discovery.host_identity.socket.gethostbyaddr",
                   return_value=("10.0.0.2", [], ["10.0.0.2"])):
            assert await HostIdentityResolver().lookup_hostname("10.0.0.2") is None

    @pytest.mark.asyncio
    async def test_mac_lookup(self):
        """Should read the MAC from arp output."""
        proc = MagicMock(returncode=0)
        proc.communicate = AsyncMock(return_value=(
            b"? (10.0.0.2) at aa:bb:cc:dd:ee:01 [ether] on eth0\n", b"",
        ))
        with patch("equipment_discovery.host_identity.asyncio.create_subprocess_exec",
                   new=AsyncMock(return_value=proc)) as exec_mock:
            mac = await HostIdentityResolver().lookup_mac("10.0.0.2")

        assert mac == "aa:bb:cc:dd:ee:01"
        assert exec_mock.call_args.args[:3] == ("arp", "-an", "10.0.0.2")

    @pytest.mark.asyncio
    async def test_mac_lookup_without_arp(self):
        """Should return None when arp is not installed."""
        with patch("equipment_discovery.host_identity.asyncio.create_subprocess_exec",
                   new=AsyncMock(side_effect=FileNotFoundError("arp"))):
            assert await HostIdentityResolver().lookup_mac("10.0.0.2") is None

    @pytest.mark.asyncio
    async def test_resolve(self):
        """Should return hostname and MAC together."""
        resolver = HostIdentityResolver()
        resolver.lookup_hostname = AsyncMock(return_value="pc-1")
        resolver.lookup_mac = AsyncMock(return_value="aa:bb:cc:dd:ee:ff")

        assert await resolver.resolve("10.0.0.2") == ("pc-1", "aa:bb:cc:dd:ee:ff")
