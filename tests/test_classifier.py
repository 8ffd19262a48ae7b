"""Tests for device classification."""

import pytest

from equipment_discovery._types import DeviceSignature, EquipmentType
from equipment_discovery.classifier import (
    classify,
    classify_description,
    classify_hostname,
    detect_os,
    detect_vendor,
)


def sig(description):
    return DeviceSignature(system_description=description)


class TestDescriptionType:
    """Tests for equipment type from the system description."""

    @pytest.mark.parametrize("description,expected", [
        ("Cisco IOS Switch c2960", EquipmentType.SWITCH),
        ("Juniper Networks router MX104", EquipmentType.ROUTER),
        ("HP LaserJet Printer M404", EquipmentType.PRINTER),
        ("Ubiquiti UniFi Access Point", EquipmentType.ACCESS_POINT),
        ("Aruba AP 305", EquipmentType.ACCESS_POINT),
        ("Hardware: Intel64 - Software: Windows Server 2019", EquipmentType.SERVER),
        ("Linux ws-14 5.15.0 Ubuntu", EquipmentType.DESKTOP),
        ("Hardware: x86 - Software: Windows 10 Pro", EquipmentType.DESKTOP),
        ("Cisco AP1240 Software", EquipmentType.ACCESS_POINT),
        ("Aruba AP-305 ArubaOS", EquipmentType.ACCESS_POINT),
        ("APC Smart-UPS", EquipmentType.UNKNOWN),
        ("Apache Tomcat appliance", EquipmentType.UNKNOWN),
    ])
    def test_type_keywords(self, description, expected):
        """Should map category keywords to equipment types."""
        assert classify_description(description) == expected

    def test_first_match_wins(self):
        """Should prefer switch over router when both appear."""
        assert classify_description("Layer 3 switch router") == EquipmentType.SWITCH

    def test_ap_needs_word_start(self):
        """Should not read 'ap' inside other words."""
        assert classify_description("Lenovo laptop snmpd") == EquipmentType.UNKNOWN


class TestVendor:
    """Tests for manufacturer and model detection."""

    @pytest.mark.parametrize("description,manufacturer,model", [
        ("Cisco IOS Switch c2960", "Cisco", "IOS"),
        ("HP ProCurve J9019A", "HP", "ProCurve"),
        ("HPE OfficeConnect Switch 1920S 24G", "HP", "OfficeConnect"),
        ("HP1820-24G J9979A Switch", "HP", "J9979A"),
        ("Hewlett-Packard JetDirect J7949E", "HP", None),
        ("Dell PowerConnect 5524", "Dell", "PowerConnect"),
        ("Juniper EX2200 Ethernet Switch", "Juniper", "EX2200"),
        ("NETGEAR GS724T Smart Switch", "Netgear", "GS724T"),
        ("D-Link DGS-1210 Switch", "D-Link", "DGS-1210"),
    ])
    def test_vendors(self, description, manufacturer, model):
        """Should take the token after the vendor token as model."""
        assert detect_vendor(description) == (manufacturer, model)

    def test_vendor_order(self):
        """Should prefer the earlier vendor in the chain."""
        assert detect_vendor("Cisco module in Dell chassis")[0] == "Cisco"

    def test_vendor_is_last_token(self):
        """Should leave model empty when nothing follows the vendor."""
        assert detect_vendor("Switch by Cisco") == ("Cisco", None)

    def test_hp_inside_word_ignored(self):
        """Should not read 'hp' inside other words."""
        assert detect_vendor("Apache php-fpm host") == (None, None)

    def test_no_vendor(self):
        """Should return nothing for unknown vendors."""
        assert detect_vendor("Generic SNMP agent") == (None, None)


class TestOs:
    """Tests for OS detection."""

    @pytest.mark.parametrize("description,version", [
        ("Windows Server 2022 Datacenter", "Server"),
        ("Windows 10 Enterprise", "10"),
        ("Windows 11 Pro", "11"),
        ("Windows 7", None),
    ])
    def test_windows(self, description, version):
        """Should parse the Windows version."""
        assert detect_os(description) == ("Windows", version, "Microsoft")

    @pytest.mark.parametrize("description,distribution", [
        ("Linux host 5.15 Ubuntu SMP", "Ubuntu"),
        ("Linux 3.10 CentOS", "CentOS"),
        ("Linux Red Hat Enterprise", "Red Hat"),
        ("Linux 6.1 Debian", "Debian"),
        ("Linux 6.1", None),
    ])
    def test_linux(self, description, distribution):
        """Should detect the Linux distribution."""
        assert detect_os(description) == ("Linux", None, distribution)


class TestClassify:
    """Tests for full classification."""

    def test_cisco_switch(self):
        """Should classify a Cisco switch as SWITCH with manufacturer Cisco."""
        result = classify(sig("Cisco IOS Switch c2960"), None)

        assert result.equipment_type == EquipmentType.SWITCH
        assert result.manufacturer == "Cisco"
        assert result.model == "IOS"

    def test_windows_desktop(self):
        """Should use Microsoft as manufacturer when no vendor matched."""
        result = classify(sig("Hardware: x86 - Software: Windows 11 Pro"), None)

        assert result.equipment_type == EquipmentType.DESKTOP
        assert result.manufacturer == "Microsoft"
        assert result.os_name == "Windows"
        assert result.os_version == "11"

    def test_hardware_vendor_beats_os_vendor(self):
        """Should keep the hardware vendor as manufacturer."""
        result = classify(sig("Dell PowerEdge R740 Linux Ubuntu server"), None)

        assert result.equipment_type == EquipmentType.SERVER
        assert result.manufacturer == "Dell"
        assert result.os_name == "Linux"

    def test_linux_distribution_as_manufacturer(self):
        """Should use the distribution as manufacturer."""
        result = classify(sig("Linux nas01 4.19 Debian"), None)
        assert result.manufacturer == "Debian"

    def test_description_wins_over_hostname(self):
        """Should ignore the hostname when a description exists."""
        result = classify(sig("Cisco router 1941"), "printer-2nd-floor")
        assert result.equipment_type == EquipmentType.ROUTER

    def test_unmatched_description_ignores_hostname(self):
        """Should stay UNKNOWN when a description exists but matches no category."""
        result = classify(sig("Generic SNMP agent"), "core-switch")
        assert result.equipment_type == EquipmentType.UNKNOWN

    @pytest.mark.parametrize("hostname,expected", [
        ("Core-Switch-01", EquipmentType.SWITCH),
        ("edge-router", EquipmentType.ROUTER),
        ("printer-hr", EquipmentType.PRINTER),
        ("fileserver", EquipmentType.SERVER),
        ("ws-042", EquipmentType.UNKNOWN),
        (None, EquipmentType.UNKNOWN),
    ])
    def test_hostname_fallback(self, hostname, expected):
        """Should classify from hostname without a signature."""
        assert classify(None, hostname).equipment_type == expected
        assert classify_hostname(hostname) == expected

    def test_signature_without_description(self):
        """Should fall back to hostname when the description is missing."""
        result = classify(DeviceSignature(system_name="x"), "lab-switch")
        assert result.equipment_type == EquipmentType.SWITCH
        assert result.manufacturer is None

    def test_deterministic(self):
        """Should give the same result for the same input."""
        signature = sig("HP ProCurve Switch 2530")
        assert classify(signature, "a") == classify(signature, "a")
