"""
Device classification from SNMP system description and hostname.

Heuristic keyword matching only: the system description decides the
equipment type, vendor and OS; the hostname is a fallback for hosts that
gave no description.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from ._types import Classification, DeviceSignature, EquipmentType

logger = logging.getLogger(__name__)

# First match wins
DESCRIPTION_TYPE_RULES: list[tuple[re.Pattern, EquipmentType]] = [
    (re.compile(r"switch"), EquipmentType.SWITCH),
    (re.compile(r"router"), EquipmentType.ROUTER),
    (re.compile(r"printer"), EquipmentType.PRINTER),
    (re.compile(r"access point|\bap(?![a-z])"), EquipmentType.ACCESS_POINT),
    (re.compile(r"server"), EquipmentType.SERVER),
    (re.compile(r"windows|linux"), EquipmentType.DESKTOP),
]

HOSTNAME_TYPE_RULES: list[tuple[str, EquipmentType]] = [
    ("switch", EquipmentType.SWITCH),
    ("router", EquipmentType.ROUTER),
    ("printer", EquipmentType.PRINTER),
    ("server", EquipmentType.SERVER),
]

# (pattern, model keyword, manufacturer), checked in order
VENDOR_RULES: list[tuple[re.Pattern, str, str]] = [
    (re.compile(r"cisco"), "cisco", "Cisco"),
    (re.compile(r"\bhpe?(?![a-z])|hewlett"), "hp", "HP"),
    (re.compile(r"dell"), "dell", "Dell"),
    (re.compile(r"juniper"), "juniper", "Juniper"),
    (re.compile(r"netgear"), "netgear", "Netgear"),
    (re.compile(r"d-link"), "d-link", "D-Link"),
]

LINUX_DISTRIBUTIONS: list[tuple[str, str]] = [
    ("ubuntu", "Ubuntu"),
    ("centos", "CentOS"),
    ("red hat", "Red Hat"),
    ("debian", "Debian"),
]


def classify(
    signature: Optional[DeviceSignature],
    hostname: Optional[str] = None,
) -> Classification:
    """
    Classify a discovered host.

    Args:
        signature: SNMP signature (None if the host has no SNMP agent)
        hostname: Reverse-DNS hostname, if known

    Returns:
        Classification; UNKNOWN type when nothing matched
    """
    description = signature.system_description if signature else None
    if not description:
        return Classification(equipment_type=classify_hostname(hostname))

    equipment_type = classify_description(description)
    manufacturer, model = detect_vendor(description)
    os_name, os_version, os_vendor = detect_os(description)

    if manufacturer is None:
        manufacturer = os_vendor

    logger.debug(
        f"Classified {description!r} as {equipment_type.value} "
        f"(manufacturer={manufacturer}, os={os_name})"
    )
    return Classification(
        equipment_type=equipment_type,
        manufacturer=manufacturer,
        model=model,
        os_name=os_name,
        os_version=os_version,
    )


def classify_description(description: str) -> EquipmentType:
    """Equipment type from category keywords in the system description."""
    description_lower = description.lower()
    for pattern, equipment_type in DESCRIPTION_TYPE_RULES:
        if pattern.search(description_lower):
            return equipment_type
    return EquipmentType.UNKNOWN


def classify_hostname(hostname: Optional[str]) -> EquipmentType:
    """Equipment type from hostname substrings."""
    if not hostname:
        return EquipmentType.UNKNOWN
    hostname_lower = hostname.lower()
    for keyword, equipment_type in HOSTNAME_TYPE_RULES:
        if keyword in hostname_lower:
            return equipment_type
    return EquipmentType.UNKNOWN


def detect_vendor(description: str) -> tuple[Optional[str], Optional[str]]:
    """
    Manufacturer and model from the system description.

    The model is the token right after the first token that contains the
    vendor keyword ("Cisco IOS Switch" -> model "IOS").
    """
    description_lower = description.lower()
    for pattern, keyword, manufacturer in VENDOR_RULES:
        if pattern.search(description_lower):
            return manufacturer, _token_after(description, keyword)
    return None, None


def detect_os(description: str) -> tuple[Optional[str], Optional[str], Optional[str]]:
    """
    OS name, OS version and OS vendor from the system description.

    The OS vendor (Microsoft, or the Linux distribution) only becomes the
    manufacturer when no hardware vendor was found.
    """
    description_lower = description.lower()

    if "windows" in description_lower:
        return "Windows", _windows_version(description), "Microsoft"

    if "linux" in description_lower:
        for keyword, distribution in LINUX_DISTRIBUTIONS:
            if keyword in description_lower:
                return "Linux", None, distribution
        return "Linux", None, None

    return None, None, None


def _windows_version(description: str) -> Optional[str]:
    if "Windows Server" in description:
        return "Server"
    if "Windows 10" in description:
        return "10"
    if "Windows 11" in description:
        return "11"
    return None


def _token_after(description: str, keyword: str) -> Optional[str]:
    parts = description.split()
    for i, part in enumerate(parts[:-1]):
        if keyword in part.lower():
            return parts[i + 1]
    return None
