"""
Exceptions raised by the discovery engine.

Per-host and per-OID failures never surface as exceptions; these are
reserved for invalid input and for the manual-entry path of the store.
"""


class DiscoveryError(RuntimeError):
    """Base error for the discovery engine."""


class InvalidRangeError(DiscoveryError, ValueError):
    """A subnet range or address could not be parsed."""

    def __init__(self, value: str, reason: str = ""):
        self.value = value
        message = f"Invalid network range: {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class DuplicateEquipmentError(DiscoveryError):
    """Manual registration collided with an existing record."""

    def __init__(self, field_name: str, value: str):
        self.field_name = field_name
        self.value = value
        super().__init__(f"Equipment with {field_name} {value!r} already exists")
