"""
SNMP v2c client for device interrogation.

One short-lived session per host: a fresh SnmpEngine is created for the
host, a fixed set of system OIDs is read with sequential GETs, and the
engine's dispatcher is always closed afterwards.

Usage:
    client = SnmpClient(community="public", timeout=5.0, retries=2)
    signature = await client.get_signature("192.168.1.1")
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from pysnmp.hlapi.v3arch.asyncio import (
    get_cmd,
    SnmpEngine, CommunityData,
    UdpTransportTarget, ContextData,
    ObjectType, ObjectIdentity,
)
from pysnmp.proto.rfc1905 import EndOfMibView, NoSuchInstance, NoSuchObject

from ._types import DeviceSignature

logger = logging.getLogger(__name__)

# System group (RFC 1213) and host resources
OID_SYS_DESCR = "1.3.6.1.2.1.1.1.0"
OID_SYS_NAME = "1.3.6.1.2.1.1.5.0"
OID_SYS_LOCATION = "1.3.6.1.2.1.1.6.0"
OID_SYS_CONTACT = "1.3.6.1.2.1.1.4.0"
OID_SYS_UPTIME = "1.3.6.1.2.1.1.3.0"
OID_IF_NUMBER = "1.3.6.1.2.1.2.1.0"
OID_HR_SYSTEM_PROCESSES = "1.3.6.1.2.1.25.1.6.0"

_MISSING_VALUE_TYPES = (NoSuchObject, NoSuchInstance, EndOfMibView)


class SnmpSession:
    """
    An open SNMP session against a single host.

    Every GET is independent: a failure yields None for that OID only.
    """

    def __init__(self, engine, auth, transport, timeout: float):
        self.engine = engine
        self.auth = auth
        self.transport = transport
        self.timeout = timeout

    async def get(self, oid: str) -> Optional[str]:
        """Read a single scalar. None on any failure."""
        try:
            error_indication, error_status, error_index, var_binds = await asyncio.wait_for(
                get_cmd(
                    self.engine,
                    self.auth,
                    self.transport,
                    ContextData(),
                    ObjectType(ObjectIdentity(oid)),
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.debug(f"SNMP GET {oid} timed out")
            return None
        except Exception as e:
            logger.debug(f"SNMP GET {oid} failed: {e}")
            return None

        if error_indication:
            logger.debug(f"SNMP GET {oid}: {error_indication}")
            return None
        if error_status:
            logger.debug(f"SNMP GET {oid}: error status {error_status} at {error_index}")
            return None
        if not var_binds:
            return None

        value = var_binds[0][1]
        if isinstance(value, _MISSING_VALUE_TYPES):
            logger.debug(f"SNMP GET {oid}: {value.__class__.__name__}")
            return None
        return value.prettyPrint()


class SnmpClient:
    """SNMP v2c client producing device signatures."""

    def __init__(
        self,
        community: str = "public",
        timeout: float = 5.0,
        retries: int = 2,
        port: int = 161,
    ):
        """
        Args:
            community: v2c community string
            timeout: Per-request timeout in seconds
            retries: Retries per request
            port: SNMP agent UDP port
        """
        self.community = community
        self.timeout = timeout
        self.retries = retries
        self.port = port

    @property
    def get_deadline(self) -> float:
        """Upper bound on one GET including pysnmp's own retries."""
        return self.timeout * (self.retries + 1) + 1

    @asynccontextmanager
    async def session(self, address: str) -> AsyncIterator[SnmpSession]:
        """Open a session to one host; the dispatcher is closed on exit."""
        engine = SnmpEngine()
        try:
            transport = await UdpTransportTarget.create(
                (address, self.port),
                timeout=self.timeout,
                retries=self.retries,
            )
            yield SnmpSession(
                engine,
                CommunityData(self.community, mpModel=1),
                transport,
                self.get_deadline,
            )
        finally:
            engine.close_dispatcher()

    async def get_signature(self, address: str) -> Optional[DeviceSignature]:
        """
        Interrogate a host's system OIDs.

        GETs are issued sequentially. Returns None when the system
        description cannot be read (no SNMP agent, wrong community, or the
        session could not be opened).
        """
        try:
            async with self.session(address) as session:
                description = await session.get(OID_SYS_DESCR)
                if description is None:
                    logger.debug(f"SNMP not available on {address}")
                    return None

                name = await session.get(OID_SYS_NAME)
                location = await session.get(OID_SYS_LOCATION)
                contact = await session.get(OID_SYS_CONTACT)
                uptime = await session.get(OID_SYS_UPTIME)
                if_number = await session.get(OID_IF_NUMBER)
                processes = await session.get(OID_HR_SYSTEM_PROCESSES)
        except Exception as e:
            logger.debug(f"SNMP session to {address} failed: {e}")
            return None

        return DeviceSignature(
            system_description=description,
            system_name=name,
            system_location=location,
            system_contact=contact,
            system_uptime=uptime,
            interface_count=_parse_int(if_number),
            process_count=processes,
        )

    async def test_connectivity(self, address: str) -> bool:
        """True if the host answers a sysDescr GET."""
        try:
            async with self.session(address) as session:
                return await session.get(OID_SYS_DESCR) is not None
        except Exception as e:
            logger.debug(f"SNMP connectivity test for {address} failed: {e}")
            return False


def _parse_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None
