# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
SNMP projector status fetcher.

Polls a fixed list of OIDs with an SNMPv2c GET using a read-only community
string.
"""

from __future__ import annotations

from pysnmp.hlapi.v3arch.asyncio import (
    CommunityData,
    ContextData,
    ObjectIdentity,
    ObjectType,
    SnmpEngine,
    UdpTransportTarget,
    get_cmd,
  )
from pysnmp.proto.rfc1905 import EndOfMibView, NoSuchInstance, NoSuchObject

from ..internal_types import *
from ..exceptions import AdcpError
from ..constants import SNMP_DEFAULT_PORT, SNMP_DEFAULT_COMMUNITY, DEFAULT_STATUS_OIDS
from ..pkg_logging import logger

from .status_fetcher import ProjectorStatusFetcher

class SnmpStatusFetcher(ProjectorStatusFetcher):
    """Reads projector status over SNMP."""

    host: str
    port: int
    community: str
    oids: Tuple[str, ...]
    timeout_secs: float
    retries: int
    _engine: Optional[SnmpEngine] = None

    def __init__(
            self,
            host: str,
            port: int=SNMP_DEFAULT_PORT,
            community: str=SNMP_DEFAULT_COMMUNITY,
            oids: Sequence[str]=DEFAULT_STATUS_OIDS,
            timeout_secs: float=2.0,
            retries: int=1,
          ) -> None:
        self.host = host
        self.port = port
        self.community = community
        self.oids = tuple(oids)
        self.timeout_secs = timeout_secs
        self.retries = retries

    # @abstractmethod
    async def fetch_status(self) -> Dict[str, str]:
        """Returns a mapping of OID to value for every OID the projector answered.

        Raises AdcpError if the request as a whole fails. OIDs the projector
        does not know are logged and left out.
        """
        if self._engine is None:
            self._engine = SnmpEngine()
        target = await UdpTransportTarget.create(
            (self.host, self.port),
            timeout=self.timeout_secs,
            retries=self.retries,
          )
        error_indication, error_status, error_index, var_binds = await get_cmd(
            self._engine,
            CommunityData(self.community, mpModel=1),
            target,
            ContextData(),
            *[ObjectType(ObjectIdentity(oid)) for oid in self.oids],
          )
        if error_indication:
            raise AdcpError(f"{self}: SNMP error: {error_indication}")
        if error_status:
            raise AdcpError(f"{self}: SNMP error: {error_status.prettyPrint()} at index {error_index}")

        status: Dict[str, str] = {}
        for oid, var_bind in zip(self.oids, var_binds):
            value = var_bind[1]
            if isinstance(value, (NoSuchObject, NoSuchInstance, EndOfMibView)):
                logger.error(f"{self}: SNMP varbind error for {oid}: {value.prettyPrint()}")
                continue
            status[oid] = value.prettyPrint()
        return status

    async def aclose(self) -> None:
        if self._engine is not None:
            engine = self._engine
            self._engine = None
            engine.close_dispatcher()

    def __str__(self) -> str:
        return f"SnmpStatusFetcher({self.host}:{self.port})"

    def __repr__(self) -> str:
        return str(self)
