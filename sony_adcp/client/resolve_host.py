# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Sony ADCP projector host IP/Port resolver.

Provides a method that can resolve various host pathnames, environment variables,
SDDP discovery, etc. into a projector IP address and port.
"""

from __future__ import annotations

import os

from ..internal_types import *
from ..exceptions import AdcpError, AdcpConfigError
from ..constants import DEFAULT_PORT
from ..pkg_logging import logger

import sddp_discovery_protocol as sddp
from sddp_discovery_protocol import SddpClient, SddpResponseInfo

SDDP_FILTER_HEADERS: Dict[str, str] = {
    "Manufacturer": "Sony",
  }
"""SDDP response headers that identify a Sony projector."""

def _parse_port(port_str: str, host: str) -> int:
    try:
        port = int(port_str)
    except ValueError as e:
        raise AdcpConfigError(f"Invalid port in projector host specifier '{host}'") from e
    if not 0 < port < 65536:
        raise AdcpConfigError(f"Port out of range in projector host specifier '{host}'")
    return port

async def resolve_projector_tcp_host(
        host: Optional[str]=None,
        default_port: Optional[int]=None,
      ) -> Tuple[str, int, Optional[SddpResponseInfo]]:
    """Resolves a projector host string into a hostname and port.

        Args:
            host: The hostname or IPV4 address of the projector.
                    may optionally be prefixed with "tcp://".
                    May be suffixed with ":<port>" to specify a
                    non-default port, which will override the default_port argument.
                    May be "sddp://" or "sddp://<sddp-hostname>" to use
                    SDDP to discover the projector.
                    If None, the host will be taken from the
                    ADCP_PROJECTOR_HOST environment variable.
            default_port: The default TCP/IP port number to use. If None, the port
                    will be taken from ADCP_PROJECTOR_PORT. If that
                    environment variable is not found, the default ADCP
                    port (53484) will be used.

        Returns:
            A tuple of (hostname: str, port: int, sddp_response_info: Optional[SddpResponseInfo]) where:
                hostname: The resolved IP address.
                port:     The resolved port number.
                sddp_response_info:
                          The SDDP response info, if SDDP was used to
                          discover the projector. None otherwise.
    """
    if host is None or host == '':
        host = os.environ.get('ADCP_PROJECTOR_HOST')
        if host is None or host == '':
            host = "sddp://" # Use SDDP discovery

    if default_port is None or default_port <= 0:
        default_port_str = os.environ.get('ADCP_PROJECTOR_PORT')
        if default_port_str is None or default_port_str == '':
            default_port = DEFAULT_PORT
        else:
            default_port = _parse_port(default_port_str, host)

    result_host: Optional[str] = None
    port: Optional[int] = None
    sddp_response_info: Optional[sddp.SddpResponseInfo] = None

    if host.startswith('sddp://'):
        sddp_host: Optional[str] = host[7:]
        if sddp_host == '':
            sddp_host = None

        logger.debug(f"Resolving projector via SDDP (host={sddp_host})")
        async with SddpClient(include_loopback=True) as sddp_client:
            async with sddp_client.search(filter_headers=SDDP_FILTER_HEADERS) as search_request:
                async for response in search_request:
                    if sddp_host is None or response.datagram.hdr_host == sddp_host:
                        sddp_response_info = response
                        break
                else:
                    raise AdcpError("SDDP discovery failed to find a projector")

        assert sddp_response_info is not None
        result_host = sddp_response_info.src_addr[0]
        optional_port = sddp_response_info.datagram.headers.get('Port')
        if optional_port is None:
            port = default_port
        else:
            port = _parse_port(optional_port, host)
    else:
        if '://' in host and not host.startswith('tcp://'):
            raise AdcpConfigError(f"Unsupported protocol in projector host specifier: '{host}'")
        if host.startswith('tcp://'):
            host = host[6:]
        if ':' in host:
            host, port_str = host.rsplit(':', 1)
            port = _parse_port(port_str, host)
        else:
            port = default_port
        if host == '':
            raise AdcpConfigError("Empty hostname in projector host specifier")
        result_host = host

    return (result_host, port, sddp_response_info)
