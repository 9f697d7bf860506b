# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Package sony_adcp provides an asyncio API for controlling
Sony projectors via their ADCP TCP/IP command protocol.
"""

from .version import __version__

from .pkg_logging import logger

from .internal_types import Jsonable, JsonableDict

from .exceptions import (
    AdcpError,
    AdcpConfigError,
    ConnectionTimeoutError,
    AuthenticationError,
    AuthenticationTimeoutError,
    SocketError,
    CommandTimeoutError,
    ConnectionLostError,
    NotConnectedError,
  )

from .constants import (
    DEFAULT_PORT,
    ALTERNATE_PORT,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_COMMAND_TIMEOUT,
  )

from .client import (
    AdcpProjectorClient,
    AdcpConnection,
    AdcpClientConfig,
    ConnectionState,
    PendingCommand,
    resolve_projector_tcp_host,
  )

from .protocol import (
    ResponseFramer,
    AuthHandshake,
    AuthMarkers,
    DEFAULT_AUTH_MARKERS,
  )

from .status import (
    ProjectorStatusFetcher,
    SnmpStatusFetcher,
    StatusPoller,
  )
