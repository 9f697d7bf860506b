# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Sony ADCP projector client.
"""

from .resolve_host import resolve_projector_tcp_host
from .client_config import AdcpClientConfig
from .connection import (
    AdcpConnection,
    ConnectionState,
    PendingCommand,
  )
from .client_impl import AdcpProjectorClient
