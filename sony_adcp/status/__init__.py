# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Read-only projector status polling over a management protocol.
"""

from .status_fetcher import ProjectorStatusFetcher
from .poller import StatusPoller
from .snmp_fetcher import SnmpStatusFetcher
