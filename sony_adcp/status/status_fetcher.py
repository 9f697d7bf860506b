# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Projector status fetcher abstract interface.

Status is read over a management channel that is independent of the ADCP
control session (e.g., SNMP), so a failing status source never affects
projector control.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..internal_types import *

class ProjectorStatusFetcher(ABC):
    """Abstract base class for read-only projector status sources."""

    @abstractmethod
    async def fetch_status(self) -> Dict[str, str]:
        """Reads the current status as a mapping of key to value.

        Must be implemented by subclasses.
        """
        raise NotImplementedError()

    async def aclose(self) -> None:
        """Releases any resources held by the fetcher.

        May be overridden by subclasses. The default implementation does nothing.
        """
        pass
