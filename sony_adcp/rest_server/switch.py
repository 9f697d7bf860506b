# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
On/off switch view of a projector.

Reads are answered from the last known state when the projector cannot
be reached and a previous read succeeded. Write failures are always
raised.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..internal_types import *
from ..exceptions import AdcpError
from ..client import AdcpProjectorClient

from .logger import logger

class PowerSwitchError(AdcpError):
    """The projector could not be reached to read or change its power state."""
    pass

@dataclass(frozen=True)
class PowerReading:
    on: bool
    cached: bool
    """True if the projector could not be reached and this is the last known state."""

class ProjectorPowerSwitch:
    """Adapts AdcpProjectorClient to an on/off switch."""

    client: AdcpProjectorClient
    last_known_on: Optional[bool] = None

    def __init__(self, client: AdcpProjectorClient) -> None:
        self.client = client

    async def get_on(self) -> PowerReading:
        try:
            on = await self.client.get_power_state()
        except AdcpError as e:
            logger.error(f"Error getting power state: {e}")
            if self.last_known_on is None:
                raise PowerSwitchError(f"Unable to read projector power state: {e}") from e
            return PowerReading(on=self.last_known_on, cached=True)
        self.last_known_on = on
        return PowerReading(on=on, cached=False)

    async def set_on(self, on: bool) -> str:
        try:
            response = await self.client.set_power_state(on)
        except AdcpError as e:
            logger.error(f"Error setting power state: {e}")
            raise PowerSwitchError(f"Unable to turn projector {'on' if on else 'off'}: {e}") from e
        self.last_known_on = on
        logger.info(f"Projector turned {'on' if on else 'off'}")
        return response

    def shutdown(self) -> None:
        self.client.shutdown()
