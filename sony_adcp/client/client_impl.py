# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Sony ADCP projector client.

Typed projector operations on top of an AdcpConnection. Only power state is
parsed; every other command succeeds once the projector sends any response
frame.
"""

from __future__ import annotations

from ..internal_types import *
from ..pkg_logging import logger
from ..protocol import (
    QUERY,
    on_off,
    format_command,
    response_contains_on,
  )

from .client_config import AdcpClientConfig
from .connection import AdcpConnection, ConnectionState

class AdcpProjectorClient:
    """Sony ADCP projector client.

    Errors from the connection (ConnectionTimeoutError, AuthenticationError,
    CommandTimeoutError, ConnectionLostError, ...) are logged and re-raised
    unchanged; nothing is retried here. Calling a method again after a
    failure reconnects.
    """

    connection: AdcpConnection

    def __init__(
            self,
            config: Optional[AdcpClientConfig]=None,
            *,
            connection: Optional[AdcpConnection]=None,
          ) -> None:
        if connection is None:
            connection = AdcpConnection(AdcpClientConfig() if config is None else config)
        self.connection = connection

    @property
    def config(self) -> AdcpClientConfig:
        return self.connection.config

    @property
    def state(self) -> ConnectionState:
        return self.connection.state

    async def execute_command(self, command: str) -> str:
        """Connects if necessary, sends a command, and returns the response frame."""
        try:
            await self.connection.ensure_connected()
            response = await self.connection.send(command)
        except Exception as e:
            logger.error(f"{self}: Failed to execute command '{command}': {e}")
            raise
        logger.debug(f"{self}: Command executed: {command}, Response: {response}")
        return response

    async def _execute(self, name: str, argument: Union[str, int, float]) -> None:
        await self.execute_command(format_command(name, argument))

    # Power

    async def get_power_state(self) -> bool:
        """Returns True if the projector reports that it is on."""
        response = await self.execute_command(format_command("power_status", QUERY))
        return response_contains_on(response)

    async def set_power_state(self, on: bool) -> str:
        """Turns the projector on or off. Returns the raw response."""
        return await self.execute_command(format_command("power", on_off(on)))

    # Network settings

    async def start_network_settings(self) -> None:
        await self._execute("ipv4_network_setting", "start")

    async def apply_network_settings(self) -> None:
        await self._execute("ipv4_network_setting", "apply")

    async def set_ipv4_address(self, ip_address: str, subnet_mask: str, gateway: str) -> None:
        """Sets the static address, mask and gateway, then applies them."""
        await self._execute("ipv4_ip_address", ip_address)
        await self._execute("ipv4_sub_net_mask", subnet_mask)
        await self._execute("ipv4_default_gateway", gateway)
        await self.apply_network_settings()

    # Input selection

    async def set_input(self, input_id: str) -> None:
        await self._execute("input", input_id)

    # Volume and mute

    async def mute_audio(self, state: bool) -> None:
        await self._execute("muting", on_off(state))

    async def set_volume(self, level: int) -> None:
        await self._execute("volume", level)

    # Image quality

    async def set_brightness(self, level: int) -> None:
        await self._execute("brightness", level)

    async def set_contrast(self, level: int) -> None:
        await self._execute("contrast", level)

    async def set_picture_mode(self, mode: str) -> None:
        await self._execute("picture_mode", mode)

    # Display

    async def set_aspect_ratio(self, aspect_ratio: str) -> None:
        await self._execute("aspect", aspect_ratio)

    async def set_screen_position(self, position: Union[str, int]) -> None:
        await self._execute("v_center", position)

    async def set_screen_size(self, size: Union[str, int]) -> None:
        await self._execute("v_size", size)

    async def set_overscan(self, state: bool) -> None:
        await self._execute("overscan", on_off(state))

    async def freeze(self, state: bool) -> None:
        await self._execute("freeze", on_off(state))

    async def set_image_split(self, mode: str) -> None:
        await self._execute("image_split", mode)

    # Lifecycle

    def shutdown(self) -> None:
        """Drops the connection immediately. Safe to call from a shutdown hook."""
        self.connection.disconnect()

    async def aclose(self) -> None:
        await self.connection.aclose()

    async def __aenter__(self) -> AdcpProjectorClient:
        logger.debug(f"{self}: Entering async context manager")
        return self

    async def __aexit__(
            self,
            exc_type: Optional[Type[BaseException]],
            exc_val: Optional[BaseException],
            exc_tb: Optional[TracebackType]
          ) -> None:
        logger.debug(f"{self}: Exiting async context manager, exc={exc_val}")
        await self.aclose()

    @classmethod
    async def create(
            cls,
            host: Optional[str]=None,
            username: Optional[str]=None,
            password: Optional[str]=None,
            *,
            config: Optional[AdcpClientConfig]=None,
            connect: bool=True,
          ) -> Self:
        """Creates a client, and by default connects it so configuration
           and credential problems surface immediately.

              Args:
                host: The projector host specifier (see AdcpClientConfig).
                username: The ADCP username, if authentication is enabled.
                password: The ADCP password, if authentication is enabled.
                config: A base configuration. If None, defaults and
                        environment variables are used.
                connect: If True, connect (and log in) before returning.
        """
        final_config = AdcpClientConfig(
            default_host=host,
            username=username,
            password=password,
            base_config=config,
          )
        self = cls(final_config)
        if connect:
            try:
                await self.connection.ensure_connected()
            except BaseException:
                await self.aclose()
                raise
        return self

    def __str__(self) -> str:
        return f"AdcpProjectorClient(connection={self.connection})"

    def __repr__(self) -> str:
        return str(self)
