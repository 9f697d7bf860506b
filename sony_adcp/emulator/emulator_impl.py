# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Sony ADCP projector emulator.

Provides a simple emulation of a Sony projector's ADCP service on TCP/IP.
"""

from __future__ import annotations

import asyncio

from ..internal_types import *
from ..pkg_logging import logger
from ..constants import DEFAULT_PORT, LINE_TERMINATOR, PASSWORD_PROMPT

from .session import AdcpProjectorEmulatorSession

class AdcpProjectorEmulator(AsyncContextManager['AdcpProjectorEmulator']):
    """Emulated projector.

    Answers "power_status ?" with '"on"' or '"standby"', "<setting> ?" with
    the stored value, and any "<setting> <value>" with "ok".
    """

    username: Optional[str]
    password: Optional[str]
    bind_addr: str
    port: int
    respond_to_login: bool
    silent_commands: Set[str]
    password_prompt: str
    success_banner: str
    failure_banner: str
    response_terminator: str
    split_response_delay: Optional[float]
    """If set, the terminator of each response is written this many seconds after its payload."""
    power_on: bool
    settings: Dict[str, str]
    commands: List[str]
    """Every command line received from any session, in order."""
    connection_count: int = 0
    sessions: Dict[int, AdcpProjectorEmulatorSession]
    next_session_id: int = 0
    server: Optional[asyncio.Server] = None
    final_result: asyncio.Future[None]

    def __init__(
            self,
            username: Optional[str] = None,
            password: Optional[str] = None,
            bind_addr: Optional[str] = None,
            port: int = DEFAULT_PORT,
            *,
            respond_to_login: bool = True,
            silent_commands: Optional[Iterable[str]] = None,
            success_banner: str = f"Login successful{LINE_TERMINATOR}",
            response_terminator: str = LINE_TERMINATOR,
            split_response_delay: Optional[float] = None,
          ):
        self.username = username
        self.password = password
        self.bind_addr = '127.0.0.1' if bind_addr is None else bind_addr
        self.port = port
        self.respond_to_login = respond_to_login
        self.silent_commands = set() if silent_commands is None else set(silent_commands)
        self.password_prompt = f"{PASSWORD_PROMPT} "
        self.success_banner = success_banner
        self.failure_banner = f"Login incorrect{LINE_TERMINATOR}"
        self.response_terminator = response_terminator
        self.split_response_delay = split_response_delay
        self.power_on = False
        self.settings = {}
        self.commands = []
        self.sessions = {}
        self.final_result = asyncio.get_event_loop().create_future()

    @property
    def requires_auth(self) -> bool:
        return self.username is not None

    @property
    def bound_port(self) -> int:
        """The port actually listened on; differs from port when port is 0."""
        assert self.server is not None
        return self.server.sockets[0].getsockname()[1]

    def alloc_session_id(self, session: AdcpProjectorEmulatorSession) -> int:
        result = self.next_session_id
        self.next_session_id += 1
        self.connection_count += 1
        self.sessions[result] = session
        return result

    def free_session_id(self, session_id: int) -> None:
        self.sessions.pop(session_id, None)

    def check_credentials(self, username: Optional[str], password: str) -> bool:
        return username == self.username and password == (self.password or '')

    def handle_command(
            self,
            session: AdcpProjectorEmulatorSession,
            command: str
          ) -> Optional[str]:
        """Handle a single command line, and return the response text.
        If None is returned, no response is sent.
        """
        logger.debug(f"{session}: Received command: {command!r}")
        self.commands.append(command)
        if command in self.silent_commands:
            return None
        name, _, argument = command.partition(' ')
        if name == 'power_status' and argument == '?':
            return '"on"' if self.power_on else '"standby"'
        if name == 'power' and argument in ('on', 'off'):
            self.power_on = (argument == 'on')
            return 'ok'
        if argument == '':
            return 'err_cmd'
        if argument == '?':
            value = self.settings.get(name)
            return 'err_val' if value is None else f'"{value}"'
        self.settings[name] = argument
        return 'ok'

    def drop_sessions(self) -> None:
        """Closes every open session, as if the projector reset its network stack."""
        for session in list(self.sessions.values()):
            session.close()

    async def start(self) -> None:
        try:
            loop = asyncio.get_running_loop()
            self.server = await loop.create_server(
                lambda: AdcpProjectorEmulatorSession(self),
                host=self.bind_addr,
                port=self.port)
            logger.debug(f"Emulator: Listening on {self.bind_addr}:{self.bound_port}")
            await self.server.start_serving()
        except BaseException as e:
            self.set_final_result(e)
            try:
                await self.wait_closed()
            except BaseException:
                pass
            raise

    async def run(self) -> None:
        """Runs the Emulator until it is closed."""
        async with self:
            await self.wait_closed()

    def close(self, exc: Optional[BaseException]=None) -> None:
        """Stops the Emulator."""
        self.set_final_result(exc)

    async def wait_closed(self) -> None:
        """Waits for the emulator to be fully closed. Does not initiate shutdown."""
        try:
            await self.final_result
        finally:
            if self.server is not None:
                server = self.server
                self.server = None
                self.drop_sessions()
                server.close()
                await server.wait_closed()

    def set_final_result(self, exc: Optional[BaseException]=None) -> None:
        if not self.final_result.done():
            if exc is None:
                logger.debug("Emulator: Setting final result to success")
                self.final_result.set_result(None)
            else:
                logger.debug(f"Emulator: Setting final exception: {exc}")
                self.final_result.set_exception(exc)

    async def __aenter__(self) -> AdcpProjectorEmulator:
        await self.start()
        return self

    async def __aexit__(self,
            exc_type: Optional[type[BaseException]],
            exc: Optional[BaseException],
            tb: Optional[TracebackType]
      ) -> None:
        self.set_final_result(None)
        await self.wait_closed()
