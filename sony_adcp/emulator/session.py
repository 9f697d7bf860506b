# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Sony ADCP projector emulator session.

One TCP connection to the emulator.
"""

from __future__ import annotations

import asyncio
from enum import Enum

from ..internal_types import *
from ..pkg_logging import logger
from ..constants import LINE_TERMINATOR

if TYPE_CHECKING:
    from .emulator_impl import AdcpProjectorEmulator

class SessionState(Enum):
    AWAIT_USERNAME = "await_username"
    AWAIT_PASSWORD = "await_password"
    READY = "ready"

class AdcpProjectorEmulatorSession(asyncio.Protocol):
    emulator: AdcpProjectorEmulator
    session_id: int
    state: SessionState
    transport: Optional[asyncio.Transport] = None
    username: Optional[str] = None
    login_lines: List[str]
    _buffer: str

    def __init__(self, emulator: AdcpProjectorEmulator) -> None:
        self.emulator = emulator
        self.session_id = emulator.alloc_session_id(self)
        self.state = SessionState.AWAIT_USERNAME if emulator.requires_auth else SessionState.READY
        self.login_lines = []
        self._buffer = ""

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        """Method from asyncio.Protocol"""
        assert isinstance(transport, asyncio.Transport)
        self.transport = transport
        logger.debug(f"{self}: Connection made")

    def connection_lost(self, exc: Optional[Exception]) -> None:
        """Method from asyncio.Protocol"""
        logger.debug(f"{self}: Connection lost, exc={exc}")
        self.transport = None
        self.emulator.free_session_id(self.session_id)

    def data_received(self, data: bytes) -> None:
        """Method from asyncio.Protocol"""
        self._buffer += data.decode('ascii', errors='replace')
        while LINE_TERMINATOR in self._buffer:
            line, self._buffer = self._buffer.split(LINE_TERMINATOR, 1)
            self.on_line_received(line)

    def on_line_received(self, line: str) -> None:
        if self.state == SessionState.AWAIT_USERNAME:
            self.login_lines.append(line)
            self.username = line
            if self.emulator.respond_to_login:
                self.state = SessionState.AWAIT_PASSWORD
                self.write(self.emulator.password_prompt)
        elif self.state == SessionState.AWAIT_PASSWORD:
            self.login_lines.append(line)
            if self.emulator.check_credentials(self.username, line):
                logger.debug(f"{self}: Login accepted")
                self.state = SessionState.READY
                self.write(self.emulator.success_banner)
            else:
                logger.debug(f"{self}: Login rejected")
                self.write(self.emulator.failure_banner)
                self.close()
        else:
            response = self.emulator.handle_command(self, line)
            if response is None:
                return
            delay = self.emulator.split_response_delay
            if delay is None:
                self.write(f"{response}{self.emulator.response_terminator}")
            else:
                self.write(response)
                asyncio.get_running_loop().call_later(delay, self.write, self.emulator.response_terminator)

    def write(self, text: str) -> None:
        if self.transport is not None:
            self.transport.write(text.encode('ascii'))

    def close(self) -> None:
        if self.transport is not None:
            self.transport.close()

    def __str__(self) -> str:
        return f"AdcpProjectorEmulatorSession({self.session_id})"

    def __repr__(self) -> str:
        return str(self)
