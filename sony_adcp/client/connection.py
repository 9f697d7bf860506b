# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Sony ADCP projector connection.

Owns the TCP socket to one projector: lazy connection with an optional login
exchange, a strict FIFO command queue with one command on the wire at a time,
and per-command deadlines. ADCP responses carry no correlation identifier, so
the only thing tying a response to its command is ordering. Any timeout or
socket error drops the socket and fails every queued command; the next
command reconnects.
"""

from __future__ import annotations

import asyncio
from asyncio import Future
from collections import deque
from dataclasses import dataclass, field
from enum import Enum

from ..internal_types import *
from ..exceptions import (
    AdcpError,
    AuthenticationError,
    AuthenticationTimeoutError,
    CommandTimeoutError,
    ConnectionLostError,
    ConnectionTimeoutError,
    NotConnectedError,
    SocketError,
  )
from ..pkg_logging import logger
from ..protocol import (
    AuthHandshake,
    ResponseFramer,
    encode_command_line,
  )

from .client_config import AdcpClientConfig
from .resolve_host import resolve_projector_tcp_host

class ConnectionState(Enum):
    """Lifecycle of the socket to the projector."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    AUTHENTICATED = "authenticated"

@dataclass(eq=False)
class PendingCommand:
    """A command waiting for its response frame."""
    command_text: str
    line: bytes
    created_at: float
    future: Future[str]
    deadline: Optional[float] = None
    timer: Optional[asyncio.TimerHandle] = field(default=None, repr=False)
    written: bool = False

    def cancel_timer(self) -> None:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None

class _AdcpStreamProtocol(asyncio.Protocol):
    """Forwards socket events for one TCP connection to its AdcpConnection.

    A new instance is created for each socket, so events from a socket that
    has already been torn down can be recognized and ignored.
    """

    connection: AdcpConnection
    transport: Optional[asyncio.Transport] = None

    def __init__(self, connection: AdcpConnection) -> None:
        self.connection = connection

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        """Method from asyncio.Protocol"""
        assert isinstance(transport, asyncio.Transport)
        self.transport = transport

    def data_received(self, data: bytes) -> None:
        """Method from asyncio.Protocol"""
        self.connection._on_data_received(self, data)

    def connection_lost(self, exc: Optional[Exception]) -> None:
        """Method from asyncio.Protocol"""
        self.connection._on_connection_lost(self, exc)

def _retrieve_exception(future: Future[None]) -> None:
    # Keeps asyncio from warning about an attempt outcome that no caller waited for
    if not future.cancelled():
        future.exception()

class AdcpConnection:
    """Connection manager and command channel for a single projector.

    Safe to share between any number of concurrent callers on one event loop;
    all commands are serialized through the queue.
    """

    config: AdcpClientConfig
    connect_attempts: int = 0
    """Number of socket connection attempts started over the life of this object."""

    _state: ConnectionState
    _transport: Optional[asyncio.Transport] = None
    _protocol: Optional[_AdcpStreamProtocol] = None
    _framer: ResponseFramer
    _queue: Deque[PendingCommand]
    _connect_future: Optional[Future[None]] = None
    _connect_task: Optional[asyncio.Task[None]] = None
    _handshake: Optional[AuthHandshake] = None
    _handshake_future: Optional[Future[None]] = None

    def __init__(self, config: AdcpClientConfig) -> None:
        config.validate()
        self.config = config
        self._state = ConnectionState.DISCONNECTED
        self._framer = ResponseFramer()
        self._queue = deque()

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_ready(self) -> bool:
        """True if a live socket is connected (and logged in, if required) and no attempt is underway."""
        return (
            self._connect_future is None and
            self._state in (ConnectionState.CONNECTED, ConnectionState.AUTHENTICATED) and
            self._transport is not None and
            not self._transport.is_closing()
          )

    @property
    def pending_count(self) -> int:
        """Number of commands queued or on the wire."""
        return len(self._queue)

    def _set_state(self, state: ConnectionState) -> None:
        if state != self._state:
            logger.debug(f"{self}: state {self._state.value} -> {state.value}")
            self._state = state

    async def ensure_connected(self) -> None:
        """Connects and logs in if necessary.

        Concurrent callers share a single attempt and all see its outcome.

        Raises ConnectionTimeoutError, AuthenticationError,
        AuthenticationTimeoutError or SocketError on failure, after the
        socket has been torn down.
        """
        if self._connect_future is None:
            if self.is_ready:
                return
            loop = asyncio.get_running_loop()
            self._connect_future = loop.create_future()
            self._connect_future.add_done_callback(_retrieve_exception)
            self._connect_task = loop.create_task(self._connect_attempt(self._connect_future))
        else:
            logger.debug(f"{self}: Waiting for connection attempt already in progress")
        await asyncio.shield(self._connect_future)

    async def _connect_attempt(self, done: Future[None]) -> None:
        self.connect_attempts += 1
        if self._transport is not None:
            self._teardown("Replacing stale connection")
        self._set_state(ConnectionState.CONNECTING)
        try:
            try:
                await asyncio.wait_for(self._open_and_login(), self.config.connect_timeout_secs)
            except asyncio.TimeoutError as e:
                if self._state == ConnectionState.CONNECTED:
                    raise AuthenticationTimeoutError(
                        f"{self}: Login did not complete within {self.config.connect_timeout_secs} seconds") from e
                raise ConnectionTimeoutError(
                    f"{self}: Could not connect within {self.config.connect_timeout_secs} seconds") from e
        except BaseException as e:
            error: BaseException = e
            if isinstance(e, asyncio.CancelledError):
                error = ConnectionLostError(f"{self}: Connection attempt aborted")
            if self._connect_future is done:
                logger.error(f"{self}: Connection attempt failed: {error}")
                self._teardown(f"Connection attempt failed: {error}")
                self._connect_future = None
                self._connect_task = None
            else:
                # superseded by disconnect(); the socket may belong to a newer attempt
                logger.debug(f"{self}: Abandoned connection attempt ended: {error}")
            if not done.done():
                done.set_exception(error)
            if not isinstance(e, (Exception, asyncio.CancelledError)):
                raise
        else:
            if self._connect_future is done:
                self._connect_future = None
                self._connect_task = None
            if not done.done():
                done.set_result(None)

    async def _open_transport(
            self,
            host: str,
            port: int,
            protocol: _AdcpStreamProtocol
          ) -> asyncio.Transport:
        """Opens the TCP socket. Socket failures are raised as SocketError."""
        loop = asyncio.get_running_loop()
        try:
            transport, _ = await loop.create_connection(lambda: protocol, host=host, port=port)
        except OSError as e:
            raise SocketError(f"{self}: Unable to connect to {host}:{port}: {e}") from e
        assert isinstance(transport, asyncio.Transport)
        return transport

    async def _open_and_login(self) -> None:
        host, port, _ = await resolve_projector_tcp_host(self.config.default_host, self.config.default_port)
        logger.debug(f"{self}: Connecting to projector at {host}:{port}")
        protocol = _AdcpStreamProtocol(self)
        self._protocol = protocol
        self._framer.reset()
        transport = await self._open_transport(host, port, protocol)
        if self._protocol is not protocol:
            # torn down while the socket was opening
            transport.abort()
            raise ConnectionLostError(f"{self}: Connection closed while connecting")
        self._transport = transport
        self._set_state(ConnectionState.CONNECTED)

        if self.config.use_auth:
            assert self.config.username is not None
            self._handshake = AuthHandshake(
                self.config.username,
                self.config.password,
                markers=self.config.auth_markers,
              )
            self._handshake_future = asyncio.get_running_loop().create_future()
            handshake_future = self._handshake_future
            self._write(self._handshake.start())
            try:
                await handshake_future
            finally:
                if self._handshake_future is handshake_future:
                    self._handshake = None
                    self._handshake_future = None
            self._set_state(ConnectionState.AUTHENTICATED)
            logger.info(f"{self}: Connected and authenticated")
        else:
            logger.info(f"{self}: Connected")

    def _write(self, data: bytes) -> None:
        assert self._transport is not None
        self._transport.write(data)

    def _on_data_received(self, protocol: _AdcpStreamProtocol, data: bytes) -> None:
        if protocol is not self._protocol:
            return
        logger.debug(f"{self}: Received {data!r}")
        if self._handshake is not None:
            self._feed_handshake(self._handshake, data)
            return
        frame = self._framer.feed(data)
        if frame is not None:
            self._on_frame(frame)

    def _feed_handshake(self, handshake: AuthHandshake, data: bytes) -> None:
        future = self._handshake_future
        if future is None or future.done():
            return
        try:
            reply = handshake.feed(data)
        except AuthenticationError as e:
            future.set_exception(e)
            return
        if reply is not None:
            self._write(reply)
        if handshake.succeeded:
            future.set_result(None)

    def _on_frame(self, frame: str) -> None:
        if len(self._queue) == 0:
            logger.warning(f"{self}: Discarding unsolicited response frame: {frame!r}")
            return
        pending = self._queue.popleft()
        pending.cancel_timer()
        logger.debug(f"{self}: Response to {pending.command_text!r}: {frame!r}")
        if not pending.future.done():
            pending.future.set_result(frame)
        self._write_next()

    def _write_next(self) -> None:
        """Writes the command at the head of the queue and arms its deadline."""
        while len(self._queue) > 0:
            head = self._queue[0]
            if head.written:
                return
            if head.future.done():
                # caller gave up before the command went out
                self._queue.popleft()
                continue
            loop = asyncio.get_running_loop()
            timeout = self.config.command_timeout_secs
            head.deadline = loop.time() + timeout
            head.timer = loop.call_later(timeout, self._on_command_timeout, head)
            head.written = True
            logger.debug(f"{self}: Sending {head.command_text!r}")
            self._write(head.line)
            return

    def _on_command_timeout(self, pending: PendingCommand) -> None:
        if len(self._queue) == 0 or self._queue[0] is not pending:
            return
        self._queue.popleft()
        pending.timer = None
        logger.error(
            f"{self}: No response to {pending.command_text!r} within "
            f"{self.config.command_timeout_secs} seconds; disconnecting")
        if not pending.future.done():
            pending.future.set_exception(CommandTimeoutError(
                f"{self}: Command '{pending.command_text}' timed out after {self.config.command_timeout_secs} seconds"))
        self._teardown(f"Connection dropped after command '{pending.command_text}' timed out")

    def _on_connection_lost(self, protocol: _AdcpStreamProtocol, exc: Optional[Exception]) -> None:
        if protocol is not self._protocol:
            return
        if exc is None:
            logger.debug(f"{self}: Connection closed by projector")
            reason = "Connection closed by projector"
        else:
            logger.error(f"{self}: Socket error: {exc}")
            reason = f"Socket error: {exc}"
        if self._handshake_future is not None and not self._handshake_future.done():
            self._handshake_future.set_exception(SocketError(f"{self}: {reason} during login"))
        self._teardown(reason)

    def _teardown(self, reason: str) -> None:
        """Drops the socket, resets state and fails every queued command. Idempotent."""
        transport = self._transport
        self._transport = None
        self._protocol = None
        self._framer.reset()
        self._set_state(ConnectionState.DISCONNECTED)
        if self._handshake_future is not None and not self._handshake_future.done():
            self._handshake_future.set_exception(ConnectionLostError(f"{self}: {reason}"))
        if transport is not None and not transport.is_closing():
            transport.abort()
        queue = self._queue
        self._queue = deque()
        if len(queue) > 0:
            logger.debug(f"{self}: Failing {len(queue)} queued command(s): {reason}")
        for pending in queue:
            pending.cancel_timer()
            if not pending.future.done():
                pending.future.set_exception(ConnectionLostError(
                    f"{self}: Command '{pending.command_text}' abandoned: {reason}"))

    async def send(self, command_text: str) -> str:
        """Queues a command and returns its response frame.

        Requires ensure_connected() to have succeeded. Raises
        NotConnectedError if there is no live connection,
        CommandTimeoutError if no response arrives in time (the connection
        is then dropped), or ConnectionLostError if the connection goes
        away first.
        """
        line = encode_command_line(command_text)
        if not self.is_ready:
            raise NotConnectedError(f"{self}: Socket is not connected")
        loop = asyncio.get_running_loop()
        pending = PendingCommand(
            command_text=command_text,
            line=line,
            created_at=loop.time(),
            future=loop.create_future(),
          )
        self._queue.append(pending)
        self._write_next()
        return await pending.future

    def disconnect(self) -> None:
        """Drops the connection, failing any queued commands with ConnectionLostError.

        Idempotent. Also aborts a connection attempt in progress; its waiters
        fail with ConnectionLostError, and the next ensure_connected() starts
        a fresh attempt.
        """
        connect_future = self._connect_future
        connect_task = self._connect_task
        self._connect_future = None
        self._connect_task = None
        if connect_task is not None and not connect_task.done():
            connect_task.cancel()
        if connect_future is not None and not connect_future.done():
            connect_future.set_exception(ConnectionLostError(f"{self}: Connection attempt aborted"))
        if self._state != ConnectionState.DISCONNECTED or self._transport is not None or len(self._queue) > 0:
            logger.debug(f"{self}: Disconnecting")
        self._teardown("Disconnected")

    async def aclose(self) -> None:
        """Disconnects and waits for any aborted connection attempt to finish."""
        task = self._connect_task
        self.disconnect()
        if task is not None:
            await asyncio.wait([task])

    def __str__(self) -> str:
        return f"AdcpConnection({self.config.default_host}:{self.config.default_port})"

    def __repr__(self) -> str:
        return str(self)
