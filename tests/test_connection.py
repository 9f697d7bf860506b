"""
Tests for AdcpConnection (connection manager and command channel),
run against the ADCP emulator.
"""

import asyncio
import socket

import pytest

from sony_adcp.client import AdcpConnection, ConnectionState
from sony_adcp.exceptions import (
    AuthenticationError,
    AuthenticationTimeoutError,
    CommandTimeoutError,
    ConnectionLostError,
    ConnectionTimeoutError,
    NotConnectedError,
    SocketError,
)

from emulator_helpers import config_for, make_emulator


def _unused_port() -> int:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]
    finally:
        sock.close()


class TestConnect:
    """Connection lifecycle and login."""

    @pytest.mark.asyncio
    async def test_no_auth_reaches_connected(self):
        async with make_emulator() as emulator:
            connection = AdcpConnection(config_for(emulator))
            assert connection.state == ConnectionState.DISCONNECTED
            try:
                await connection.ensure_connected()
                assert connection.state == ConnectionState.CONNECTED
                assert connection.is_ready
                await asyncio.sleep(0.05)
                (session,) = emulator.sessions.values()
                assert session.login_lines == []
                assert emulator.commands == []
            finally:
                await connection.aclose()

    @pytest.mark.asyncio
    async def test_auth_reaches_authenticated(self):
        async with make_emulator(username="admin", password="secret") as emulator:
            connection = AdcpConnection(config_for(emulator))
            try:
                await connection.ensure_connected()
                assert connection.state == ConnectionState.AUTHENTICATED
                (session,) = emulator.sessions.values()
                assert session.login_lines == ["admin", "secret"]
            finally:
                await connection.aclose()

    @pytest.mark.asyncio
    async def test_prompt_accepted_as_login_success(self):
        async with make_emulator(username="admin", password="secret", success_banner="> ") as emulator:
            connection = AdcpConnection(config_for(emulator))
            try:
                await connection.ensure_connected()
                assert connection.state == ConnectionState.AUTHENTICATED
            finally:
                await connection.aclose()

    @pytest.mark.asyncio
    async def test_already_connected_returns_immediately(self):
        async with make_emulator() as emulator:
            connection = AdcpConnection(config_for(emulator))
            try:
                await connection.ensure_connected()
                await connection.ensure_connected()
                await asyncio.sleep(0.05)
                assert connection.connect_attempts == 1
                assert emulator.connection_count == 1
            finally:
                await connection.aclose()

    @pytest.mark.asyncio
    async def test_wrong_password_fails_authentication(self):
        async with make_emulator(username="admin", password="secret") as emulator:
            connection = AdcpConnection(config_for(emulator, password="wrong"))
            try:
                with pytest.raises(AuthenticationError):
                    await connection.ensure_connected()
                assert connection.state == ConnectionState.DISCONNECTED
                assert not connection.is_ready
            finally:
                await connection.aclose()

    @pytest.mark.asyncio
    async def test_unanswered_login_times_out(self):
        async with make_emulator(username="admin", password="secret", respond_to_login=False) as emulator:
            connection = AdcpConnection(config_for(emulator, connect_timeout_secs=0.3))
            try:
                with pytest.raises(AuthenticationTimeoutError):
                    await connection.ensure_connected()
                assert connection.state == ConnectionState.DISCONNECTED
            finally:
                await connection.aclose()

    @pytest.mark.asyncio
    async def test_socket_open_times_out(self):
        async with make_emulator() as emulator:
            connection = AdcpConnection(config_for(emulator, connect_timeout_secs=0.2))

            async def never_connects(host, port, protocol):
                await asyncio.sleep(10)

            connection._open_transport = never_connects
            try:
                with pytest.raises(ConnectionTimeoutError):
                    await connection.ensure_connected()
                assert connection.state == ConnectionState.DISCONNECTED
            finally:
                await connection.aclose()

    @pytest.mark.asyncio
    async def test_refused_connection_is_socket_error(self):
        async with make_emulator() as emulator:
            connection = AdcpConnection(config_for(emulator, default_port=_unused_port()))
            try:
                with pytest.raises(SocketError):
                    await connection.ensure_connected()
                assert connection.state == ConnectionState.DISCONNECTED
            finally:
                await connection.aclose()

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_attempt(self):
        async with make_emulator(username="admin", password="secret") as emulator:
            connection = AdcpConnection(config_for(emulator))
            try:
                await asyncio.gather(*[connection.ensure_connected() for _ in range(5)])
                assert connection.connect_attempts == 1
                assert emulator.connection_count == 1
                assert connection.state == ConnectionState.AUTHENTICATED
            finally:
                await connection.aclose()

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_failure(self):
        async with make_emulator(username="admin", password="secret") as emulator:
            connection = AdcpConnection(config_for(emulator, password="wrong"))
            try:
                results = await asyncio.gather(
                    *[connection.ensure_connected() for _ in range(3)],
                    return_exceptions=True,
                )
                assert all(isinstance(r, AuthenticationError) for r in results)
                assert connection.connect_attempts == 1
                assert emulator.connection_count == 1
            finally:
                await connection.aclose()

    @pytest.mark.asyncio
    async def test_disconnect_is_idempotent(self):
        async with make_emulator() as emulator:
            connection = AdcpConnection(config_for(emulator))
            await connection.ensure_connected()
            connection.disconnect()
            connection.disconnect()
            assert connection.state == ConnectionState.DISCONNECTED
            assert not connection.is_ready

    @pytest.mark.asyncio
    async def test_reconnects_after_disconnect(self):
        async with make_emulator() as emulator:
            connection = AdcpConnection(config_for(emulator))
            try:
                await connection.ensure_connected()
                connection.disconnect()
                await connection.ensure_connected()
                assert connection.is_ready
                assert connection.connect_attempts == 2
            finally:
                await connection.aclose()


class TestCommandChannel:
    """Command queueing, correlation and failure handling."""

    @pytest.mark.asyncio
    async def test_send_requires_connection(self):
        async with make_emulator() as emulator:
            connection = AdcpConnection(config_for(emulator))
            with pytest.raises(NotConnectedError):
                await connection.send("power_status ?")
            assert emulator.connection_count == 0

    @pytest.mark.asyncio
    async def test_send_returns_response(self):
        async with make_emulator() as emulator:
            connection = AdcpConnection(config_for(emulator))
            try:
                await connection.ensure_connected()
                assert await connection.send("power_status ?") == '"standby"'
                assert connection.pending_count == 0
            finally:
                await connection.aclose()

    @pytest.mark.asyncio
    async def test_responses_resolve_in_send_order(self):
        async with make_emulator() as emulator:
            emulator.settings.update({"brightness": "10", "contrast": "20", "volume": "30", "input": "hdmi2"})
            connection = AdcpConnection(config_for(emulator))
            try:
                await connection.ensure_connected()
                commands = ["brightness ?", "contrast ?", "volume ?", "input ?", "power_status ?"]
                results = await asyncio.gather(*[connection.send(c) for c in commands])
                assert results == ['"10"', '"20"', '"30"', '"hdmi2"', '"standby"']
                assert emulator.commands == commands
            finally:
                await connection.aclose()

    @pytest.mark.asyncio
    async def test_only_one_command_on_the_wire(self):
        async with make_emulator(silent_commands=["power off"]) as emulator:
            connection = AdcpConnection(config_for(emulator, command_timeout_secs=0.3))
            try:
                await connection.ensure_connected()
                tasks = [
                    asyncio.ensure_future(connection.send("power off")),
                    asyncio.ensure_future(connection.send("volume 10")),
                ]
                await asyncio.sleep(0.1)
                assert emulator.commands == ["power off"]
                assert connection.pending_count == 2
                await asyncio.gather(*tasks, return_exceptions=True)
            finally:
                await connection.aclose()

    @pytest.mark.asyncio
    async def test_timeout_drops_connection_and_flushes_queue(self):
        async with make_emulator(silent_commands=["power off"]) as emulator:
            connection = AdcpConnection(config_for(emulator, command_timeout_secs=0.3))
            try:
                await connection.ensure_connected()
                results = await asyncio.gather(
                    connection.send("power off"),
                    connection.send("power_status ?"),
                    connection.send("volume ?"),
                    return_exceptions=True,
                )
                assert isinstance(results[0], CommandTimeoutError)
                assert isinstance(results[1], ConnectionLostError)
                assert isinstance(results[2], ConnectionLostError)
                assert connection.state == ConnectionState.DISCONNECTED
                assert connection.pending_count == 0
                assert emulator.commands == ["power off"]
            finally:
                await connection.aclose()

    @pytest.mark.asyncio
    async def test_disconnect_rejects_pending_command(self):
        async with make_emulator(silent_commands=["freeze on"]) as emulator:
            connection = AdcpConnection(config_for(emulator))
            await connection.ensure_connected()
            task = asyncio.ensure_future(connection.send("freeze on"))
            await asyncio.sleep(0.05)
            connection.disconnect()
            with pytest.raises(ConnectionLostError):
                await task
            assert connection.state == ConnectionState.DISCONNECTED

    @pytest.mark.asyncio
    async def test_server_close_rejects_pending_command(self):
        async with make_emulator(silent_commands=["freeze on"]) as emulator:
            connection = AdcpConnection(config_for(emulator))
            try:
                await connection.ensure_connected()
                task = asyncio.ensure_future(connection.send("freeze on"))
                await asyncio.sleep(0.05)
                emulator.drop_sessions()
                with pytest.raises(ConnectionLostError):
                    await task
                assert connection.state == ConnectionState.DISCONNECTED
                with pytest.raises(NotConnectedError):
                    await connection.send("power_status ?")
            finally:
                await connection.aclose()

    @pytest.mark.asyncio
    async def test_cancelled_queued_command_is_never_written(self):
        async with make_emulator() as emulator:
            emulator.settings.update({"brightness": "10", "contrast": "20", "volume": "30"})
            connection = AdcpConnection(config_for(emulator))
            try:
                await connection.ensure_connected()
                first = asyncio.ensure_future(connection.send("brightness ?"))
                second = asyncio.ensure_future(connection.send("contrast ?"))
                third = asyncio.ensure_future(connection.send("volume ?"))
                await asyncio.sleep(0)
                second.cancel()
                assert await first == '"10"'
                assert await third == '"30"'
                with pytest.raises(asyncio.CancelledError):
                    await second
                assert emulator.commands == ["brightness ?", "volume ?"]
            finally:
                await connection.aclose()

    @pytest.mark.asyncio
    async def test_multiline_command_rejected(self):
        async with make_emulator() as emulator:
            connection = AdcpConnection(config_for(emulator))
            try:
                await connection.ensure_connected()
                with pytest.raises(ValueError):
                    await connection.send("power on\r\npower off")
                assert emulator.commands == []
            finally:
                await connection.aclose()

    @pytest.mark.asyncio
    async def test_reconnect_right_after_aborted_attempt(self):
        async with make_emulator(username="admin", password="secret", respond_to_login=False) as emulator:
            connection = AdcpConnection(config_for(emulator))
            try:
                first = asyncio.ensure_future(connection.ensure_connected())
                await asyncio.sleep(0.1)
                connection.disconnect()
                emulator.respond_to_login = True
                await connection.ensure_connected()
                assert connection.state == ConnectionState.AUTHENTICATED
                assert connection.connect_attempts == 2
                with pytest.raises(ConnectionLostError):
                    await first
                assert connection.is_ready
                assert await connection.send("power_status ?") == '"standby"'
            finally:
                await connection.aclose()

    @pytest.mark.asyncio
    async def test_events_from_replaced_socket_ignored(self):
        async with make_emulator(silent_commands=["freeze on"]) as emulator:
            connection = AdcpConnection(config_for(emulator))
            try:
                await connection.ensure_connected()
                old_protocol = connection._protocol
                connection.disconnect()
                await connection.ensure_connected()
                assert connection._protocol is not old_protocol
                task = asyncio.ensure_future(connection.send("freeze on"))
                await asyncio.sleep(0.05)
                old_protocol.data_received(b'"on"\r\n')
                old_protocol.connection_lost(None)
                assert connection.state == ConnectionState.CONNECTED
                assert connection.is_ready
                assert connection.pending_count == 1
                assert not task.done()
                connection.disconnect()
                with pytest.raises(ConnectionLostError):
                    await task
            finally:
                await connection.aclose()


class TestResponseFraming:

    @pytest.mark.asyncio
    async def test_partial_response_not_delivered(self):
        async with make_emulator(split_response_delay=0.2) as emulator:
            connection = AdcpConnection(config_for(emulator))
            try:
                await connection.ensure_connected()
                task = asyncio.ensure_future(connection.send("power_status ?"))
                await asyncio.sleep(0.1)
                assert not task.done()
                assert connection._framer.pending == '"standby"'
                assert await task == '"standby"'
                assert connection._framer.pending == ""
            finally:
                await connection.aclose()
