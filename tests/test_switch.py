"""
Tests for ProjectorPowerSwitch.
"""

import pytest

from sony_adcp.rest_server import PowerReading, PowerSwitchError, ProjectorPowerSwitch

from fakes import FakeProjectorClient, unreachable


class TestPowerSwitch:

    @pytest.mark.asyncio
    async def test_read_live_state(self):
        switch = ProjectorPowerSwitch(FakeProjectorClient(on=True))
        assert await switch.get_on() == PowerReading(on=True, cached=False)
        assert switch.last_known_on is True

    @pytest.mark.asyncio
    async def test_read_failure_uses_last_known_state(self):
        client = FakeProjectorClient(on=True)
        switch = ProjectorPowerSwitch(client)
        await switch.get_on()
        client.error = unreachable()
        assert await switch.get_on() == PowerReading(on=True, cached=True)

    @pytest.mark.asyncio
    async def test_read_failure_without_history_raises(self):
        client = FakeProjectorClient()
        client.error = unreachable()
        switch = ProjectorPowerSwitch(client)
        with pytest.raises(PowerSwitchError):
            await switch.get_on()

    @pytest.mark.asyncio
    async def test_write_updates_last_known_state(self):
        client = FakeProjectorClient()
        switch = ProjectorPowerSwitch(client)
        assert await switch.set_on(True) == "ok"
        assert client.on is True
        client.error = unreachable()
        assert await switch.get_on() == PowerReading(on=True, cached=True)

    @pytest.mark.asyncio
    async def test_write_failure_always_raises(self):
        client = FakeProjectorClient()
        switch = ProjectorPowerSwitch(client)
        await switch.get_on()
        client.error = unreachable()
        with pytest.raises(PowerSwitchError):
            await switch.set_on(True)
        assert switch.last_known_on is False

    def test_shutdown(self):
        client = FakeProjectorClient()
        ProjectorPowerSwitch(client).shutdown()
        assert client.shut_down
