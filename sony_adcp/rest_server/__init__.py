# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
A REST FastAPI server that controls a Sony projector over ADCP.
"""
from .app import proj_api
from .switch import ProjectorPowerSwitch, PowerReading, PowerSwitchError
