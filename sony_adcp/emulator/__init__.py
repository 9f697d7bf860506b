# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Sony ADCP projector emulator.

Provides a simple emulation of a Sony projector's ADCP service on TCP/IP.
"""

from .emulator_impl import AdcpProjectorEmulator
from .session import AdcpProjectorEmulatorSession, SessionState
