# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
ADCP command text helpers.

A command is a single line of text, "<name> <argument>", sent with a CRLF
terminator. Queries use "?" as the argument.
"""

from __future__ import annotations

from ..internal_types import *
from ..constants import LINE_TERMINATOR

QUERY = "?"

def on_off(state: bool) -> str:
    """Formats a boolean as the "on"/"off" argument used by switch commands."""
    return "on" if state else "off"

def format_command(name: str, argument: Optional[Union[str, int, float]]=None) -> str:
    """Builds the text of a command, without the line terminator."""
    if argument is None:
        return name
    return f"{name} {argument}"

def encode_command_line(command_text: str) -> bytes:
    """Encodes command text as a terminated line ready to write to the socket."""
    if '\r' in command_text or '\n' in command_text:
        raise ValueError(f"ADCP command text must be a single line: {command_text!r}")
    if not command_text.isascii():
        raise ValueError(f"ADCP command text must be ASCII: {command_text!r}")
    return f"{command_text}{LINE_TERMINATOR}".encode('ascii')

def response_contains_on(response: str) -> bool:
    """True iff a power status response reports the projector as on."""
    return "on" in response.lower()
