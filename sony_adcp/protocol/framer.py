# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
ADCP response framer.

ADCP has no length prefix or correlation identifier; a response is complete
when the received text ends in a line terminator or in the interactive
prompt marker.
"""

from __future__ import annotations

from ..internal_types import *
from ..constants import FRAME_TERMINATORS

class ResponseFramer:
    """Accumulates received bytes and yields complete response frames.

    Only used for command/response cycles after the login exchange; the
    login exchange is matched on substrings instead (see handshake.py).
    """

    terminators: Tuple[str, ...]
    _buffer: str

    def __init__(self, terminators: Sequence[str]=FRAME_TERMINATORS) -> None:
        self.terminators = tuple(terminators)
        self._buffer = ""

    @property
    def pending(self) -> str:
        """The text received so far that does not yet form a complete frame."""
        return self._buffer

    def feed(self, data: bytes | str) -> Optional[str]:
        """Appends a received chunk to the buffer.

        Returns the stripped frame if the buffer now ends in a terminator (and
        clears the buffer), or None if the frame is still incomplete.
        """
        if isinstance(data, bytes):
            data = data.decode('ascii', errors='replace')
        self._buffer += data
        if not self._buffer.endswith(self.terminators):
            return None
        frame = self._buffer.strip()
        self._buffer = ""
        return frame

    def reset(self) -> None:
        """Discards any partial frame."""
        self._buffer = ""

    def __str__(self) -> str:
        return f"ResponseFramer(pending={self._buffer!r})"

    def __repr__(self) -> str:
        return str(self)
