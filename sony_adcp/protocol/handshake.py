# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
ADCP login handshake.

Login exchange, when authentication is enabled on the projector:
  Client: "<username>\\r\\n", sent right after connecting without waiting for a prompt
  Projector: "Password:"
  Client: "<password>\\r\\n"
  Projector: "Login successful" or the "> " prompt on success, "Login incorrect" on failure
  <Normal command/response session begins>

Prompts may arrive without a line terminator, so the exchange is matched on
substrings of everything received since the last step rather than on
response frames.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..internal_types import *
from ..constants import (
    LINE_TERMINATOR,
    PASSWORD_PROMPT,
    LOGIN_SUCCESS_MARKERS,
    LOGIN_FAILURE_MARKERS,
  )
from ..exceptions import AuthenticationError
from ..pkg_logging import logger

@dataclass(frozen=True)
class AuthMarkers:
    """Banner substrings that drive the login exchange.

    These match current projector firmware; they can be overridden through
    the client config if a device uses different text.
    """
    password_prompt: str = PASSWORD_PROMPT
    success_markers: Tuple[str, ...] = LOGIN_SUCCESS_MARKERS
    failure_markers: Tuple[str, ...] = LOGIN_FAILURE_MARKERS

DEFAULT_AUTH_MARKERS = AuthMarkers()

class HandshakeStep(Enum):
    """What a chunk of login text asks the client to do next."""
    CONTINUE = "continue"
    SEND_PASSWORD = "send_password"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

def is_valid_login_text(text: str) -> bool:
    """True if text can be sent as a single ASCII login line."""
    return text.isascii() and "\r" not in text and "\n" not in text

def classify_login_text(text: str, markers: AuthMarkers=DEFAULT_AUTH_MARKERS) -> HandshakeStep:
    """Classifies text received during login.

    Failure is checked first so that a rejection followed by a fresh prompt
    is never mistaken for success.
    """
    if any(marker in text for marker in markers.failure_markers):
        return HandshakeStep.FAILED
    if markers.password_prompt in text:
        return HandshakeStep.SEND_PASSWORD
    if any(marker in text for marker in markers.success_markers):
        return HandshakeStep.SUCCEEDED
    return HandshakeStep.CONTINUE

class AuthHandshake:
    """Login state machine. Does no I/O; the caller writes the returned lines."""

    username: str
    password: str
    markers: AuthMarkers
    succeeded: bool = False
    password_sent: bool = False
    _received: str

    def __init__(
            self,
            username: str,
            password: Optional[str]=None,
            markers: AuthMarkers=DEFAULT_AUTH_MARKERS,
          ) -> None:
        if not is_valid_login_text(username):
            raise ValueError("ADCP username must be a single line of ASCII text")
        if password is not None and not is_valid_login_text(password):
            raise ValueError("ADCP password must be a single line of ASCII text")
        self.username = username
        self.password = '' if password is None else password
        self.markers = markers
        self._received = ""

    def start(self) -> bytes:
        """Returns the username line, which is sent as soon as the socket connects."""
        logger.debug("Handshake: sending username")
        return f"{self.username}{LINE_TERMINATOR}".encode('ascii')

    def feed(self, data: bytes | str) -> Optional[bytes]:
        """Consumes a chunk of login text.

        Returns a line to send to the projector, if any. Sets succeeded once
        the login is accepted. Raises AuthenticationError if it is rejected.
        """
        if isinstance(data, bytes):
            data = data.decode('ascii', errors='replace')
        self._received += data
        step = classify_login_text(self._received, self.markers)
        if step == HandshakeStep.FAILED:
            logger.error("Handshake: login rejected by projector")
            self._received = ""
            raise AuthenticationError("Handshake: Authentication failed (bad username or password?)")
        if step == HandshakeStep.SEND_PASSWORD:
            logger.debug("Handshake: password requested")
            self._received = ""
            self.password_sent = True
            return f"{self.password}{LINE_TERMINATOR}".encode('ascii')
        if step == HandshakeStep.SUCCEEDED:
            logger.debug("Handshake: authenticated")
            self._received = ""
            self.succeeded = True
            return None
        logger.debug(f"Handshake: waiting, received {data!r}")
        return None
