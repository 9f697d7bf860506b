# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Low-level protocol definitions for Sony projectors controlled over ADCP.
"""

from .framer import ResponseFramer

from .handshake import (
    AuthMarkers,
    AuthHandshake,
    HandshakeStep,
    DEFAULT_AUTH_MARKERS,
    classify_login_text,
    is_valid_login_text,
  )

from .command import (
    QUERY,
    on_off,
    format_command,
    encode_command_line,
    response_contains_on,
  )
