# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Constants used by sony_adcp"""

DEFAULT_PORT = 53484
"""The listen port number used by the projector for ADCP control."""

ALTERNATE_PORT = 53595
"""The ADCP port used by some alternate deployments."""

DEFAULT_CONNECT_TIMEOUT = 5.0
"""The default timeout for connecting to the projector, including login, in seconds."""

DEFAULT_COMMAND_TIMEOUT = 5.0
"""The default timeout for a single command/response round trip, in seconds."""

LINE_TERMINATOR = "\r\n"
"""Terminates every command sent to the projector, and most responses."""

PROMPT_MARKER = "> "
"""Interactive prompt sent by the projector. Terminates a frame in place of a line terminator."""

FRAME_TERMINATORS = (LINE_TERMINATOR, PROMPT_MARKER)
"""Suffixes that mark a complete response frame."""

# Login exchange (only when authentication is enabled):
#   Client: "<username>\r\n" (sent immediately; the projector does not prompt for it)
#   Projector: "Password:"
#   Client: "<password>\r\n"
#   Projector: "Login successful" or "> " on success, "Login incorrect" on failure
#   <Normal command/response session begins>

PASSWORD_PROMPT = "Password:"
"""Sent by the projector when it wants the password."""

LOGIN_SUCCESS_MARKERS = ("Login successful", PROMPT_MARKER)
"""Any of these in the login exchange means authentication succeeded."""

LOGIN_FAILURE_MARKERS = ("Login incorrect",)
"""Any of these in the login exchange means authentication failed."""

SNMP_DEFAULT_PORT = 161
"""The UDP port used for SNMP status polling."""

SNMP_DEFAULT_COMMUNITY = "public"
"""The default read-only SNMP community string."""

DEFAULT_STATUS_OIDS = (
    "1.3.6.1.2.1.1.1.0",  # sysDescr
    "1.3.6.1.2.1.1.5.0",  # sysName
    "1.3.6.1.2.1.1.3.0",  # sysUpTime
  )
"""OIDs polled when no explicit list is configured."""

DEFAULT_POLL_INTERVAL = 60.0
"""The default interval between status polls, in seconds."""
