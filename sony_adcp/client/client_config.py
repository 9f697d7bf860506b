# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Sony ADCP projector client configuration.

Provides the config object consumed by AdcpConnection and AdcpProjectorClient.
"""

from __future__ import annotations

import os

from ..internal_types import *
from ..exceptions import AdcpConfigError
from ..constants import (
    DEFAULT_PORT,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_COMMAND_TIMEOUT,
  )
from ..protocol import AuthMarkers, DEFAULT_AUTH_MARKERS, is_valid_login_text

def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ('1', 'true', 'yes', 'on'):
        return True
    if lowered in ('0', 'false', 'no', 'off'):
        return False
    raise AdcpConfigError(f"Invalid boolean value: '{value}'")

class AdcpClientConfig:
    """Sony ADCP projector client configuration."""
    default_host: Optional[str]
    default_port: int
    username: Optional[str]
    password: Optional[str]
    use_auth: bool
    connect_timeout_secs: float
    command_timeout_secs: float
    auth_markers: AuthMarkers

    def __init__(
            self,
            default_host: Optional[str]=None,
            password: Optional[str]=None,
            *,
            username: Optional[str]=None,
            default_port: Optional[int]=None,
            use_auth: Optional[bool]=None,
            connect_timeout_secs: Optional[float]=None,
            command_timeout_secs: Optional[float]=None,
            auth_markers: Optional[AuthMarkers]=None,
            base_config: Optional[AdcpClientConfig]=None
          ) -> None:
        """Creates a configuration for a Sony ADCP projector client.

           Args:
             default_host: The default hostname or IPV4 address of the projector.
                   may optionally be prefixed with "tcp://".
                   May be suffixed with ":<port>" to specify a
                   non-default port, which will override the default_port argument.
                   May be "sddp://" or "sddp://<host>" to use
                   SDDP to discover the projector.
                   If None, the default host will be taken from the
                     ADCP_PROJECTOR_HOST environment variable.
             password:
                   The ADCP password. If None, the password
                   will be taken from the ADCP_PROJECTOR_PASSWORD
                   environment variable.
             username:
                   The ADCP username. If None, the username will be taken
                   from the ADCP_PROJECTOR_USERNAME environment variable.
             default_port: The default TCP/IP port number to use.
                    If None, the default port will be taken from ADCP_PROJECTOR_PORT.
                    If that environment variable is not found, the default ADCP
                    port (53484) will be used.
             use_auth:
                   Whether to perform the login exchange after connecting.
                   If None, taken from ADCP_PROJECTOR_USE_AUTH, defaulting to True.
             connect_timeout_secs:
                   The budget for connecting and logging in, in seconds.
                   If None, taken from ADCP_PROJECTOR_TIMEOUT, defaulting
                   to DEFAULT_CONNECT_TIMEOUT.
             command_timeout_secs:
                   The timeout for a single command round trip, in seconds.
                   If None, taken from ADCP_PROJECTOR_TIMEOUT, defaulting
                   to DEFAULT_COMMAND_TIMEOUT.
             auth_markers:
                   Banner text that drives the login exchange. If None,
                   the markers used by current firmware are used.
             base_config:
                     An optional base configuration to use.
        """
        if base_config is None:
            self.init_from_defaults()
        else:
            self.init_from_base_config(base_config)

        if default_host is not None and default_host != '':
            self.default_host = default_host

        if default_port is not None and default_port > 0:
            self.default_port = default_port

        if username is not None:
            self.username = username

        if password is not None:
            self.password = password

        if use_auth is not None:
            self.use_auth = use_auth

        if connect_timeout_secs is not None:
            self.connect_timeout_secs = connect_timeout_secs

        if command_timeout_secs is not None:
            self.command_timeout_secs = command_timeout_secs

        if auth_markers is not None:
            self.auth_markers = auth_markers

    def init_from_defaults(self) -> None:
        """Initializes the configuration from defaults."""
        default_host: Optional[str] = os.environ.get('ADCP_PROJECTOR_HOST')
        if default_host is None or default_host == '':
            default_host = "sddp://" # Use SDDP discovery by default
        self.default_host = default_host
        default_port_str = os.environ.get('ADCP_PROJECTOR_PORT')
        if default_port_str is None or default_port_str == '':
            self.default_port = DEFAULT_PORT
        else:
            try:
                self.default_port = int(default_port_str)
            except ValueError as e:
                raise AdcpConfigError(f"Invalid ADCP_PROJECTOR_PORT: '{default_port_str}'") from e
        self.username = os.environ.get('ADCP_PROJECTOR_USERNAME')
        self.password = os.environ.get('ADCP_PROJECTOR_PASSWORD')
        use_auth_str = os.environ.get('ADCP_PROJECTOR_USE_AUTH')
        self.use_auth = True if use_auth_str is None or use_auth_str == '' else _parse_bool(use_auth_str)
        timeout_str = os.environ.get('ADCP_PROJECTOR_TIMEOUT')
        if timeout_str is None or timeout_str == '':
            self.connect_timeout_secs = DEFAULT_CONNECT_TIMEOUT
            self.command_timeout_secs = DEFAULT_COMMAND_TIMEOUT
        else:
            try:
                timeout = float(timeout_str)
            except ValueError as e:
                raise AdcpConfigError(f"Invalid ADCP_PROJECTOR_TIMEOUT: '{timeout_str}'") from e
            self.connect_timeout_secs = timeout
            self.command_timeout_secs = timeout
        self.auth_markers = DEFAULT_AUTH_MARKERS

    def init_from_base_config(self, base_config: AdcpClientConfig) -> None:
        """Initializes the configuration from a base configuration."""
        self.default_host = base_config.default_host
        self.default_port = base_config.default_port
        self.username = base_config.username
        self.password = base_config.password
        self.use_auth = base_config.use_auth
        self.connect_timeout_secs = base_config.connect_timeout_secs
        self.command_timeout_secs = base_config.command_timeout_secs
        self.auth_markers = base_config.auth_markers

    def validate(self) -> None:
        """Raises AdcpConfigError if the configuration cannot be used to connect."""
        if self.default_host is None or self.default_host == '':
            raise AdcpConfigError("No projector host configured")
        if not 0 < self.default_port < 65536:
            raise AdcpConfigError(f"Invalid projector port: {self.default_port}")
        if self.use_auth and (self.username is None or self.username == ''):
            raise AdcpConfigError("Authentication is enabled but no username is configured")
        if self.username is not None and not is_valid_login_text(self.username):
            raise AdcpConfigError("Username must be a single line of ASCII text")
        if self.password is not None and not is_valid_login_text(self.password):
            raise AdcpConfigError("Password must be a single line of ASCII text")
        if self.connect_timeout_secs <= 0:
            raise AdcpConfigError(f"Connect timeout must be positive: {self.connect_timeout_secs}")
        if self.command_timeout_secs <= 0:
            raise AdcpConfigError(f"Command timeout must be positive: {self.command_timeout_secs}")

    @classmethod
    def from_jsonable(cls, data: JsonableDict, base_config: Optional[AdcpClientConfig]=None) -> AdcpClientConfig:
        """Creates a configuration from a JSON-style dict, e.g.

            {
              "host": "192.168.1.50",
              "port": 53484,
              "username": "admin",
              "password": "secret",
              "use_auth": true,
              "connect_timeout_secs": 5.0,
              "command_timeout_secs": 5.0,
              "auth_markers": {
                "password_prompt": "Password:",
                "success_markers": ["Login successful", "> "],
                "failure_markers": ["Login incorrect"]
              }
            }

        Missing keys fall back to base_config, then to environment defaults.
        """
        if not isinstance(data, dict):
            raise AdcpConfigError(f"Projector config must be a JSON object, got {type(data).__name__}")
        auth_markers: Optional[AuthMarkers] = None
        raw_markers = data.get('auth_markers')
        if raw_markers is not None:
            if not isinstance(raw_markers, dict):
                raise AdcpConfigError("auth_markers must be a JSON object")
            auth_markers = AuthMarkers(
                password_prompt=str(raw_markers.get('password_prompt', DEFAULT_AUTH_MARKERS.password_prompt)),
                success_markers=tuple(raw_markers.get('success_markers', DEFAULT_AUTH_MARKERS.success_markers)),
                failure_markers=tuple(raw_markers.get('failure_markers', DEFAULT_AUTH_MARKERS.failure_markers)),
              )
        port = data.get('port')
        connect_timeout = data.get('connect_timeout_secs')
        command_timeout = data.get('command_timeout_secs')
        use_auth = data.get('use_auth')
        try:
            return cls(
                default_host=data.get('host'),
                password=data.get('password'),
                username=data.get('username'),
                default_port=None if port is None else int(port),
                use_auth=None if use_auth is None else bool(use_auth),
                connect_timeout_secs=None if connect_timeout is None else float(connect_timeout),
                command_timeout_secs=None if command_timeout is None else float(command_timeout),
                auth_markers=auth_markers,
                base_config=base_config,
              )
        except (TypeError, ValueError) as e:
            raise AdcpConfigError(f"Invalid projector config: {e}") from e

    def to_jsonable(self) -> JsonableDict:
        """Returns the configuration as a JSON-style dict. The password is not included."""
        return {
            "host": self.default_host,
            "port": self.default_port,
            "username": self.username,
            "use_auth": self.use_auth,
            "connect_timeout_secs": self.connect_timeout_secs,
            "command_timeout_secs": self.command_timeout_secs,
            "auth_markers": {
                "password_prompt": self.auth_markers.password_prompt,
                "success_markers": list(self.auth_markers.success_markers),
                "failure_markers": list(self.auth_markers.failure_markers),
              },
          }

    def __str__(self) -> str:
        return (
            f"AdcpClientConfig("
            f"default_host={self.default_host}, "
            f"default_port={self.default_port}, "
            f"use_auth={self.use_auth}, "
            f"command_timeout_secs={self.command_timeout_secs!r})"
          )

    def __repr__(self) -> str:
        return str(self)
