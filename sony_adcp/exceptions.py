# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Exceptions defined by this package"""

class AdcpError(Exception):
  """Base class for all error exceptions defined by this package."""
  pass

class AdcpConfigError(AdcpError):
  """The client configuration is invalid."""
  pass

class ConnectionTimeoutError(AdcpError):
  """The TCP connection could not be established within the connect timeout."""
  pass

class AuthenticationError(AdcpError):
  """The projector rejected the username/password."""
  pass

class AuthenticationTimeoutError(AdcpError):
  """The login exchange did not complete within the connect timeout."""
  pass

class SocketError(AdcpError):
  """The socket could not be opened, or failed while connecting."""
  pass

class CommandTimeoutError(AdcpError):
  """No response frame arrived for a command within the command timeout."""
  pass

class ConnectionLostError(AdcpError):
  """The connection was closed while a command was waiting for its response."""
  pass

class NotConnectedError(AdcpError):
  """A command was sent while there was no live connection."""
  pass
