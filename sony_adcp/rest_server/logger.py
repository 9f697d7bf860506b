# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Logger for the projector REST server, a child of the package logger.
"""

from __future__ import annotations

from ..pkg_logging import logger as pkg_logger

logger = pkg_logger.getChild('rest_server')
