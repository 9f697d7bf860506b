#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Logging for sony_adcp package.

All modules log to the "sony_adcp" logger or its children. No handlers are
installed; the application decides where log records go.
"""

from __future__ import annotations

import logging

PACKAGE_LOGGER_NAME = 'sony_adcp'

logger = logging.getLogger(PACKAGE_LOGGER_NAME)
