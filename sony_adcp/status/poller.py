# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Periodic projector status poller.

Runs a ProjectorStatusFetcher on a fixed interval in its own task and keeps
the most recent snapshot. Fetch failures are logged and recorded, never
raised to the poller's owner.
"""

from __future__ import annotations

import asyncio
import time

from ..internal_types import *
from ..constants import DEFAULT_POLL_INTERVAL
from ..pkg_logging import logger

from .status_fetcher import ProjectorStatusFetcher

class StatusPoller:
    """Polls a status fetcher in the background."""

    fetcher: ProjectorStatusFetcher
    interval_secs: float
    latest: Optional[Dict[str, str]] = None
    """The most recent successful status snapshot, if any."""
    last_updated: Optional[float] = None
    """time.time() of the most recent successful poll."""
    last_error: Optional[BaseException] = None
    """The error from the most recent poll, or None if it succeeded."""
    poll_count: int = 0
    _task: Optional[asyncio.Task[None]] = None

    def __init__(
            self,
            fetcher: ProjectorStatusFetcher,
            interval_secs: float=DEFAULT_POLL_INTERVAL,
          ) -> None:
        if interval_secs <= 0:
            raise ValueError(f"Poll interval must be positive: {interval_secs}")
        self.fetcher = fetcher
        self.interval_secs = interval_secs

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def poll_once(self) -> Optional[Dict[str, str]]:
        """Fetches status once. Returns the snapshot, or None if the fetch failed."""
        self.poll_count += 1
        try:
            status = await self.fetcher.fetch_status()
        except Exception as e:
            logger.warning(f"{self}: Status poll failed: {e}")
            self.last_error = e
            return None
        self.latest = dict(status)
        self.last_updated = time.time()
        self.last_error = None
        logger.debug(f"{self}: Status: {self.latest}")
        return self.latest

    async def _run(self) -> None:
        while True:
            await self.poll_once()
            await asyncio.sleep(self.interval_secs)

    def start(self) -> None:
        """Starts polling in a background task. Has no effect if already running."""
        if not self.is_running:
            self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        """Stops polling and closes the fetcher."""
        task = self._task
        self._task = None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        await self.fetcher.aclose()

    async def __aenter__(self) -> StatusPoller:
        self.start()
        return self

    async def __aexit__(
            self,
            exc_type: Optional[Type[BaseException]],
            exc_val: Optional[BaseException],
            exc_tb: Optional[TracebackType]
          ) -> None:
        await self.stop()

    def __str__(self) -> str:
        return f"StatusPoller({self.fetcher})"

    def __repr__(self) -> str:
        return str(self)
