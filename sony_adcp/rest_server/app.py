#!/usr/bin/env python3

# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
A REST FastAPI server that controls a Sony projector over ADCP.
"""

from __future__ import annotations

from fastapi import FastAPI

import os
import json

from contextlib import asynccontextmanager

from .logger import logger
from ..internal_types import *
from ..exceptions import AdcpConfigError
from ..constants import SNMP_DEFAULT_PORT, SNMP_DEFAULT_COMMUNITY, DEFAULT_STATUS_OIDS, DEFAULT_POLL_INTERVAL
from ..client import AdcpClientConfig, AdcpProjectorClient, resolve_projector_tcp_host
from ..status import SnmpStatusFetcher, StatusPoller

from .api import router as api_router
from .switch import ProjectorPowerSwitch

def load_raw_config() -> JsonableDict:
    """Loads the server config from ADCP_PROJECTOR_CONFIG, or ./adcp_projector_config.json if present."""
    config_file = os.environ.get("ADCP_PROJECTOR_CONFIG", None)
    if config_file is None:
        if os.path.exists("adcp_projector_config.json"):
            config_file = "adcp_projector_config.json"
    if config_file is None:
        return {}
    with open(config_file, "r") as f:
        raw_config = json.load(f)
    if not isinstance(raw_config, dict):
        raise AdcpConfigError(f"Config file {config_file} must contain a JSON object")
    return raw_config

async def create_status_poller(
        raw_config: JsonableDict,
        adcp_config: AdcpClientConfig,
      ) -> Optional[StatusPoller]:
    """Creates an SNMP status poller from the "status_poll" section of the config, if any."""
    poll_config = raw_config.get("status_poll")
    if poll_config is None:
        return None
    if not isinstance(poll_config, dict):
        raise AdcpConfigError("status_poll must be a JSON object")
    host = poll_config.get("host")
    if host is None:
        host, _, _ = await resolve_projector_tcp_host(adcp_config.default_host, adcp_config.default_port)
    fetcher = SnmpStatusFetcher(
        str(host),
        port=int(poll_config.get("port", SNMP_DEFAULT_PORT)),
        community=str(poll_config.get("community", SNMP_DEFAULT_COMMUNITY)),
        oids=[str(oid) for oid in poll_config.get("oids", DEFAULT_STATUS_OIDS)],
      )
    return StatusPoller(fetcher, interval_secs=float(poll_config.get("interval_secs", DEFAULT_POLL_INTERVAL)))

@asynccontextmanager
async def fastapi_lifetime(app: FastAPI) -> AsyncIterator[None]:
    """
    A context manager that initializes and cleans up for FastAPI.
    """
    logger.info("Projector REST server starting up--initializing...")
    raw_config = load_raw_config()
    app.state.raw_config = raw_config
    adcp_config = AdcpClientConfig.from_jsonable(raw_config)
    app.state.adcp_config = adcp_config
    # connection is deferred to the first request
    adcp_client = await AdcpProjectorClient.create(config=adcp_config, connect=False)
    app.state.adcp_client = adcp_client
    app.state.power_switch = ProjectorPowerSwitch(adcp_client)
    status_poller = await create_status_poller(raw_config, adcp_config)
    app.state.status_poller = status_poller
    if status_poller is not None:
        status_poller.start()
    logger.info(f"Serving API for projector at {adcp_client}...")
    try:
        yield
    finally:
        logger.info("Projector REST server shutting down--cleaning up...")
        if status_poller is not None:
            await status_poller.stop()
        await adcp_client.aclose()

proj_api = FastAPI(lifespan=fastapi_lifetime)
proj_api.include_router(api_router)
