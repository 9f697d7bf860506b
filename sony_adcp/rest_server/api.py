# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
REST API routes for the projector REST server.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from ..internal_types import *
from ..version import __version__ as pkg_version
from ..status import StatusPoller

from .switch import ProjectorPowerSwitch, PowerSwitchError

router = APIRouter()

class PowerState(BaseModel):
    on: bool
    cached: bool = False

class PowerRequest(BaseModel):
    on: bool

class PowerChange(BaseModel):
    on: bool
    response: str

class StatusSnapshot(BaseModel):
    status: Optional[Dict[str, str]] = None
    last_updated: Optional[float] = None
    error: Optional[str] = None

def get_power_switch(request: Request) -> ProjectorPowerSwitch:
    return request.app.state.power_switch

def get_status_poller(request: Request) -> Optional[StatusPoller]:
    return getattr(request.app.state, 'status_poller', None)

@router.get("/version")
async def get_version() -> Dict[str, str]:
    return {"version": pkg_version}

@router.get("/power", response_model=PowerState)
async def get_power(switch: ProjectorPowerSwitch = Depends(get_power_switch)) -> PowerState:
    try:
        reading = await switch.get_on()
    except PowerSwitchError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
    return PowerState(on=reading.on, cached=reading.cached)

@router.put("/power", response_model=PowerChange)
async def put_power(
        body: PowerRequest,
        switch: ProjectorPowerSwitch = Depends(get_power_switch),
      ) -> PowerChange:
    try:
        response = await switch.set_on(body.on)
    except PowerSwitchError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
    return PowerChange(on=body.on, response=response)

@router.get("/status", response_model=StatusSnapshot)
async def get_status(poller: Optional[StatusPoller] = Depends(get_status_poller)) -> StatusSnapshot:
    if poller is None:
        raise HTTPException(status_code=404, detail="Status polling is not configured")
    return StatusSnapshot(
        status=poller.latest,
        last_updated=poller.last_updated,
        error=None if poller.last_error is None else str(poller.last_error),
      )
