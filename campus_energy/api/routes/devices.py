"""Device-facing routes and the device registry.

Devices authenticate with their token, never with a user session: telemetry
sends it in the ``X-Device-Token`` header, control polls and heartbeats pass
it alongside the block the device is installed in.
"""

from fastapi import APIRouter, Depends, Header, Query, status
from sqlalchemy.orm import Session

from campus_energy.api.dependencies import require_admin
from campus_energy.core.database import get_db
from campus_energy.models.user import User
from campus_energy.schemas.device import DeviceCreate, DeviceResponse
from campus_energy.schemas.telemetry import (
    ControlResponse,
    HeartbeatRequest,
    HeartbeatResponse,
    TelemetryReport,
    TelemetryResult,
)
from campus_energy.services import control_queue as control_service
from campus_energy.services import devices as device_service
from campus_energy.services import telemetry as telemetry_service

router = APIRouter(tags=["devices"])


@router.post("/device/telemetry", response_model=TelemetryResult)
def report_telemetry(
    report: TelemetryReport,
    x_device_token: str | None = Header(None),
    db: Session = Depends(get_db),
) -> TelemetryResult:
    """Record a reading and deduct it from the line's quota.

    The returned balance and status are authoritative: the device cuts power
    when the status is ``disconnected``.
    """
    device = device_service.authenticate_device(db, x_device_token)
    return telemetry_service.ingest_telemetry(db, device, report)


@router.get("/device/control", response_model=ControlResponse)
def poll_control(
    block_id: int = Query(..., alias="blockId"),
    line_id: int = Query(..., alias="lineId"),
    device_token: str = Query(..., alias="deviceToken"),
    db: Session = Depends(get_db),
) -> ControlResponse:
    """Claim the next queued command for a line, with the line's thresholds."""
    device = device_service.authenticate_device(db, device_token, block_id)
    return control_service.poll_control(db, device, line_id)


@router.post("/device/heartbeat", response_model=HeartbeatResponse)
def heartbeat(
    data: HeartbeatRequest,
    db: Session = Depends(get_db),
) -> HeartbeatResponse:
    """Mark the device online."""
    server_time = device_service.record_heartbeat(db, data.device_token, data.block_id)
    return HeartbeatResponse(status="ok", server_time=server_time)


@router.post("/devices", response_model=DeviceResponse, status_code=status.HTTP_201_CREATED)
def register_device(
    data: DeviceCreate,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> DeviceResponse:
    """Register a device for a block and issue its token."""
    return DeviceResponse.model_validate(device_service.register_device(db, data))


@router.get("/devices", response_model=list[DeviceResponse])
def list_devices(
    block_id: int | None = Query(None, alias="blockId"),
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> list[DeviceResponse]:
    """List registered devices and their online state."""
    return [DeviceResponse.model_validate(d) for d in device_service.list_devices(db, block_id)]
