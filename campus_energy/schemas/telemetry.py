"""Device-facing telemetry, control and heartbeat schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import Field

from campus_energy.models.enums import ControlAction, LineStatus
from campus_energy.schemas.base import CamelModel


class TelemetryReport(CamelModel):
    """One device reading. ``energy_kwh`` is consumption since the last report."""

    line_id: int
    power_w: Decimal = Field(ge=0)
    voltage_v: Decimal = Field(ge=0)
    current_a: Decimal = Field(ge=0)
    energy_kwh: Decimal = Field(ge=0)


class TelemetryResult(CamelModel):
    """Authoritative post-deduction state returned to the device."""

    remaining_kwh: Decimal
    status: LineStatus


class DeviceThresholds(CamelModel):
    """Per-line limits the device enforces locally."""

    max_current: Decimal
    max_power: Decimal
    idle_limit_hours: int


class ControlResponse(CamelModel):
    """What a polling device should do next.

    ``command_id`` is set only when this poll claimed a queued command.
    """

    action: ControlAction
    command_id: int | None = None
    thresholds: DeviceThresholds


class HeartbeatRequest(CamelModel):
    """Device liveness ping."""

    device_token: str = Field(min_length=1)
    block_id: int


class HeartbeatResponse(CamelModel):
    """Heartbeat acknowledgement."""

    status: str
    server_time: datetime
