"""Alert and energy log listing schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel

from campus_energy.models.enums import AlertType


class AlertResponse(BaseModel):
    """Schema for alert response."""

    id: int
    line_id: int
    type: AlertType
    message: str
    created_at: datetime

    model_config = {"from_attributes": True}


class EnergyLogResponse(BaseModel):
    """Schema for a stored telemetry report."""

    id: int
    line_id: int
    timestamp: datetime
    power_w: Decimal
    voltage_v: Decimal
    current_a: Decimal
    energy_kwh: Decimal

    model_config = {"from_attributes": True}


class EnergyLogHistory(BaseModel):
    """Schema for paginated energy log history."""

    line_id: int
    logs: list[EnergyLogResponse]
    total: int
    limit: int
    offset: int
