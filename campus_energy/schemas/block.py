"""Block and Line schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from campus_energy.models.enums import LineStatus


class BlockCreate(BaseModel):
    """Schema for creating a block."""

    name: str = Field(min_length=1, max_length=100)
    total_quota_kwh: Decimal = Field(default=Decimal("0"), ge=0)


class BlockResponse(BaseModel):
    """Schema for block response."""

    id: int
    name: str
    total_quota_kwh: Decimal
    created_at: datetime

    model_config = {"from_attributes": True}


class LineCreate(BaseModel):
    """Schema for creating a line.

    When ``remaining_kwh`` is omitted the line starts with its full quota.
    Thresholds default to the configured device defaults.
    """

    block_id: int
    line_number: int = Field(gt=0)
    current_quota_kwh: Decimal = Field(ge=0)
    remaining_kwh: Decimal | None = Field(default=None, ge=0)
    max_current_a: Decimal | None = Field(default=None, gt=0)
    max_power_w: Decimal | None = Field(default=None, gt=0)
    idle_limit_hours: int | None = Field(default=None, gt=0)


class LineResponse(BaseModel):
    """Schema for line response."""

    id: int
    block_id: int
    line_number: int
    current_quota_kwh: Decimal
    remaining_kwh: Decimal
    status: LineStatus
    admin_hold: bool
    max_current_a: Decimal
    max_power_w: Decimal
    idle_limit_hours: int
    last_telemetry_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}


class MyLineResponse(BaseModel):
    """A student's assigned line and its block."""

    line: LineResponse | None
    block: BlockResponse | None
