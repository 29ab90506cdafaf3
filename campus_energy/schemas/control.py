"""Admin command queue schemas."""

from datetime import datetime

from pydantic import BaseModel

from campus_energy.models.enums import CommandStatus, CommandType, LineStatus
from campus_energy.schemas.base import CamelModel


class ControlCommandCreate(CamelModel):
    """Schema for queueing a command for a line."""

    line_id: int
    command: CommandType


class ControlCommandResponse(CamelModel):
    """Queued command plus the line status it produced."""

    command_id: int
    line_id: int
    command: CommandType
    line_status: LineStatus


class ControlCommandRecord(BaseModel):
    """Schema for a command in the queue history."""

    id: int
    line_id: int
    command: CommandType
    status: CommandStatus
    created_at: datetime
    executed_at: datetime | None
    issued_by_user_id: int | None

    model_config = {"from_attributes": True}
