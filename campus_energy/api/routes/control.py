"""Admin command queue routes."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from campus_energy.api.dependencies import require_admin
from campus_energy.core.database import get_db
from campus_energy.models.user import User
from campus_energy.schemas.control import (
    ControlCommandCreate,
    ControlCommandRecord,
    ControlCommandResponse,
)
from campus_energy.services import control_queue as control_service

router = APIRouter(prefix="/admin/control", tags=["control"])


@router.post("", response_model=ControlCommandResponse, status_code=status.HTTP_201_CREATED)
def enqueue_command(
    data: ControlCommandCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> ControlCommandResponse:
    """Queue a disconnect/reconnect for a line's device.

    The line status changes immediately; the device picks the command up on
    its next poll.
    """
    return control_service.enqueue_command(db, data.line_id, data.command, issued_by=admin)


@router.get("", response_model=list[ControlCommandRecord])
def list_commands(
    line_id: int | None = Query(None, alias="lineId"),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> list[ControlCommandRecord]:
    """List queued and executed commands, newest first."""
    commands = control_service.list_commands(db, line_id, limit)
    return [ControlCommandRecord.model_validate(c) for c in commands]
