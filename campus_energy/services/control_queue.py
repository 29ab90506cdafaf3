"""Admin command queue and device polling.

Admins queue disconnect/reconnect commands; the line's status reflects the
admin's intent immediately. Devices poll and claim the newest pending
command with one conditional UPDATE, so a command is handed to at most one
poll even when a device retries or polls concurrently.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from fastapi import HTTPException, status
from sqlalchemy import false, select, true, update
from sqlalchemy.orm import Session

from campus_energy.models.control_command import ControlCommand
from campus_energy.models.device import Device
from campus_energy.models.enums import (
    AlertType,
    CommandStatus,
    CommandType,
    ControlAction,
    LineStatus,
)
from campus_energy.models.line import Line
from campus_energy.models.user import User
from campus_energy.schemas.control import ControlCommandResponse
from campus_energy.schemas.telemetry import ControlResponse, DeviceThresholds
from campus_energy.services.alerts import create_alert
from campus_energy.services.devices import authorize_line
from campus_energy.services.line_status import merge_line_status_expr

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClaimedCommand:
    """A command this poll moved from pending to executed."""

    id: int
    command: CommandType


def enqueue_command(
    db: Session,
    line_id: int,
    command: CommandType,
    issued_by: User | None = None,
) -> ControlCommandResponse:
    """Queue a command and apply the admin's intent to the line status."""
    exists = db.execute(select(Line.id).where(Line.id == line_id)).scalar_one_or_none()
    if exists is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Line not found",
        )

    # A newer instruction replaces any the device has not picked up yet
    superseded = db.execute(
        update(ControlCommand)
        .where(
            ControlCommand.line_id == line_id,
            ControlCommand.status == CommandStatus.PENDING,
        )
        .values(status=CommandStatus.SUPERSEDED)
        .execution_options(synchronize_session=False)
    ).rowcount

    queued = ControlCommand(
        line_id=line_id,
        command=command,
        status=CommandStatus.PENDING,
        issued_by_user_id=issued_by.id if issued_by else None,
    )
    db.add(queued)
    db.flush()

    hold = command == CommandType.DISCONNECT
    line_status = db.execute(
        update(Line)
        .where(Line.id == line_id)
        .values(
            admin_hold=hold,
            status=merge_line_status_expr(Line.remaining_kwh, true() if hold else false()),
        )
        .returning(Line.status)
        .execution_options(synchronize_session=False)
    ).scalar_one()

    if hold:
        create_alert(db, line_id, AlertType.DISCONNECTION, "Line disconnected by an administrator.")

    db.commit()
    logger.info(
        "Queued %s for line %s (command %s, superseded %d), line is now %s",
        command.value,
        line_id,
        queued.id,
        superseded,
        line_status,
    )
    return ControlCommandResponse(
        command_id=queued.id,
        line_id=line_id,
        command=command,
        line_status=line_status,
    )


def claim_next_command(db: Session, line_id: int) -> ClaimedCommand | None:
    """Atomically mark the newest pending command for a line as executed.

    Only the caller whose UPDATE flips the row from pending sees it; a
    concurrent poll finds no pending row and gets None.
    """
    newest_pending = (
        select(ControlCommand.id)
        .where(
            ControlCommand.line_id == line_id,
            ControlCommand.status == CommandStatus.PENDING,
        )
        .order_by(ControlCommand.created_at.desc(), ControlCommand.id.desc())
        .limit(1)
        .scalar_subquery()
    )
    row = db.execute(
        update(ControlCommand)
        .where(
            ControlCommand.id == newest_pending,
            ControlCommand.status == CommandStatus.PENDING,
        )
        .values(status=CommandStatus.EXECUTED, executed_at=datetime.now(UTC))
        .returning(ControlCommand.id, ControlCommand.command)
        .execution_options(synchronize_session=False)
    ).one_or_none()
    if row is None:
        return None
    return ClaimedCommand(id=row.id, command=CommandType(row.command))


def poll_control(db: Session, device: Device, line_id: int) -> ControlResponse:
    """Tell a polling device what to do with its line.

    Falls back to ``disconnect`` when nothing is queued but the line is
    disconnected, so a device that just came online stays off.
    """
    authorize_line(db, device, line_id)

    claimed = claim_next_command(db, line_id)
    db.commit()

    line = db.execute(
        select(Line.status, Line.max_current_a, Line.max_power_w, Line.idle_limit_hours).where(
            Line.id == line_id
        )
    ).one()

    if claimed is not None:
        action = ControlAction(claimed.command.value)
        logger.info(
            "Device %s claimed command %s (%s) for line %s",
            device.id,
            claimed.id,
            action.value,
            line_id,
        )
    elif line.status == LineStatus.DISCONNECTED:
        action = ControlAction.DISCONNECT
    else:
        action = ControlAction.NONE

    return ControlResponse(
        action=action,
        command_id=claimed.id if claimed else None,
        thresholds=DeviceThresholds(
            max_current=line.max_current_a,
            max_power=line.max_power_w,
            idle_limit_hours=line.idle_limit_hours,
        ),
    )


def list_commands(
    db: Session,
    line_id: int | None = None,
    limit: int = 100,
) -> list[ControlCommand]:
    """List queued commands newest first."""
    query = db.query(ControlCommand)
    if line_id is not None:
        query = query.filter(ControlCommand.line_id == line_id)
    return (
        query.order_by(ControlCommand.created_at.desc(), ControlCommand.id.desc())
        .limit(limit)
        .all()
    )
