"""Block and line management for administrators."""

import logging

from fastapi import HTTPException, status
from sqlalchemy import delete, update
from sqlalchemy.orm import Session

from campus_energy.core.config import settings
from campus_energy.models.alert import Alert
from campus_energy.models.block import Block
from campus_energy.models.control_command import ControlCommand
from campus_energy.models.energy_log import EnergyLog
from campus_energy.models.enums import UserRole
from campus_energy.models.line import Line
from campus_energy.models.payment import Payment
from campus_energy.models.prediction import AiPrediction
from campus_energy.models.user import User
from campus_energy.schemas.block import BlockCreate, LineCreate
from campus_energy.services.line_status import merge_line_status

logger = logging.getLogger(__name__)


def create_block(db: Session, data: BlockCreate) -> Block:
    """Create a new block."""
    existing = db.query(Block).filter(Block.name == data.name).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Block with name '{data.name}' already exists",
        )

    block = Block(name=data.name, total_quota_kwh=data.total_quota_kwh)
    db.add(block)
    db.commit()
    db.refresh(block)
    return block


def get_block(db: Session, block_id: int) -> Block:
    """Get a block by ID."""
    block = db.get(Block, block_id)
    if not block:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Block not found",
        )
    return block


def list_blocks(db: Session) -> list[Block]:
    """List all blocks."""
    return db.query(Block).order_by(Block.id).all()


def delete_block(db: Session, block_id: int) -> None:
    """Delete a block together with its lines, devices and their history."""
    block = get_block(db, block_id)
    line_ids = [line.id for line in block.lines]
    _delete_line_children(db, line_ids)
    db.execute(update(User).where(User.block_id == block_id).values(block_id=None))
    db.delete(block)
    db.commit()
    logger.info("Deleted block %s with %d line(s)", block_id, len(line_ids))


def create_line(db: Session, data: LineCreate) -> Line:
    """Create a line in a block, starting with its full quota by default."""
    get_block(db, data.block_id)

    existing = (
        db.query(Line)
        .filter(Line.block_id == data.block_id, Line.line_number == data.line_number)
        .first()
    )
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Line {data.line_number} already exists in this block",
        )

    remaining = data.remaining_kwh if data.remaining_kwh is not None else data.current_quota_kwh
    line = Line(
        block_id=data.block_id,
        line_number=data.line_number,
        current_quota_kwh=data.current_quota_kwh,
        remaining_kwh=remaining,
        admin_hold=False,
        status=merge_line_status(remaining, admin_hold=False),
        max_current_a=data.max_current_a or settings.DEFAULT_MAX_CURRENT_A,
        max_power_w=data.max_power_w or settings.DEFAULT_MAX_POWER_W,
        idle_limit_hours=data.idle_limit_hours or settings.DEFAULT_IDLE_LIMIT_HOURS,
    )
    db.add(line)
    db.commit()
    db.refresh(line)
    return line


def get_line(db: Session, line_id: int) -> Line:
    """Get a line by ID."""
    line = db.get(Line, line_id)
    if not line:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Line not found",
        )
    return line


def list_lines(db: Session, block_id: int | None = None) -> list[Line]:
    """List lines, optionally restricted to one block."""
    query = db.query(Line)
    if block_id is not None:
        query = query.filter(Line.block_id == block_id)
    return query.order_by(Line.block_id, Line.line_number).all()


def delete_line(db: Session, line_id: int) -> None:
    """Delete a line and everything that references it."""
    line = get_line(db, line_id)
    _delete_line_children(db, [line.id])
    db.delete(line)
    db.commit()
    logger.info("Deleted line %s", line_id)


def _delete_line_children(db: Session, line_ids: list[int]) -> None:
    """Remove rows that reference the given lines, without committing."""
    if not line_ids:
        return
    for model in (EnergyLog, Alert, ControlCommand, AiPrediction):
        db.execute(delete(model).where(model.line_id.in_(line_ids)))
    # Payments are financial records and outlive the line
    db.execute(update(Payment).where(Payment.line_id.in_(line_ids)).values(line_id=None))
    db.execute(update(User).where(User.line_id.in_(line_ids)).values(line_id=None))


def assign_user_to_line(db: Session, user: User, line_id: int) -> User:
    """Bill a student against a line."""
    if user.role != UserRole.STUDENT:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only students can be assigned to a line",
        )
    line = get_line(db, line_id)
    user.line_id = line.id
    user.block_id = line.block_id
    db.commit()
    db.refresh(user)
    return user
