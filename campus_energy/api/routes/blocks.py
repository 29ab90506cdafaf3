"""Block and line management routes."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from campus_energy.api.dependencies import get_current_user, require_admin
from campus_energy.core.database import get_db
from campus_energy.models.user import User
from campus_energy.schemas.block import (
    BlockCreate,
    BlockResponse,
    LineCreate,
    LineResponse,
    MyLineResponse,
)
from campus_energy.services import blocks as block_service

router = APIRouter(tags=["blocks"])


@router.post("/blocks", response_model=BlockResponse, status_code=status.HTTP_201_CREATED)
def create_block(
    data: BlockCreate,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> BlockResponse:
    """Create a block."""
    return BlockResponse.model_validate(block_service.create_block(db, data))


@router.get("/blocks", response_model=list[BlockResponse])
def list_blocks(
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
) -> list[BlockResponse]:
    """List all blocks."""
    return [BlockResponse.model_validate(b) for b in block_service.list_blocks(db)]


@router.get("/blocks/{block_id}", response_model=BlockResponse)
def get_block(
    block_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
) -> BlockResponse:
    """Get a block by ID."""
    return BlockResponse.model_validate(block_service.get_block(db, block_id))


@router.delete("/blocks/{block_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_block(
    block_id: int,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> None:
    """Delete a block with its lines and devices."""
    block_service.delete_block(db, block_id)


@router.post("/lines", response_model=LineResponse, status_code=status.HTTP_201_CREATED)
def create_line(
    data: LineCreate,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> LineResponse:
    """Create a line in a block."""
    return LineResponse.model_validate(block_service.create_line(db, data))


@router.get("/lines", response_model=list[LineResponse])
def list_lines(
    block_id: int | None = Query(None, alias="blockId", description="Only lines of this block"),
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> list[LineResponse]:
    """List lines, optionally filtered by block."""
    return [LineResponse.model_validate(line) for line in block_service.list_lines(db, block_id)]


@router.get("/lines/{line_id}", response_model=LineResponse)
def get_line(
    line_id: int,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> LineResponse:
    """Get a line by ID."""
    return LineResponse.model_validate(block_service.get_line(db, line_id))


@router.delete("/lines/{line_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_line(
    line_id: int,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> None:
    """Delete a line and its history."""
    block_service.delete_line(db, line_id)


@router.get("/my-line", response_model=MyLineResponse)
def get_my_line(
    current_user: User = Depends(get_current_user),
) -> MyLineResponse:
    """Get the caller's assigned line and block."""
    line = current_user.line
    return MyLineResponse(
        line=LineResponse.model_validate(line) if line else None,
        block=BlockResponse.model_validate(line.block) if line else None,
    )
