"""User administration routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from campus_energy.api.dependencies import require_admin
from campus_energy.core.database import get_db
from campus_energy.models.user import User
from campus_energy.schemas.user import LineAssignment, UserResponse
from campus_energy.services import auth as auth_service
from campus_energy.services import blocks as block_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/", response_model=list[UserResponse])
def list_users(
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> list[UserResponse]:
    """List all users."""
    return [UserResponse.model_validate(u) for u in auth_service.list_users(db)]


@router.put("/{user_id}/line", response_model=UserResponse)
def assign_line(
    user_id: int,
    assignment: LineAssignment,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> UserResponse:
    """Assign a student to the line they are billed against."""
    user = auth_service.get_user(db, user_id)
    user = block_service.assign_user_to_line(db, user, assignment.line_id)
    return UserResponse.model_validate(user)
