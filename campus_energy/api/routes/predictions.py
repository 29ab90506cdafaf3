"""Prediction routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from campus_energy.api.dependencies import ensure_line_access, get_current_user
from campus_energy.core.database import get_db
from campus_energy.models.user import User
from campus_energy.schemas.prediction import PredictionResponse
from campus_energy.services import blocks as block_service
from campus_energy.services import prediction as prediction_service

router = APIRouter(prefix="/predictions", tags=["predictions"])


@router.get("/{line_id}", response_model=PredictionResponse)
def get_prediction(
    line_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> PredictionResponse:
    """Days left, recommended daily budget and tips for a line."""
    ensure_line_access(current_user, line_id)
    line = block_service.get_line(db, line_id)
    return prediction_service.predict_for_line(db, line)
