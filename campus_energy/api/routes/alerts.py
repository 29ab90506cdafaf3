"""Alert and energy log history routes."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from campus_energy.api.dependencies import ensure_line_access, get_current_user
from campus_energy.core.database import get_db
from campus_energy.models.user import User
from campus_energy.schemas.alert import AlertResponse, EnergyLogHistory, EnergyLogResponse
from campus_energy.services import alerts as alert_service
from campus_energy.services import telemetry as telemetry_service

router = APIRouter(tags=["alerts"])


@router.get("/alerts", response_model=list[AlertResponse])
def list_alerts(
    line_id: int | None = Query(None, alias="lineId"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[AlertResponse]:
    """List alerts. Students only ever see their own line's alerts."""
    if not current_user.get_is_admin():
        if current_user.line_id is None:
            return []
        if line_id is None:
            line_id = current_user.line_id
        ensure_line_access(current_user, line_id)
    alerts = alert_service.list_alerts(db, line_id, limit, offset)
    return [AlertResponse.model_validate(a) for a in alerts]


@router.get("/energy-logs/{line_id}", response_model=EnergyLogHistory)
def get_energy_logs(
    line_id: int,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> EnergyLogHistory:
    """Get telemetry history for a line with pagination."""
    ensure_line_access(current_user, line_id)
    logs, total = telemetry_service.get_energy_logs(db, line_id, limit, offset)
    return EnergyLogHistory(
        line_id=line_id,
        logs=[EnergyLogResponse.model_validate(log) for log in logs],
        total=total,
        limit=limit,
        offset=offset,
    )
