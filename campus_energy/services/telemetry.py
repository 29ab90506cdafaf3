"""Telemetry ingest: the quota deduction path.

Each report is appended to the energy log and deducted from its line in one
transaction. The deduction is a single ``UPDATE ... RETURNING`` so that
concurrent reports for the same line never lose updates: the balance, the
derived status and the depletion marker are all computed by the database
from the row's current values.
"""

import logging
from datetime import UTC, datetime
from decimal import Decimal

from fastapi import HTTPException, status
from sqlalchemy import Row, and_, case, false, literal, update
from sqlalchemy.orm import Session

from campus_energy.models.device import Device
from campus_energy.models.energy_log import EnergyLog
from campus_energy.models.line import Line
from campus_energy.schemas.telemetry import TelemetryReport, TelemetryResult
from campus_energy.services.alerts import evaluate_telemetry_alerts
from campus_energy.services.devices import authorize_line
from campus_energy.services.line_status import merge_line_status_expr, round_balance_expr

logger = logging.getLogger(__name__)


def deduct_energy(
    db: Session,
    line_id: int,
    energy_kwh: Decimal,
    log_id: int,
    reported_at: datetime,
) -> Row | None:
    """Atomically deduct ``energy_kwh`` from a line, flooring the balance at zero.

    A report overrides any admin disconnect: the hold is cleared and the
    status follows the balance alone.

    Returns the post-update balance, status, quota, thresholds and depletion
    marker, or None if the line does not exist. The line's depletion marker is
    set to ``log_id`` only by the report that takes a positive balance to zero.
    """
    new_balance = round_balance_expr(Line.remaining_kwh - energy_kwh)
    stmt = (
        update(Line)
        .where(Line.id == line_id)
        .values(
            remaining_kwh=case((new_balance > 0, new_balance), else_=literal(Decimal("0"))),
            admin_hold=False,
            status=merge_line_status_expr(new_balance, false()),
            depleted_by_log_id=case(
                (and_(Line.remaining_kwh > 0, new_balance <= 0), literal(log_id)),
                else_=Line.depleted_by_log_id,
            ),
            last_telemetry_at=reported_at,
        )
        .returning(
            Line.remaining_kwh,
            Line.status,
            Line.current_quota_kwh,
            Line.max_power_w,
            Line.max_current_a,
            Line.depleted_by_log_id,
        )
        .execution_options(synchronize_session=False)
    )
    return db.execute(stmt).one_or_none()


def ingest_telemetry(db: Session, device: Device, report: TelemetryReport) -> TelemetryResult:
    """Record a device report, deduct it from the line and raise alerts."""
    authorize_line(db, device, report.line_id)

    now = datetime.now(UTC)
    log = EnergyLog(
        line_id=report.line_id,
        timestamp=now,
        power_w=report.power_w,
        voltage_v=report.voltage_v,
        current_a=report.current_a,
        energy_kwh=report.energy_kwh,
    )
    db.add(log)
    db.flush()

    row = deduct_energy(db, report.line_id, report.energy_kwh, log.id, now)
    if row is None:
        # Line removed between authorization and deduction
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Line not found",
        )

    evaluate_telemetry_alerts(
        db,
        line_id=report.line_id,
        remaining_kwh=row.remaining_kwh,
        current_quota_kwh=row.current_quota_kwh,
        power_w=report.power_w,
        current_a=report.current_a,
        max_power_w=row.max_power_w,
        max_current_a=row.max_current_a,
        depleted=row.depleted_by_log_id == log.id,
    )
    db.commit()

    logger.info(
        "Line %s: deducted %s kWh, remaining %s kWh (%s)",
        report.line_id,
        report.energy_kwh,
        row.remaining_kwh,
        row.status,
    )
    return TelemetryResult(remaining_kwh=row.remaining_kwh, status=row.status)


def get_energy_logs(
    db: Session,
    line_id: int,
    limit: int = 100,
    offset: int = 0,
) -> tuple[list[EnergyLog], int]:
    """Get telemetry history for a line with pagination."""
    query = db.query(EnergyLog).filter(EnergyLog.line_id == line_id)
    total = query.count()
    logs = (
        query.order_by(EnergyLog.timestamp.desc(), EnergyLog.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return logs, total
