"""Alert evaluator.

Alerts are append-only. They are written in the caller's transaction and
committed together with the state change that raised them.
"""

import logging
from datetime import UTC, datetime, timedelta
from decimal import Decimal

from sqlalchemy.orm import Session

from campus_energy.core.config import settings
from campus_energy.models.alert import Alert
from campus_energy.models.enums import AlertType

logger = logging.getLogger(__name__)


def create_alert(db: Session, line_id: int, alert_type: AlertType, message: str) -> Alert:
    """Append an alert to the session without committing."""
    alert = Alert(line_id=line_id, type=alert_type, message=message)
    db.add(alert)
    logger.info("Alert %s for line %s: %s", alert_type.value, line_id, message)
    return alert


def is_low_balance(
    remaining_kwh: Decimal,
    current_quota_kwh: Decimal,
    ratio: Decimal | None = None,
) -> bool:
    """True when the balance is positive but at or under the warning share of the quota."""
    if ratio is None:
        ratio = settings.LOW_BALANCE_RATIO
    return Decimal("0") < remaining_kwh <= ratio * current_quota_kwh


def low_balance_message(remaining_kwh: Decimal, current_quota_kwh: Decimal) -> str:
    """Human-readable low balance warning."""
    if current_quota_kwh > 0:
        percentage = remaining_kwh / current_quota_kwh * 100
    else:
        percentage = Decimal("0")
    return (
        f"Low balance: {remaining_kwh:.2f} kWh remaining "
        f"({percentage:.1f}% of quota). Top up to avoid disconnection."
    )


def _low_balance_recently_alerted(db: Session, line_id: int, cooldown_minutes: int) -> bool:
    """Check for a low balance alert inside the cooldown window."""
    since = datetime.now(UTC) - timedelta(minutes=cooldown_minutes)
    recent = (
        db.query(Alert.id)
        .filter(
            Alert.line_id == line_id,
            Alert.type == AlertType.LOW_BALANCE,
            Alert.created_at >= since,
        )
        .first()
    )
    return recent is not None


def evaluate_telemetry_alerts(
    db: Session,
    *,
    line_id: int,
    remaining_kwh: Decimal,
    current_quota_kwh: Decimal,
    power_w: Decimal,
    current_a: Decimal,
    max_power_w: Decimal,
    max_current_a: Decimal,
    depleted: bool,
) -> list[Alert]:
    """Raise the alerts a successful deduction calls for."""
    raised: list[Alert] = []

    if depleted:
        raised.append(
            create_alert(
                db,
                line_id,
                AlertType.DISCONNECTION,
                "Energy quota exhausted. The line has been disconnected until it is topped up.",
            )
        )
    elif is_low_balance(remaining_kwh, current_quota_kwh):
        cooldown = settings.LOW_BALANCE_ALERT_COOLDOWN_MINUTES
        if cooldown > 0 and _low_balance_recently_alerted(db, line_id, cooldown):
            logger.debug("Low balance alert for line %s suppressed by cooldown", line_id)
        else:
            raised.append(
                create_alert(
                    db,
                    line_id,
                    AlertType.LOW_BALANCE,
                    low_balance_message(remaining_kwh, current_quota_kwh),
                )
            )

    if power_w > max_power_w or current_a > max_current_a:
        raised.append(
            create_alert(
                db,
                line_id,
                AlertType.OVERLOAD,
                f"Overload: {power_w:.0f} W / {current_a:.2f} A exceeds the line limit "
                f"of {max_power_w:.0f} W / {max_current_a:.2f} A.",
            )
        )

    return raised


def list_alerts(
    db: Session,
    line_id: int | None = None,
    limit: int = 100,
    offset: int = 0,
) -> list[Alert]:
    """List alerts newest first, optionally for a single line."""
    query = db.query(Alert)
    if line_id is not None:
        query = query.filter(Alert.line_id == line_id)
    return (
        query.order_by(Alert.created_at.desc(), Alert.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
