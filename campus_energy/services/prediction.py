"""Prediction estimator: days left and a daily budget from recent usage.

The estimate is always recomputed from the raw energy logs. Each request
also writes an ``AiPrediction`` row as an audit trail, but those rows are
never read back.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from decimal import ROUND_FLOOR, Decimal

from sqlalchemy.orm import Session

from campus_energy.core.clock import as_utc
from campus_energy.core.config import settings
from campus_energy.models.energy_log import EnergyLog
from campus_energy.models.line import Line
from campus_energy.models.prediction import AiPrediction
from campus_energy.schemas.prediction import PredictionResponse

logger = logging.getLogger(__name__)

MAX_TIPS = 4
TWO_PLACES = Decimal("0.01")


@dataclass(frozen=True)
class UsageEstimate:
    """Output of the estimator for one line."""

    avg_daily_usage: Decimal
    predicted_days_left: int
    recommended_daily_usage: Decimal
    tips: list[str]


def estimate_usage(
    remaining_kwh: Decimal,
    window: Sequence[tuple[datetime, Decimal]],
    now: datetime,
    sentinel_days: int | None = None,
    budget_days: int | None = None,
) -> UsageEstimate:
    """Estimate from ``(timestamp, energy_kwh)`` pairs in the trailing window.

    The average divides by the whole days since the oldest log in the
    window (at least one), not by the nominal window length.
    """
    if sentinel_days is None:
        sentinel_days = settings.PREDICTION_SENTINEL_DAYS
    if budget_days is None:
        budget_days = settings.BUDGET_DAYS

    total = sum((energy for _, energy in window), Decimal("0"))
    if window:
        oldest = min(as_utc(timestamp) for timestamp, _ in window)
        days_spanned = max(1, (as_utc(now) - oldest).days)
    else:
        days_spanned = 1
    avg = total / days_spanned

    if avg > 0:
        predicted_days_left = int((remaining_kwh / avg).to_integral_value(rounding=ROUND_FLOOR))
    else:
        predicted_days_left = sentinel_days

    recommended = remaining_kwh / budget_days
    avg_rounded = avg.quantize(TWO_PLACES)
    recommended_rounded = recommended.quantize(TWO_PLACES)

    return UsageEstimate(
        avg_daily_usage=avg_rounded,
        predicted_days_left=predicted_days_left,
        recommended_daily_usage=recommended_rounded,
        tips=build_tips(
            avg_rounded, remaining_kwh, predicted_days_left, recommended_rounded, budget_days
        ),
    )


def build_tips(
    avg_daily_usage: Decimal,
    remaining_kwh: Decimal,
    predicted_days_left: int,
    recommended_daily_usage: Decimal,
    budget_days: int,
    high_usage_kwh: Decimal | None = None,
) -> list[str]:
    """Advice ordered most urgent first, at most MAX_TIPS entries."""
    if high_usage_kwh is None:
        high_usage_kwh = settings.HIGH_USAGE_KWH

    tips: list[str] = []
    if remaining_kwh <= 0:
        tips.append("Your balance is exhausted. Top up to restore power to your line.")
    elif predicted_days_left <= 3:
        tips.append(
            f"Critical: at your current rate your balance runs out in about "
            f"{predicted_days_left} day(s). Top up now."
        )
    elif predicted_days_left <= 7:
        tips.append(
            f"Your balance will last about {predicted_days_left} days. Plan a top-up this week."
        )

    if avg_daily_usage > 0 and avg_daily_usage > recommended_daily_usage:
        tips.append(
            f"You use {avg_daily_usage:.2f} kWh per day. Stay under "
            f"{recommended_daily_usage:.2f} kWh per day to last {budget_days} days."
        )

    if avg_daily_usage >= high_usage_kwh:
        tips.append("High daily usage detected. Check for heaters or kettles left running.")

    if avg_daily_usage == 0:
        tips.append(
            "No usage recorded recently. "
            "If your meter should be reporting, contact an administrator."
        )
    elif predicted_days_left >= budget_days:
        tips.append("Great job! Your current usage keeps you within budget for the month.")

    tips.append("Switch appliances off at the socket instead of leaving them on standby.")
    return tips[:MAX_TIPS]


def predict_for_line(db: Session, line: Line) -> PredictionResponse:
    """Estimate usage for a line from its trailing window and record a snapshot."""
    now = datetime.now(UTC)
    since = now - timedelta(days=settings.PREDICTION_WINDOW_DAYS)
    window = [
        (row.timestamp, row.energy_kwh)
        for row in db.query(EnergyLog.timestamp, EnergyLog.energy_kwh)
        .filter(EnergyLog.line_id == line.id, EnergyLog.timestamp >= since)
        .all()
    ]

    remaining = line.remaining_kwh
    estimate = estimate_usage(remaining, window, now)

    snapshot = AiPrediction(
        line_id=line.id,
        predicted_days_left=estimate.predicted_days_left,
        recommended_daily_usage_kwh=estimate.recommended_daily_usage,
        avg_daily_usage_kwh=estimate.avg_daily_usage,
    )
    db.add(snapshot)
    db.commit()
    logger.debug(
        "Prediction for line %s: %s days left from %d log(s)",
        line.id,
        estimate.predicted_days_left,
        len(window),
    )

    return PredictionResponse(
        line_id=line.id,
        remaining_kwh=remaining,
        avg_daily_usage=estimate.avg_daily_usage,
        predicted_days_left=estimate.predicted_days_left,
        recommended_daily_usage=estimate.recommended_daily_usage,
        tips=estimate.tips,
    )
