"""Prediction estimator schemas."""

from decimal import Decimal

from campus_energy.schemas.base import CamelModel


class PredictionResponse(CamelModel):
    """Days-left estimate and advice for a line."""

    line_id: int
    remaining_kwh: Decimal
    avg_daily_usage: Decimal
    predicted_days_left: int
    recommended_daily_usage: Decimal
    tips: list[str]
