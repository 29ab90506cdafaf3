"""AiPrediction database model - audit trail of estimator outputs."""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from campus_energy.core.database import Base


class AiPrediction(Base):
    """Snapshot written on every prediction request; never read back."""

    __tablename__ = "ai_predictions"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    line_id: Mapped[int] = mapped_column(ForeignKey("lines.id"), index=True)
    predicted_days_left: Mapped[int] = mapped_column()
    recommended_daily_usage_kwh: Mapped[Decimal] = mapped_column(Numeric(precision=10, scale=2))
    avg_daily_usage_kwh: Mapped[Decimal] = mapped_column(Numeric(precision=10, scale=2))
    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))
