"""EnergyLog database model - append-only telemetry ledger."""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from campus_energy.core.database import Base


class EnergyLog(Base):
    """One device report, stored verbatim."""

    __tablename__ = "energy_logs"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    line_id: Mapped[int] = mapped_column(ForeignKey("lines.id"), index=True)
    timestamp: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        index=True,
    )

    power_w: Mapped[Decimal] = mapped_column(Numeric(precision=10, scale=2))
    voltage_v: Mapped[Decimal] = mapped_column(Numeric(precision=10, scale=2))
    current_a: Mapped[Decimal] = mapped_column(Numeric(precision=10, scale=2))
    # Delta since the previous report, not a cumulative reading
    energy_kwh: Mapped[Decimal] = mapped_column(Numeric(precision=10, scale=4))
