"""Line database model - the quota ledger balance."""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campus_energy.core.database import Base
from campus_energy.models.enums import LineStatus

if TYPE_CHECKING:
    from campus_energy.models.block import Block

# Decimal places kept for kWh balances
BALANCE_SCALE = 4


class Line(Base):
    """Billable circuit inside a block.

    ``remaining_kwh`` is the live balance and never drops below zero.
    ``status`` is derived from the balance and ``admin_hold`` (the last admin
    intent) and is only ever written through the merge rule in
    ``services.line_status``.
    """

    __tablename__ = "lines"
    __table_args__ = (UniqueConstraint("block_id", "line_number", name="uq_block_line_number"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    block_id: Mapped[int] = mapped_column(ForeignKey("blocks.id"), index=True)
    line_number: Mapped[int] = mapped_column()

    current_quota_kwh: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=BALANCE_SCALE), default=Decimal("0")
    )
    remaining_kwh: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=BALANCE_SCALE), default=Decimal("0")
    )
    status: Mapped[LineStatus] = mapped_column(String(20), default=LineStatus.ACTIVE)
    admin_hold: Mapped[bool] = mapped_column(default=False)

    # Device thresholds reported back on every control poll
    max_current_a: Mapped[Decimal] = mapped_column(Numeric(precision=10, scale=2))
    max_power_w: Mapped[Decimal] = mapped_column(Numeric(precision=10, scale=2))
    idle_limit_hours: Mapped[int] = mapped_column()

    last_telemetry_at: Mapped[datetime | None] = mapped_column(nullable=True)
    # Energy log whose deduction took the balance to zero
    depleted_by_log_id: Mapped[int | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))

    # Relationships
    block: Mapped["Block"] = relationship(back_populates="lines")
