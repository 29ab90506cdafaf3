"""Block database model."""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campus_energy.core.database import Base

if TYPE_CHECKING:
    from campus_energy.models.device import Device
    from campus_energy.models.line import Line


class Block(Base):
    """Building that groups billable lines."""

    __tablename__ = "blocks"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    total_quota_kwh: Mapped[Decimal] = mapped_column(
        Numeric(precision=10, scale=2), default=Decimal("0")
    )
    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))

    # Relationships
    lines: Mapped[list["Line"]] = relationship(
        back_populates="block", cascade="all, delete-orphan"
    )
    devices: Mapped[list["Device"]] = relationship(
        back_populates="block", cascade="all, delete-orphan"
    )
