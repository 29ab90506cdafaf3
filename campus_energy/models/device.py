"""Device database model."""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campus_energy.core.database import Base

if TYPE_CHECKING:
    from campus_energy.models.block import Block


class Device(Base):
    """Metering controller installed in a block, authenticated by its token."""

    __tablename__ = "devices"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    block_id: Mapped[int] = mapped_column(ForeignKey("blocks.id"), index=True)
    name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    device_token: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    last_seen_at: Mapped[datetime | None] = mapped_column(nullable=True)
    is_online: Mapped[bool] = mapped_column(default=False)
    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))

    block: Mapped["Block"] = relationship(back_populates="devices")
