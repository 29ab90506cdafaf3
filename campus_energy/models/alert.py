"""Alert database model."""

from datetime import UTC, datetime

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from campus_energy.core.database import Base
from campus_energy.models.enums import AlertType


class Alert(Base):
    """Immutable notification about a line."""

    __tablename__ = "alerts"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    line_id: Mapped[int] = mapped_column(ForeignKey("lines.id"), index=True)
    type: Mapped[AlertType] = mapped_column(String(30), index=True)
    message: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        index=True,
    )
