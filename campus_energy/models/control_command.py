"""ControlCommand database model - the admin command queue."""

from datetime import UTC, datetime

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from campus_energy.core.database import Base
from campus_energy.models.enums import CommandStatus, CommandType


class ControlCommand(Base):
    """Queued disconnect/reconnect instruction awaiting a device poll."""

    __tablename__ = "control_queue"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    line_id: Mapped[int] = mapped_column(ForeignKey("lines.id"), index=True)
    command: Mapped[CommandType] = mapped_column(String(20))
    status: Mapped[CommandStatus] = mapped_column(
        String(20), default=CommandStatus.PENDING, index=True
    )
    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))
    executed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    issued_by_user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
