"""User database model."""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campus_energy.core.database import Base
from campus_energy.models.enums import UserRole

if TYPE_CHECKING:
    from campus_energy.models.block import Block
    from campus_energy.models.line import Line


class User(Base):
    """User model for authentication."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    email: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    role: Mapped[UserRole] = mapped_column(String(20), default=UserRole.STUDENT)
    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))

    # Students are billed against a single line
    block_id: Mapped[int | None] = mapped_column(
        ForeignKey("blocks.id", ondelete="SET NULL"),
        nullable=True,
    )
    line_id: Mapped[int | None] = mapped_column(
        ForeignKey("lines.id", ondelete="SET NULL"),
        nullable=True,
    )

    block: Mapped["Block | None"] = relationship()
    line: Mapped["Line | None"] = relationship()

    def get_is_admin(self) -> bool:
        """Check if this user administers the campus."""
        return self.role == UserRole.ADMIN
