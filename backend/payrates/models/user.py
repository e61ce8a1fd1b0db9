"""User ORM — roster entries that own rate histories.

Invariants:
    - id is a stable integer primary key
    - avatar is an optional opaque reference (URL or path)
"""

from datetime import datetime, timezone

from sqlalchemy import Integer, String, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payrates.db.base import Base


class User(Base):
    """Roster user."""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(150), nullable=False, unique=True)
    avatar: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    rates: Mapped[list["HourlyRate"]] = relationship(
        "HourlyRate", back_populates="user",
        order_by="HourlyRate.effective_from.desc()", lazy="selectin",
    )
