"""HourlyRate ORM — one effective-dated pay rate of one user.

Invariants:
    - Primary key is (user_id, effective_from): the database itself rejects a
      second record for the same user and date
    - hourly_rate is Numeric(10, 2), never negative
    - No cascade delete: rate history is append/amend only
"""

from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payrates.db.base import Base


class HourlyRate(Base):
    """Effective-dated hourly rate."""
    __tablename__ = "hourly_rates"
    __table_args__ = (
        CheckConstraint("hourly_rate >= 0", name="non_negative"),
    )

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), primary_key=True,
    )
    effective_from: Mapped[date] = mapped_column(Date, primary_key=True)
    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    user: Mapped["User"] = relationship("User", back_populates="rates")
