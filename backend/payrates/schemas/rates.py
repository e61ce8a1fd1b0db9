"""Rate Schemas — bodies and responses for the rate store endpoints.

Invariants:
    - RateWrite accepts userId (as sent by the operator UI) or user_id
    - hourly_rate accepts a number or a string with decimal comma or point;
      at most 2 decimals, never negative
    - effective_from must be YYYY-MM-DD
    - Responses carry hourly_rate as a JSON number
    - status (pending / current / superseded) is only set on history listings
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from payrates.core.domain_types import CurrentRate, RateRecord, RateStatus
from payrates.core.errors import InvalidInputError
from payrates.core.rate_formatting import format_rate
from payrates.core.rate_parsing import parse_effective_from, parse_hourly_rate


class RateWrite(BaseModel):
    """Body of POST /rates and PATCH /rates — keyed by (userId, effective_from)."""
    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(alias="userId", gt=0)
    effective_from: date
    hourly_rate: Decimal

    @field_validator("effective_from", mode="before")
    @classmethod
    def check_effective_from(cls, v: object) -> date:
        try:
            return parse_effective_from(v if isinstance(v, date) else str(v))
        except InvalidInputError as e:
            raise ValueError(e.message) from e

    @field_validator("hourly_rate", mode="before")
    @classmethod
    def check_hourly_rate(cls, v: object) -> Decimal:
        try:
            return parse_hourly_rate(v)
        except InvalidInputError as e:
            raise ValueError(e.message) from e


class RateResponse(BaseModel):
    """One rate record."""
    user_id: int
    effective_from: date
    hourly_rate: float
    status: RateStatus | None = None

    @classmethod
    def from_record(
        cls, record: RateRecord, status: RateStatus | None = None,
    ) -> "RateResponse":
        return cls(
            user_id=record.user_id,
            effective_from=record.effective_from,
            hourly_rate=float(record.hourly_rate),
            status=status,
        )


class CurrentRateResponse(BaseModel):
    """Roster row: a user with the rate effective today."""
    user_id: int
    username: str
    avatar: str | None = None
    hourly_rate: float | None = None
    effective_from: date | None = None
    hourly_rate_display: str

    @classmethod
    def from_current(cls, entry: CurrentRate, currency: str) -> "CurrentRateResponse":
        return cls(
            user_id=entry.user.user_id,
            username=entry.user.username,
            avatar=entry.user.avatar,
            hourly_rate=float(entry.hourly_rate) if entry.hourly_rate is not None else None,
            effective_from=entry.effective_from,
            hourly_rate_display=format_rate(entry.hourly_rate, currency),
        )
