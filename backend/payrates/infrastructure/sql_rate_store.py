"""SQL Rate Store — RateStore implementation over an async SQLAlchemy session.

Invariants:
    - Unknown user -> UserNotFoundError (checked before any write)
    - Duplicate (user_id, effective_from) -> DuplicateDateError; the existing
      record is never overwritten
    - update_rate only changes hourly_rate; missing key -> RateRecordNotFoundError
    - Driver failures leave as DatabaseError after rollback
    - Every write commits before returning
"""

import logging
from collections.abc import Callable
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from payrates.core.domain_types import CurrentRate, RateRecord, UserId, UserRef
from payrates.core.errors import (
    DatabaseError, DuplicateDateError, InvalidInputError, RateRecordNotFoundError,
    UserNotFoundError,
)
from payrates.core.rate_history import currently_effective
from payrates.models.hourly_rate import HourlyRate
from payrates.models.user import User

logger = logging.getLogger(__name__)


def to_user_ref(user: User) -> UserRef:
    return UserRef(user_id=UserId(user.id), username=user.username, avatar=user.avatar)


def to_record(row: HourlyRate) -> RateRecord:
    return RateRecord(
        user_id=UserId(row.user_id),
        effective_from=row.effective_from,
        hourly_rate=Decimal(row.hourly_rate).quantize(Decimal("0.01")),
    )


class SqlRateStore:
    """Rate persistence backed by the users / hourly_rates tables."""

    def __init__(self, db: AsyncSession, clock: Callable[[], date] = date.today):
        self.db = db
        self.clock = clock

    async def _get_user_row(self, user_id: UserId) -> User | None:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def _require_user(self, user_id: UserId) -> User:
        user = await self._get_user_row(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def _get_rate_row(
        self, user_id: UserId, effective_from: date,
    ) -> HourlyRate | None:
        return await self.db.get(HourlyRate, (user_id, effective_from))

    async def get_user(self, user_id: UserId) -> UserRef | None:
        try:
            user = await self._get_user_row(user_id)
        except SQLAlchemyError as e:
            raise await self._database_error(e, "query")
        return to_user_ref(user) if user else None

    async def list_users(self) -> list[UserRef]:
        try:
            result = await self.db.execute(select(User).order_by(User.username))
        except SQLAlchemyError as e:
            raise await self._database_error(e, "query")
        return [to_user_ref(u) for u in result.scalars().all()]

    async def create_user(self, username: str, avatar: str | None = None) -> UserRef:
        user = User(username=username, avatar=avatar)
        self.db.add(user)
        try:
            await self.db.commit()
            await self.db.refresh(user)
        except IntegrityError:
            await self.db.rollback()
            raise InvalidInputError(f"Username '{username}' is already taken.", "username")
        except SQLAlchemyError as e:
            raise await self._database_error(e, "commit")
        return to_user_ref(user)

    async def list_rates(self, user_id: UserId) -> list[RateRecord]:
        try:
            await self._require_user(user_id)
            result = await self.db.execute(
                select(HourlyRate)
                .where(HourlyRate.user_id == user_id)
                .order_by(HourlyRate.effective_from.desc()),
            )
        except SQLAlchemyError as e:
            raise await self._database_error(e, "query")
        return [to_record(row) for row in result.scalars().all()]

    async def create_rate(
        self, user_id: UserId, effective_from: date, hourly_rate: Decimal,
    ) -> RateRecord:
        try:
            await self._require_user(user_id)
            if await self._get_rate_row(user_id, effective_from) is not None:
                raise DuplicateDateError(user_id, effective_from)
            row = HourlyRate(
                user_id=user_id,
                effective_from=effective_from,
                hourly_rate=hourly_rate,
            )
            self.db.add(row)
            await self.db.commit()
        except IntegrityError:
            # Lost a race against a concurrent create for the same key
            await self.db.rollback()
            raise DuplicateDateError(user_id, effective_from)
        except SQLAlchemyError as e:
            raise await self._database_error(e, "commit")
        logger.info(
            "Hourly rate stored",
            extra={"user_id": user_id, "effective_from": effective_from.isoformat()},
        )
        return to_record(row)

    async def update_rate(
        self, user_id: UserId, effective_from: date, hourly_rate: Decimal,
    ) -> RateRecord:
        try:
            await self._require_user(user_id)
            row = await self._get_rate_row(user_id, effective_from)
            if row is None:
                raise RateRecordNotFoundError(user_id, effective_from)
            row.hourly_rate = hourly_rate
            await self.db.commit()
            await self.db.refresh(row)
        except SQLAlchemyError as e:
            raise await self._database_error(e, "commit")
        return to_record(row)

    async def list_current_rates(self) -> list[CurrentRate]:
        """Every user with the rate effective today (None when none applies yet)."""
        today = self.clock()
        try:
            users = (await self.db.execute(select(User).order_by(User.username))).scalars().all()
            rows = (await self.db.execute(
                select(HourlyRate).where(HourlyRate.effective_from <= today),
            )).scalars().all()
        except SQLAlchemyError as e:
            raise await self._database_error(e, "query")

        by_user: dict[int, list[RateRecord]] = {}
        for row in rows:
            by_user.setdefault(row.user_id, []).append(to_record(row))

        entries = []
        for user in users:
            current = currently_effective(by_user.get(user.id, []), today)
            entries.append(CurrentRate(
                user=to_user_ref(user),
                hourly_rate=current.hourly_rate if current else None,
                effective_from=current.effective_from if current else None,
            ))
        return entries

    async def _database_error(self, e: SQLAlchemyError, operation: str) -> DatabaseError:
        await self.db.rollback()
        logger.error(f"Rate store {operation} failed: {e}")
        return DatabaseError(type(e).__name__, operation)
