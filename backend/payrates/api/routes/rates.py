"""Rate Routes — the RateRecord store over HTTP.

Invariants:
    - GET /rates/{user_id} returns history ordered by effective_from descending,
      each record tagged pending / current / superseded as of today
    - POST /rates creates; duplicate (userId, effective_from) → 409, existing record untouched
    - PATCH /rates changes hourly_rate only; the key is (userId, effective_from)
    - No DELETE route: rate history is append/amend only
    - GET /current-rates returns every user with the rate effective today

Design Decisions:
    - get_rate_store exported for reuse by the users routes
"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from payrates.config import get_settings
from payrates.core.domain_types import UserId
from payrates.core.rate_history import classify
from payrates.infrastructure.database import get_db
from payrates.infrastructure.sql_rate_store import SqlRateStore
from payrates.schemas.rates import CurrentRateResponse, RateResponse, RateWrite

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/rates", tags=["rates"])
current_router = APIRouter(prefix="/api/v1/current-rates", tags=["rates"])


async def get_rate_store(db: AsyncSession = Depends(get_db)) -> SqlRateStore:
    return SqlRateStore(db)


@router.get("/{user_id}", response_model=list[RateResponse])
async def list_rates(
    user_id: int, store: SqlRateStore = Depends(get_rate_store),
):
    """Rate history of one user, most recent first, each tagged with its status."""
    records = await store.list_rates(UserId(user_id))
    today = date.today()
    return [
        RateResponse.from_record(r, classify(r, records, today)) for r in records
    ]


@router.post(
    "", response_model=RateResponse, status_code=status.HTTP_201_CREATED,
)
async def create_rate(
    body: RateWrite, store: SqlRateStore = Depends(get_rate_store),
):
    """Add a new effective-dated rate."""
    record = await store.create_rate(
        UserId(body.user_id), body.effective_from, body.hourly_rate,
    )
    return RateResponse.from_record(record)


@router.patch("", response_model=RateResponse)
async def update_rate(
    body: RateWrite, store: SqlRateStore = Depends(get_rate_store),
):
    """Amend the hourly rate of an existing record."""
    record = await store.update_rate(
        UserId(body.user_id), body.effective_from, body.hourly_rate,
    )
    return RateResponse.from_record(record)


@current_router.get("", response_model=list[CurrentRateResponse])
async def list_current_rates(store: SqlRateStore = Depends(get_rate_store)):
    """Roster feed: each user with the currently effective rate (nulls if none)."""
    currency = get_settings().currency_symbol
    entries = await store.list_current_rates()
    return [CurrentRateResponse.from_current(e, currency) for e in entries]
