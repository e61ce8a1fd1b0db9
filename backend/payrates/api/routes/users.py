"""User Routes — minimal roster endpoints used to seed and browse users."""

import logging

from fastapi import APIRouter, Depends, status

from payrates.api.routes.rates import get_rate_store
from payrates.core.domain_types import UserId
from payrates.core.errors import UserNotFoundError
from payrates.infrastructure.sql_rate_store import SqlRateStore
from payrates.schemas.users import UserCreate, UserResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("", response_model=list[UserResponse])
async def list_users(store: SqlRateStore = Depends(get_rate_store)):
    return [UserResponse.from_ref(u) for u in await store.list_users()]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, store: SqlRateStore = Depends(get_rate_store)):
    user = await store.get_user(UserId(user_id))
    if user is None:
        raise UserNotFoundError(user_id)
    return UserResponse.from_ref(user)


@router.post(
    "", response_model=UserResponse, status_code=status.HTTP_201_CREATED,
)
async def create_user(
    body: UserCreate, store: SqlRateStore = Depends(get_rate_store),
):
    user = await store.create_user(body.username, body.avatar)
    logger.info(f"User '{user.username}' created", extra={"user_id": user.user_id})
    return UserResponse.from_ref(user)
