"""User Schemas — roster seeding and listing."""

from pydantic import BaseModel, Field, field_validator

from payrates.core.domain_types import UserRef


class UserCreate(BaseModel):
    """User creation — username stripped and non-empty."""
    username: str = Field(min_length=1, max_length=150)
    avatar: str | None = Field(None, max_length=500)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("username cannot be empty or whitespace")
        return v


class UserResponse(BaseModel):
    user_id: int
    username: str
    avatar: str | None = None

    @classmethod
    def from_ref(cls, user: UserRef) -> "UserResponse":
        return cls(user_id=user.user_id, username=user.username, avatar=user.avatar)
