from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from userbff.repositories.errors import WireFormatError


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class UserFields(BaseModel):
    username: str = Field(min_length=1, examples=["John Doe"])
    email: str = Field(min_length=3, examples=["john.doe@example.com"])

    @field_validator("username")
    @classmethod
    def _username_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("username must not be blank")
        return value

    @field_validator("email")
    @classmethod
    def _email_has_at(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError("email must contain '@'")
        return value


class NewUser(UserFields):
    """Create/update input carrying the plaintext password."""

    password: str = Field(min_length=8, max_length=128, examples=["password123"])


class User(UserFields):
    """A stored user row; ``password`` holds the hash."""

    model_config = ConfigDict(extra="ignore")

    id: UUID
    password: str
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def _strip_timezone(cls, value: datetime) -> datetime:
        return _naive_utc(value)


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    email: str
    created_at: datetime
    updated_at: datetime


_users_adapter = TypeAdapter(list[User])


def encode_user(user: User) -> dict[str, Any]:
    return user.model_dump(mode="json")


def encode_update(new_user: NewUser, password_hash: str, updated_at: datetime) -> dict[str, Any]:
    return {
        "username": new_user.username,
        "email": new_user.email,
        "password": password_hash,
        "updated_at": _naive_utc(updated_at).isoformat(),
    }


def decode_users(content: bytes | str) -> list[User]:
    try:
        return _users_adapter.validate_json(content)
    except ValidationError as exc:
        raise WireFormatError(f"Unexpected user payload: {exc}") from exc


def decode_user(content: bytes | str) -> User:
    try:
        return User.model_validate_json(content)
    except ValidationError as exc:
        raise WireFormatError(f"Unexpected user payload: {exc}") from exc
