from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Awaitable, Callable
from uuid import UUID, uuid4

import httpx
from pydantic import ValidationError

from userbff.core.security import PasswordHasher, PasswordHashingError
from userbff.db.store import RemoteStoreClient, StoreTransportError
from userbff.repositories.base import UserRepository
from userbff.repositories.errors import (
    DatabaseError,
    InvalidDataError,
    PasswordError,
    UserNotFoundError,
)
from userbff.repositories.transaction import Transaction
from userbff.schemas.user import (
    NewUser,
    User,
    decode_users,
    encode_update,
    encode_user,
    utcnow,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def coerce_new_user(data: NewUser | Mapping[str, Any]) -> NewUser:
    if isinstance(data, NewUser):
        return data
    try:
        return NewUser.model_validate(data)
    except ValidationError as exc:
        raise InvalidDataError(str(exc)) from exc


class RemoteUserRepository(UserRepository):
    """User repository on top of the remote REST store.

    Writes run inside a remote transaction: ``begin_transaction``, one
    mutation, then ``commit_transaction``, or a best-effort
    ``rollback_transaction`` when the mutation fails. Reads are plain GETs.
    """

    def __init__(
        self,
        store: RemoteStoreClient,
        hasher: PasswordHasher,
        clock: Clock = utcnow,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self._clock = clock

    async def _read(self, request: str, response_call: Awaitable[httpx.Response]) -> list[User]:
        try:
            response = await response_call
        except StoreTransportError as exc:
            raise DatabaseError(str(exc)) from exc
        if not response.is_success:
            raise DatabaseError(f"{request} failed. Status: {response.status_code}")
        return decode_users(response.content)

    def _hash_password(self, password: str) -> str:
        try:
            return self.hasher.hash(password)
        except PasswordHashingError as exc:
            raise PasswordError(f"Password hashing failed: {exc}") from exc

    async def _ensure_exists(self, user_id: UUID) -> User:
        users = await self._read("User lookup", self.store.get_by_id(user_id))
        if not users:
            raise UserNotFoundError()
        return users[0]

    async def find_all(self) -> list[User]:
        return await self._read("User list retrieval", self.store.list_rows())

    async def find_by_id(self, user_id: UUID) -> User:
        users = await self._read("User acquisition", self.store.get_by_id(user_id))
        if not users:
            raise UserNotFoundError()
        return users[0]

    async def find_by_email(self, email: str) -> User | None:
        users = await self._read("User lookup by email", self.store.find_by("email", email))
        return users[0] if users else None

    async def create(self, new_user: NewUser | Mapping[str, Any]) -> User:
        new_user = coerce_new_user(new_user)
        now = self._clock()
        user = User(
            id=uuid4(),
            username=new_user.username,
            email=new_user.email,
            password=self._hash_password(new_user.password),
            created_at=now,
            updated_at=now,
        )
        payload = encode_user(user)

        response = await Transaction(self.store, "User creation").run(
            lambda transaction_id: self.store.insert(payload, transaction_id)
        )

        created = decode_users(response.content)
        if not created:
            raise DatabaseError("User creation failed: store returned no representation")
        logger.info("Created user %s", created[0].id)
        return created[0]

    async def update(self, user_id: UUID, new_user: NewUser | Mapping[str, Any]) -> User:
        new_user = coerce_new_user(new_user)
        current = await self._ensure_exists(user_id)

        # updated_at never precedes created_at, even when clocks disagree.
        payload = encode_update(
            new_user,
            self._hash_password(new_user.password),
            max(self._clock(), current.created_at),
        )

        response = await Transaction(self.store, "User update").run(
            lambda transaction_id: self.store.patch(user_id, payload, transaction_id)
        )

        updated = decode_users(response.content)
        if not updated:
            # Deleted between the existence check and the patch.
            raise UserNotFoundError()
        logger.info("Updated user %s", user_id)
        return updated[0]

    async def delete(self, user_id: UUID) -> None:
        await self._ensure_exists(user_id)

        await Transaction(self.store, "User deletion").run(
            lambda transaction_id: self.store.remove(user_id, transaction_id)
        )
        logger.info("Deleted user %s", user_id)
