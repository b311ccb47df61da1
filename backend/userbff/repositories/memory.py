from collections.abc import Mapping
from typing import Any
from uuid import UUID, uuid4

from userbff.core.security import PasswordHasher, PasswordHashingError
from userbff.repositories.base import UserRepository
from userbff.repositories.errors import PasswordError, UserNotFoundError
from userbff.repositories.users import Clock, coerce_new_user
from userbff.schemas.user import NewUser, User, utcnow


class InMemoryUserRepository(UserRepository):
    """Process-local repository for development and tests."""

    def __init__(self, hasher: PasswordHasher, clock: Clock = utcnow) -> None:
        self.hasher = hasher
        self._clock = clock
        self._users: dict[UUID, User] = {}

    def _hash_password(self, password: str) -> str:
        try:
            return self.hasher.hash(password)
        except PasswordHashingError as exc:
            raise PasswordError(f"Password hashing failed: {exc}") from exc

    def _get(self, user_id: UUID) -> User:
        try:
            return self._users[user_id]
        except KeyError:
            raise UserNotFoundError() from None

    async def find_all(self) -> list[User]:
        return list(self._users.values())

    async def find_by_id(self, user_id: UUID) -> User:
        return self._get(user_id)

    async def find_by_email(self, email: str) -> User | None:
        return next((user for user in self._users.values() if user.email == email), None)

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
        self._users[user.id] = user
        return user

    async def update(self, user_id: UUID, new_user: NewUser | Mapping[str, Any]) -> User:
        new_user = coerce_new_user(new_user)
        current = self._get(user_id)
        updated = current.model_copy(
            update={
                "username": new_user.username,
                "email": new_user.email,
                "password": self._hash_password(new_user.password),
                "updated_at": max(self._clock(), current.created_at),
            }
        )
        self._users[user_id] = updated
        return updated

    async def delete(self, user_id: UUID) -> None:
        self._get(user_id)
        del self._users[user_id]
