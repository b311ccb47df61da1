from collections.abc import Mapping
from typing import Any
from uuid import UUID

from userbff.repositories.base import UserRepository
from userbff.schemas.user import NewUser, User


class UserService:
    """What the HTTP layer talks to; repository errors pass through untouched."""

    def __init__(self, repository: UserRepository) -> None:
        self.repository = repository

    async def list_users(self) -> list[User]:
        return await self.repository.find_all()

    async def get_user(self, user_id: UUID) -> User:
        return await self.repository.find_by_id(user_id)

    async def create_user(self, new_user: NewUser | Mapping[str, Any]) -> User:
        return await self.repository.create(new_user)

    async def update_user(self, user_id: UUID, new_user: NewUser | Mapping[str, Any]) -> User:
        return await self.repository.update(user_id, new_user)

    async def delete_user(self, user_id: UUID) -> None:
        await self.repository.delete(user_id)
