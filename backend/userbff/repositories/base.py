from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any
from uuid import UUID

from userbff.schemas.user import NewUser, User


class UserRepository(ABC):
    """Persistence contract for user records.

    Implementations raise the errors from ``userbff.repositories.errors``.
    """

    @abstractmethod
    async def find_all(self) -> list[User]:
        """Return every stored user."""

    @abstractmethod
    async def find_by_id(self, user_id: UUID) -> User:
        """Return one user or raise ``UserNotFoundError``."""

    @abstractmethod
    async def find_by_email(self, email: str) -> User | None:
        """Return the user registered with ``email``, if any."""

    @abstractmethod
    async def create(self, new_user: NewUser | Mapping[str, Any]) -> User:
        """Hash the password, assign an id and store the user.

        A mapping is validated into ``NewUser`` first.
        """

    @abstractmethod
    async def update(self, user_id: UUID, new_user: NewUser | Mapping[str, Any]) -> User:
        """Replace username, email and password of an existing user."""

    @abstractmethod
    async def delete(self, user_id: UUID) -> None:
        """Hard-delete an existing user."""
