from datetime import timedelta

from userbff.core.config import Settings
from userbff.core.security import PasswordHasher, PasswordHashingError, create_access_token
from userbff.repositories.base import UserRepository
from userbff.repositories.errors import PasswordError
from userbff.schemas.user import User


class AuthenticationError(Exception):
    """Raised when user authentication fails."""


async def authenticate_user(
    repository: UserRepository,
    hasher: PasswordHasher,
    email: str,
    password: str,
) -> User:
    user = await repository.find_by_email(email)
    if user is None:
        raise AuthenticationError("Invalid credentials")
    try:
        verified = hasher.verify(password, user.password)
    except PasswordHashingError as exc:
        raise PasswordError(f"Password verification failed: {exc}") from exc
    if not verified:
        raise AuthenticationError("Invalid credentials")
    return user


def create_token_for_user(user: User, settings: Settings) -> str:
    expires = timedelta(minutes=settings.access_token_expire_minutes)
    return create_access_token(subject=str(user.id), settings=settings, expires_delta=expires)
