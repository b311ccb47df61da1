from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from userbff.core.config import Settings


class TokenError(Exception):
    """Raised when token validation fails."""


class PasswordHashingError(Exception):
    """Raised when the hashing backend cannot produce or check a hash."""


class PasswordHasher:
    """One-way password hashing backed by passlib's bcrypt scheme."""

    def __init__(self, rounds: int = 12) -> None:
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "PasswordHasher":
        return cls(rounds=settings.bcrypt_rounds)

    def hash(self, password: str) -> str:
        try:
            return self._context.hash(password)
        except (ValueError, TypeError) as exc:
            raise PasswordHashingError(str(exc)) from exc

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        try:
            return self._context.verify(plain_password, hashed_password)
        except (ValueError, TypeError) as exc:
            raise PasswordHashingError(str(exc)) from exc


def create_access_token(
    subject: str,
    settings: Settings,
    expires_delta: timedelta | None = None,
) -> str:
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode: dict[str, Any] = {"sub": str(subject), "iat": issued_at, "exp": expire}
    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_access_token(token: str, settings: Settings) -> dict[str, Any]:
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as exc:
        raise TokenError("Invalid token") from exc
