from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from userbff.core.config import Settings
from userbff.core.security import PasswordHasher, TokenError, decode_access_token
from userbff.repositories.errors import UserNotFoundError
from userbff.schemas import User
from userbff.services.users import UserService

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings_dep),
    service: UserService = Depends(get_user_service),
) -> User:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise _unauthorized("Missing bearer token")

    try:
        payload = decode_access_token(credentials.credentials, settings)
    except TokenError:
        raise _unauthorized("Could not validate credentials") from None

    subject = payload.get("sub")
    try:
        user_id = UUID(str(subject))
    except ValueError:
        raise _unauthorized("Invalid token payload") from None

    try:
        return await service.get_user(user_id)
    except UserNotFoundError:
        raise _unauthorized("User not found") from None
