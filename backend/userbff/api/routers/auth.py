from fastapi import APIRouter, Depends, HTTPException, status

from userbff.api.deps import (
    get_current_user,
    get_password_hasher,
    get_settings_dep,
    get_user_service,
)
from userbff.core.config import Settings
from userbff.core.security import PasswordHasher
from userbff.schemas import AuthResponse, SignInCredentials, User, UserRead
from userbff.services import auth as auth_service
from userbff.services.users import UserService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signin", response_model=AuthResponse)
async def sign_in(
    credentials: SignInCredentials,
    service: UserService = Depends(get_user_service),
    hasher: PasswordHasher = Depends(get_password_hasher),
    settings: Settings = Depends(get_settings_dep),
) -> AuthResponse:
    try:
        user = await auth_service.authenticate_user(
            service.repository, hasher, credentials.email, credentials.password
        )
    except auth_service.AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        ) from exc

    token = auth_service.create_token_for_user(user, settings)
    return AuthResponse(token=token, user=UserRead.model_validate(user))


@router.get("/check", response_model=UserRead)
async def check_auth(current_user: User = Depends(get_current_user)) -> UserRead:
    return UserRead.model_validate(current_user)


@router.post("/signout", response_model=str)
async def sign_out() -> str:
    return "Successfully signed out"
