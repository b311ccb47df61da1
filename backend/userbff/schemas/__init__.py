from userbff.schemas.auth import AuthResponse, SignInCredentials
from userbff.schemas.user import NewUser, User, UserRead

__all__ = [
    "NewUser",
    "User",
    "UserRead",
    "SignInCredentials",
    "AuthResponse",
]
