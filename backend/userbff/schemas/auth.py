from pydantic import BaseModel, Field

from userbff.schemas.user import UserRead


class SignInCredentials(BaseModel):
    email: str = Field(min_length=3, examples=["john.doe@example.com"])
    password: str = Field(min_length=1, examples=["password123"])


class AuthResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserRead
